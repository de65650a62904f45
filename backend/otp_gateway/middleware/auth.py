"""Request gate and error middleware

Both sit inside CORSMiddleware so their responses still carry the CORS
headers, and BasicAuthMiddleware runs before the route parses the body.
"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from ..utils.security import http_basic, verify_basic_auth

logger = logging.getLogger(__name__)

# Reachable without credentials
PUBLIC_PATHS = {"/api/health", "/api/docs", "/openapi.json"}


class BasicAuthMiddleware(BaseHTTPMiddleware):
    """Reject every non-preflight request without valid Basic credentials"""

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        try:
            verify_basic_auth(await http_basic(request))
        except HTTPException as exc:
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": exc.detail},
                headers=exc.headers,
            )

        return await call_next(request)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Render unexpected exceptions as the JSON error envelope"""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"error": "Internal error", "detail": str(exc)},
            )
