"""
Basic auth gate for the OTP endpoints
"""

from fastapi import HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from typing import Optional
import secrets
from ..config import settings

# auto_error=False so a missing header gets our own 401 + realm
# (called from BasicAuthMiddleware, ahead of body parsing)
http_basic = HTTPBasic(auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": 'Basic realm="Restricted"'}
    )


def verify_basic_auth(credentials: Optional[HTTPBasicCredentials]) -> bool:
    """
    Verify HTTP Basic credentials against BASIC_USER / BASIC_PASS

    Returns:
        True if valid, raises HTTPException if invalid
    """
    if not settings.BASIC_AUTH_ENABLED:
        return True  # Auth check disabled

    if not settings.BASIC_USER or not settings.BASIC_PASS:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Basic auth credentials not configured on server"
        )

    if credentials is None:
        raise _unauthorized()

    user_ok = secrets.compare_digest(credentials.username.encode(), settings.BASIC_USER.encode())
    pass_ok = secrets.compare_digest(credentials.password.encode(), settings.BASIC_PASS.encode())
    if not (user_ok and pass_ok):
        raise _unauthorized()

    return True
