from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from .config import settings
from .database import engine, Base
from .exceptions import OTPError
from .middleware.auth import BasicAuthMiddleware, UnhandledErrorMiddleware
from .services.otp_purge import otp_purge_service

# Import all models (required for SQLAlchemy to create tables)
from .models import OTPRecord

# Import routes
from .routes import otp


def configure_logging():
    handlers = [logging.StreamHandler()]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE))
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=handlers,
    )


configure_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="One-time code confirmation for porting submissions",
    version="1.0.0",
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url=None
)

# Last added runs first: CORS, then the error envelope, then the auth gate
app.add_middleware(BasicAuthMiddleware)
app.add_middleware(UnhandledErrorMiddleware)

# CORS - preflight is answered here, before the basic auth gate
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins_list,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Include routers
app.include_router(otp.router)


@app.exception_handler(OTPError)
async def otp_error_handler(request: Request, exc: OTPError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # 404 unknown path, 405 wrong method
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.on_event("startup")
async def startup_event():
    """Create tables and start the purge loop"""
    Base.metadata.create_all(bind=engine)
    logger.info(f"✅ {settings.APP_NAME} Started Successfully")
    logger.info(f"📍 Environment: {settings.APP_ENV}")

    if settings.OTP_PURGE_ENABLED:
        await otp_purge_service.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    await otp_purge_service.stop()
    logger.info(f"🛑 {settings.APP_NAME} Shutting Down...")


@app.get("/api/health")
async def health_check():
    return {
        "status": "healthy",
        "environment": settings.APP_ENV,
        "purge_running": otp_purge_service.running
    }
