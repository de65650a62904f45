from pydantic_settings import BaseSettings
from typing import List, Optional
import os

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Porting OTP Gateway"
    APP_ENV: str = "development"
    DEBUG: bool = True

    # Database (PostgreSQL in production)
    DATABASE_URL: str = "sqlite:///./otp_gateway.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Basic auth gate for /request and /otp
    BASIC_AUTH_ENABLED: bool = True
    BASIC_USER: Optional[str] = None
    BASIC_PASS: Optional[str] = None

    # CORS
    ALLOWED_ORIGIN: str = "*"

    @property
    def origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGIN.split(",") if origin.strip()]

    # SMS API
    SMS_API_URL: str = ""
    SMS_TOKEN: str = ""
    SMS_FROM: str = "Porting"
    SMS_TIMEOUT_SECONDS: int = 10

    # OTP lifecycle
    OTP_TTL_SECONDS: int = 600  # 10 minutes
    OTP_MAX_FAILED_ATTEMPTS: int = 2
    OTP_CODE_LENGTH: int = 7

    # Background purge of expired pending codes
    OTP_PURGE_ENABLED: bool = True
    OTP_PURGE_INTERVAL_SECONDS: int = 60

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

# Create settings instance
settings = Settings()

if settings.LOG_FILE and os.path.dirname(settings.LOG_FILE):
    os.makedirs(os.path.dirname(settings.LOG_FILE), exist_ok=True)
