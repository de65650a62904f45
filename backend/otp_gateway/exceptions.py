"""
OTP error taxonomy

Every error raised by the OTP lifecycle carries the HTTP status it maps to
and any extra fields that belong in the response envelope.
"""
from typing import Optional

from fastapi import status


class OTPError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "OTP error"

    def __init__(self, message: Optional[str] = None, **extra):
        self.message = message or self.message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        body.update({k: v for k, v in self.extra.items() if v is not None})
        return body


class OTPValidationError(OTPError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Missing required fields"


class OTPNotFoundError(OTPError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "OTP not found or expired"


class OTPAlreadyVerifiedError(OTPError):
    status_code = status.HTTP_409_CONFLICT
    message = "OTP already verified"


class OTPAttemptsExhaustedError(OTPError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Attempts exhausted; request a new code."


class OTPExpiredError(OTPError):
    status_code = status.HTTP_410_GONE
    message = "OTP expired"


class OTPIncorrectCodeError(OTPError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Incorrect code. Try again."

    def __init__(self, attempts_left: int, message: Optional[str] = None):
        super().__init__(message, attempts_left=attempts_left)
        self.attempts_left = attempts_left


class SmsDeliveryError(OTPError):
    status_code = status.HTTP_502_BAD_GATEWAY
    message = "Failed to send SMS"

    def __init__(self, detail: str, message: Optional[str] = None):
        super().__init__(message, detail=detail)
        self.detail = detail


class OTPStoreError(OTPError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "OTP store unavailable"


class InvalidTransitionError(RuntimeError):
    """Raised when code tries to move a record along an illegal status edge."""
