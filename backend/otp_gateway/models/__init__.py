"""
Models package - Import all SQLAlchemy models here
"""

from .otp import OTPRecord, OTPStatus

__all__ = [
    "OTPRecord",
    "OTPStatus"
]
