"""
OTP Routes
Request a porting confirmation code by SMS and verify it
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..schemas.otp import OTPRequest, OTPVerify
from ..services.otp_service import OTPLifecycleService
from ..services.otp_store import OTPStore
from ..services.sms_service import SmsSender, get_sms_sender

router = APIRouter(tags=["OTP"])


def get_otp_service(
    db: Session = Depends(get_db),
    sms_sender: SmsSender = Depends(get_sms_sender)
) -> OTPLifecycleService:
    service = OTPLifecycleService(
        OTPStore(db),
        sms_sender,
        ttl_seconds=settings.OTP_TTL_SECONDS,
        max_failed_attempts=settings.OTP_MAX_FAILED_ATTEMPTS,
        code_length=settings.OTP_CODE_LENGTH,
        sms_from=settings.SMS_FROM,
    )
    # Housekeeping: sweep expired pending rows before any logic runs
    service.purge_expired_pending()
    return service


@router.post("/request")
async def request_otp(data: OTPRequest, service: OTPLifecycleService = Depends(get_otp_service)):
    """Generate a code for the number and send it by SMS"""
    return await service.request_code(data.number, data.lsp, data.order_ref)


@router.post("/otp")
async def verify_otp(data: OTPVerify, service: OTPLifecycleService = Depends(get_otp_service)):
    """Verify the code sent to the number"""
    return service.verify_code(data.number, data.supplied_code)
