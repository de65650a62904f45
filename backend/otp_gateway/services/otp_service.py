"""
OTP Lifecycle Service
Issues one-time codes per phone number and verifies them against expiry
and a bounded number of wrong guesses.
"""
import logging
import secrets
import time
from typing import Callable, Optional

from ..exceptions import (
    InvalidTransitionError,
    OTPAlreadyVerifiedError,
    OTPAttemptsExhaustedError,
    OTPExpiredError,
    OTPIncorrectCodeError,
    OTPNotFoundError,
    OTPValidationError,
    SmsDeliveryError,
)
from ..models.otp import OTPRecord, OTPStatus
from .otp_store import OTPStore
from .sms_service import SmsSender, build_otp_message

logger = logging.getLogger(__name__)


def now_seconds() -> int:
    return int(time.time())


def generate_code(length: int = 7) -> str:
    """Random decimal code of ``length`` digits, never with a leading zero"""
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def _clean(value: Optional[str]) -> str:
    return str(value or "").strip()


class OTPLifecycleService:
    """
    Request/verify/purge logic for OTP records.

    Holds no state of its own; everything lives in the store. TTL and the
    attempt limit are passed in so tests can compress them.
    """

    def __init__(
        self,
        store: OTPStore,
        sms_sender: SmsSender,
        ttl_seconds: int = 600,
        max_failed_attempts: int = 2,
        code_length: int = 7,
        sms_from: Optional[str] = None,
        clock: Callable[[], int] = now_seconds,
    ):
        self.store = store
        self.sms_sender = sms_sender
        self.ttl_seconds = ttl_seconds
        self.max_failed_attempts = max_failed_attempts
        self.code_length = code_length
        self.sms_from = sms_from
        self.clock = clock

    def is_expired(self, record: OTPRecord, now: Optional[int] = None) -> bool:
        now = self.clock() if now is None else now
        return record.created_at < now - self.ttl_seconds

    def _transition(self, record: OTPRecord, target: OTPStatus) -> None:
        if not record.state.can_transition_to(target):
            raise InvalidTransitionError(f"{record.number}: {record.status} -> {target.value}")

    # ========== REQUEST ==========

    async def request_code(self, number: str, lsp: str, order_ref: str) -> dict:
        number, lsp, order_ref = _clean(number), _clean(lsp), _clean(order_ref)
        if not number or not lsp or not order_ref:
            raise OTPValidationError("Missing required fields: Number, LSP, OR")

        code = generate_code(self.code_length)
        created_at = self.clock()

        # Full overwrite: resets attempts and status of any previous code
        self.store.upsert_pending(number, code, lsp, order_ref, created_at)

        try:
            await self.sms_sender.send(self.sms_from, number, build_otp_message(code))
        except BaseException as e:
            # Any non-success, timeouts and cancellation included, means no code
            # was delivered; don't leave it behind for a later verify
            self.store.delete_if_pending(number)
            logger.warning(f"OTP delivery to {number} failed, record rolled back: {e!r}")
            if isinstance(e, SmsDeliveryError) or not isinstance(e, Exception):
                # cancellation and interpreter exits propagate unchanged
                raise
            raise SmsDeliveryError(f"SMS send failed: {e}") from e

        logger.info(f"OTP issued for {number} (order {order_ref})")
        return {"status": "sent"}

    # ========== VERIFY ==========

    def verify_code(self, number: str, code: str) -> dict:
        number, code = _clean(number), _clean(code)
        if not number or not code:
            raise OTPValidationError("Missing required fields: Number, code")

        # Each lost compare-and-set means the counter moved or the status left
        # pending, so the loop is bounded by the attempt limit.
        for _ in range(self.max_failed_attempts + 2):
            result = self._verify_once(number, code)
            if result is not None:
                return result
            logger.debug(f"Concurrent update on {number}, re-evaluating")

        raise OTPAttemptsExhaustedError()

    def _verify_once(self, number: str, code: str) -> Optional[dict]:
        record = self.store.get(number)

        if record is None:
            raise OTPNotFoundError()

        if record.state is OTPStatus.SUCCESS:
            raise OTPAlreadyVerifiedError()
        if record.state is OTPStatus.FAILED:
            raise OTPAttemptsExhaustedError()

        if self.is_expired(record):
            self.store.delete_if_pending(number)
            logger.info(f"OTP for {number} expired, record deleted")
            raise OTPExpiredError()

        if record.failed_attempts >= self.max_failed_attempts:
            self._transition(record, OTPStatus.FAILED)
            self.store.set_status(number, OTPStatus.FAILED)
            raise OTPAttemptsExhaustedError("Too many attempts. Request a new code.")

        if secrets.compare_digest(record.code.encode(), code.encode()):
            self._transition(record, OTPStatus.SUCCESS)
            self.store.set_status(number, OTPStatus.SUCCESS)
            logger.info(f"OTP verified for {number}")
            return {"status": "success"}

        new_attempts = record.failed_attempts + 1
        exhausted = new_attempts >= self.max_failed_attempts
        target = OTPStatus.FAILED if exhausted else OTPStatus.PENDING
        self._transition(record, target)

        if not self.store.increment_attempts(number, new_attempts, target):
            return None

        if exhausted:
            logger.info(f"OTP for {number} locked after {new_attempts} wrong attempts")
            raise OTPAttemptsExhaustedError("Incorrect code. Attempts exhausted; request a new code.")

        raise OTPIncorrectCodeError(attempts_left=self.max_failed_attempts - new_attempts)

    # ========== PURGE ==========

    def purge_expired_pending(self) -> int:
        """Delete pending codes older than the TTL; resolved records are kept"""
        purged = self.store.purge_expired_pending(self.clock() - self.ttl_seconds)
        if purged:
            logger.info(f"Purged {purged} expired pending OTPs")
        return purged
