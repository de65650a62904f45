"""
OTP Purge Service - periodically deletes expired pending codes
"""
import asyncio
import logging

from ..config import settings
from ..database import SessionLocal
from .otp_service import now_seconds
from .otp_store import OTPStore

logger = logging.getLogger(__name__)


class OTPPurgeService:
    """Background loop that sweeps stale pending OTPs independent of request traffic"""

    def __init__(self, interval: int = 60, ttl_seconds: int = 600, session_factory=SessionLocal):
        self.interval = interval
        self.ttl_seconds = ttl_seconds
        self.session_factory = session_factory
        self.running = False
        self._task = None

    async def start(self):
        """Start the purge loop"""
        if self.running:
            logger.warning("OTP purge service already running")
            return

        self.running = True
        self._task = asyncio.create_task(self._purge_loop())
        logger.info(f"🧹 OTP Purge Service: Started (every {self.interval}s)")

    async def stop(self):
        """Stop the purge loop"""
        self.running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("🧹 OTP Purge Service: Stopped")

    async def _purge_loop(self):
        while self.running:
            try:
                await self.purge_now()
            except Exception as e:
                # Idempotent; the next cycle simply tries again
                logger.error(f"Error in OTP purge loop: {e}", exc_info=True)

            await asyncio.sleep(self.interval)

    async def purge_now(self) -> int:
        """Run one purge pass (also used for manual triggers)"""
        db = self.session_factory()
        try:
            purged = OTPStore(db).purge_expired_pending(now_seconds() - self.ttl_seconds)
            if purged:
                logger.info(f"🧹 Purged {purged} expired pending OTPs")
            else:
                logger.debug("🧹 No expired OTPs to purge")
            return purged
        finally:
            db.close()


# Global instance
otp_purge_service = OTPPurgeService(
    interval=settings.OTP_PURGE_INTERVAL_SECONDS,
    ttl_seconds=settings.OTP_TTL_SECONDS,
)
