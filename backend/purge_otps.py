"""
Purge expired pending OTPs once
Schedule from cron when the in-process purge loop is disabled, e.g.

    */5 * * * * cd /srv/otp/backend && python3 purge_otps.py
"""
import asyncio
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from otp_gateway.config import settings
from otp_gateway.services.otp_purge import OTPPurgeService


def main():
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    service = OTPPurgeService(ttl_seconds=settings.OTP_TTL_SECONDS)
    try:
        purged = asyncio.run(service.purge_now())
    except Exception as e:
        print(f"❌ Purge failed: {e}")
        sys.exit(1)
    print(f"🧹 Purged {purged} expired pending OTPs")


if __name__ == "__main__":
    main()
