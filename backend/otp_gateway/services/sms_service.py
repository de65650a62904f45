"""
SMS delivery via the provider's HTTP send endpoint
"""
import asyncio
import logging
from typing import Optional

import requests

from ..config import settings
from ..exceptions import SmsDeliveryError

logger = logging.getLogger(__name__)


def build_otp_message(code: str) -> str:
    return "\n".join([
        "Hi,",
        "",
        "Thank you for your porting submission.",
        "",
        f"Your unique code: {code}",
        "",
    ])


class SmsSender:
    """Posts ``{from, to, text}`` to the SMS API with a bearer token"""

    def __init__(
        self,
        api_url: Optional[str] = None,
        token: Optional[str] = None,
        sender_id: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        self.api_url = api_url if api_url is not None else settings.SMS_API_URL
        self.token = token if token is not None else settings.SMS_TOKEN
        self.sender_id = sender_id if sender_id is not None else settings.SMS_FROM
        self.timeout = timeout if timeout is not None else settings.SMS_TIMEOUT_SECONDS

    async def send(self, sender: Optional[str], to: str, text: str) -> dict:
        """
        Send one message. A falsy ``sender`` falls back to SMS_FROM.

        Returns the provider's JSON body (or an empty dict when it has none).
        Raises SmsDeliveryError on any non-2xx response or transport error.
        """
        if not self.api_url or not self.token:
            raise SmsDeliveryError("SMS_API_URL / SMS_TOKEN not configured")

        payload = {
            "from": sender or self.sender_id,
            "to": to,
            "text": text,
        }
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

        # requests is blocking; keep it off the event loop
        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(
                None,
                lambda: requests.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
            )
        except requests.RequestException as e:
            logger.warning(f"SMS transport error for {to}: {e}")
            raise SmsDeliveryError(f"SMS send failed: {e}") from e

        if not response.ok:
            logger.warning(f"SMS API returned HTTP {response.status_code} for {to}")
            raise SmsDeliveryError(f"SMS send failed ({response.status_code}): {response.text}")

        try:
            return response.json()
        except ValueError:
            return {}


def get_sms_sender() -> SmsSender:
    return SmsSender()
