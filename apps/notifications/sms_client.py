"""Client for the Moolre SMS (VAS) API."""
import logging
import time

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class SMSError(Exception):
    """Base class for SMS delivery errors."""


class SMSContractViolation(SMSError):
    """The SMS gateway answered with something that is not a JSON object."""


class SMSRejected(SMSError):
    """The SMS gateway refused the message."""


class MoolreSMSClient:
    """Client for Moolre's bulk SMS endpoint."""

    def __init__(self):
        self.base_url = settings.MOOLRE_API_BASE.rstrip('/')
        self.vas_key = settings.MOOLRE_VAS_KEY
        self.sender_id = settings.SMS_SENDER_ID
        self.timeout = settings.MOOLRE_TIMEOUT_SECONDS

    @property
    def is_configured(self) -> bool:
        return bool(self.vas_key)

    def send(self, recipients, message: str, ref: str = None) -> dict:
        """
        Send one message to one or more recipients.

        Args:
            recipients: phone number or list of phone numbers (233XXXXXXXXX)
            message: message text
            ref: optional client reference echoed by the gateway

        Returns:
            Parsed gateway response.

        Raises:
            SMSContractViolation, SMSRejected, requests.RequestException
        """
        if isinstance(recipients, str):
            recipients = [recipients]
        if not self.is_configured:
            raise SMSError("MOOLRE_VAS_KEY is not configured")

        url = f"{self.base_url}/open/sms/send"
        payload = {
            'type': 1,
            'senderid': self.sender_id,
            'messages': [
                {'recipient': recipient, 'message': message, 'ref': ref or ''}
                for recipient in recipients
            ],
        }
        headers = {
            'Content-Type': 'application/json',
            'X-API-VASKEY': self.vas_key,
        }

        start = time.time()
        response = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
        duration_ms = int((time.time() - start) * 1000)
        logger.info(f"[SMS] POST {url} -> {response.status_code} in {duration_ms}ms ({len(recipients)} recipients)")

        try:
            data = response.json()
        except ValueError:
            raise SMSContractViolation(f"Non-JSON response from SMS gateway (HTTP {response.status_code})")
        if not isinstance(data, dict):
            raise SMSContractViolation("SMS gateway response is not an object")

        if not response.ok or data.get('status') != 1:
            raise SMSRejected(data.get('message') or f"SMS rejected (HTTP {response.status_code})")

        return data
