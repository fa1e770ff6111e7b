"""Celery tasks for attendee notifications."""

import logging

import requests
from celery import shared_task

from .sms_client import MoolreSMSClient, SMSError

logger = logging.getLogger(__name__)


@shared_task(ignore_result=True)
def send_sms_notification(recipients, message, ref=None):
    """
    Best-effort SMS delivery.

    Runs at most once: delivery errors are logged and dropped, never retried,
    and never reach the code that queued the message.
    """
    try:
        MoolreSMSClient().send(recipients, message, ref=ref)
        logger.info(f"[SMS] Sent {ref or 'message'} to {recipients}")
        return True
    except (SMSError, requests.RequestException) as e:
        logger.error(f"[SMS] Failed to send {ref or 'message'} to {recipients}: {e}")
        return False
