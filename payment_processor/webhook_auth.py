"""Authenticity check for inbound payment callbacks."""

import hashlib
import hmac
import logging

from django.conf import settings

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = 'X-Moolre-Signature'
SECRET_HEADER = 'X-Webhook-Secret'


def compute_signature(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode('utf-8'), body, hashlib.sha256).hexdigest()


def verify_webhook(body: bytes, headers) -> bool:
    """
    Accept a callback only if it carries a valid HMAC-SHA256 signature of the
    raw body, or the shared secret itself. Refuses everything when no secret
    is configured.
    """
    secret = settings.MOOLRE_WEBHOOK_SECRET
    if not secret:
        logger.error("[WEBHOOK] MOOLRE_WEBHOOK_SECRET not configured, refusing callback")
        return False

    signature = headers.get(SIGNATURE_HEADER)
    if signature:
        expected = compute_signature(body or b'', secret)
        return hmac.compare_digest(expected, signature.strip().lower())

    shared = headers.get(SECRET_HEADER)
    if shared:
        return hmac.compare_digest(secret.encode('utf-8'), shared.encode('utf-8'))

    return False
