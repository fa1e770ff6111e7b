"""
Business outcome exceptions and their API rendering.

Expected outcomes (sold out, already checked in, gateway rejection, ...) are
raised as BusinessError subclasses and turned into structured 4xx/5xx bodies
by `business_error_response`, so the API never reports them as system errors.
"""

import logging

from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class BusinessError(Exception):
    """Base class for expected, user-facing outcomes."""

    code = 'error'
    message = 'The request could not be completed'
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message=None, **details):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


def business_error_response(error: BusinessError, context=None) -> Response:
    """Render a BusinessError as {'success': False, 'error': code, 'message': ...}."""
    logger.warning(
        f"[BUSINESS] {error.code}: {error.message}",
        extra={'error_code': error.code, **(context or {})}
    )
    body = {
        'success': False,
        'error': error.code,
        'message': error.message,
    }
    if error.details:
        body['details'] = error.details
    return Response(body, status=error.http_status)
