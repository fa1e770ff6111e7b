"""
Moolre mobile money payment initiation.

Asks the gateway to push a USSD payment prompt to the attendee's phone. The
outcome arrives later through the payment webhook; this module only records
the gateway's tracking token on the registration.
"""

import time
from typing import Dict, Any, Optional

import requests
from django.conf import settings
from django.db import transaction
from rest_framework import status

from apps.registrations.exceptions import StaleRegistrationState
from apps.registrations.models import Registration
from apps.registrations.services import fail_payment
from apps.registrations.states import RegistrationState
from core.exceptions import BusinessError
from .models import PaymentTransaction
import logging

logger = logging.getLogger(__name__)


class PaymentServiceException(Exception):
    """Payment service misconfiguration"""
    pass


class GatewayRejected(BusinessError):
    code = 'gateway_rejected'
    message = 'Payment initiation failed'
    http_status = status.HTTP_400_BAD_REQUEST


class UpstreamContractViolation(BusinessError):
    code = 'upstream_contract_violation'
    message = 'The payment gateway returned an invalid response'
    http_status = status.HTTP_502_BAD_GATEWAY


class GatewayUnavailable(BusinessError):
    code = 'gateway_unavailable'
    message = 'The payment gateway could not be reached, please try again'
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE


class PaymentNotAllowed(BusinessError):
    code = 'payment_not_allowed'
    message = 'This registration is not awaiting payment'
    http_status = status.HTTP_409_CONFLICT


def log_transaction(registration: Optional[Registration], transaction_type: str,
                    request_data: Dict, response_data: Any,
                    is_successful: bool, error_message: str = "",
                    duration_ms: Optional[int] = None):
    """Log a gateway call for audit and debugging"""
    if not isinstance(response_data, dict):
        response_data = {'raw': str(response_data)[:2000]}
    PaymentTransaction.objects.create(
        registration=registration,
        transaction_type=transaction_type,
        request_data=request_data,
        response_data=response_data,
        is_successful=is_successful,
        error_message=error_message,
        duration_ms=duration_ms
    )


class MoolrePaymentService:
    """
    Moolre USSD payment collection.

    No automatic retry: a timed-out request may still have produced a
    prompt, and the webhook settles the outcome either way.
    """

    DEFAULT_DESCRIPTION = 'Event ticket payment'

    def __init__(self):
        self.base_url = settings.MOOLRE_API_BASE.rstrip('/')
        self.api_user = settings.MOOLRE_API_USER
        self.api_key = settings.MOOLRE_API_KEY
        self.api_pubkey = settings.MOOLRE_API_PUBKEY
        self.timeout = settings.MOOLRE_TIMEOUT_SECONDS

        if not self.api_user or not self.api_key or not self.api_pubkey:
            raise PaymentServiceException("Moolre API credentials not configured")

    def _headers(self) -> Dict[str, str]:
        return {
            'Content-Type': 'application/json',
            'X-API-USER': self.api_user,
            'X-API-KEY': self.api_key,
            'X-API-PUBKEY': self.api_pubkey,
        }

    def _build_request(self, registration: Registration, description: Optional[str]) -> Dict[str, Any]:
        return {
            'type': 1,
            'channel': '13',
            'currency': registration.currency or settings.PAYMENT_CURRENCY,
            'payer': registration.phone,
            'amount': float(registration.amount),
            'accountnumber': registration.phone,
            'externalref': str(registration.id),
            'reference': description or self.DEFAULT_DESCRIPTION,
        }

    def initiate_payment(self, registration: Registration, description: Optional[str] = None) -> Dict[str, Any]:
        """
        Request a payment prompt for a pending registration.

        Returns:
            dict with message, reference (gateway tracking token, may be None) and data.

        Raises:
            PaymentNotAllowed: the registration is not PENDING_PAYMENT.
            GatewayUnavailable: network error or timeout; registration untouched.
            UpstreamContractViolation: the body was not a JSON object; registration untouched.
            GatewayRejected: the gateway refused; registration moved to PAYMENT_FAILED.
        """
        if registration.state != RegistrationState.PENDING_PAYMENT:
            raise PaymentNotAllowed(state=registration.state.name)

        url = f"{self.base_url}/open/transact/payment"
        request_data = self._build_request(registration, description)

        logger.info(f"[MOOLRE] POST {url} for registration {registration.id} amount={request_data['amount']}")
        start_time = time.time()
        try:
            response = requests.post(url, json=request_data, headers=self._headers(), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.error(f"[MOOLRE] Gateway unreachable for registration {registration.id}: {e}")
            log_transaction(registration, 'initiate', request_data, {}, False, str(e), duration_ms)
            raise GatewayUnavailable()

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(f"[MOOLRE] Response {response.status_code} in {duration_ms}ms: {response.text[:500]}")

        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            logger.error(
                f"[MOOLRE] Non-JSON payment response for registration {registration.id}: {response.text[:200]}"
            )
            log_transaction(
                registration, 'initiate', request_data, response.text,
                False, 'Invalid response from gateway', duration_ms
            )
            raise UpstreamContractViolation()

        if not response.ok or data.get('status') != 1:
            reason = data.get('message') or 'Unknown error from Moolre'
            log_transaction(registration, 'initiate', request_data, data, False, str(reason), duration_ms)
            try:
                fail_payment(registration, reason=f"Payment initiation rejected: {reason}")
            except StaleRegistrationState:
                logger.error(f"[MOOLRE] Registration {registration.id} changed while its payment was rejected")
            raise GatewayRejected(reason=str(reason))

        payload = data.get('data') if isinstance(data.get('data'), dict) else {}
        reference = payload.get('reference') or payload.get('transaction_id')
        log_transaction(registration, 'initiate', request_data, data, True, duration_ms=duration_ms)

        if reference:
            self._store_reference(registration, str(reference))

        return {
            'message': data.get('message') or 'Payment prompt sent to your phone',
            'reference': reference,
            'data': data.get('data'),
        }

    def _store_reference(self, registration: Registration, reference: str):
        """Save the tracking token, but only while the registration is still pending."""
        pending = RegistrationState.PENDING_PAYMENT
        with transaction.atomic():
            updated = Registration.objects.filter(
                pk=registration.pk,
                status=pending.status,
                payment_status=pending.payment_status,
            ).update(payment_reference=reference)
        if updated:
            registration.payment_reference = reference
        else:
            logger.warning(
                f"[MOOLRE] Registration {registration.id} left pending before reference {reference} was stored"
            )
