"""
Payment callback reconciliation.

Turns a Moolre payment callback into at most one registration state change.
Callbacks may arrive more than once, out of order, or for registrations
that were cancelled meanwhile; every state change is a compare-and-swap on
the expected prior state, so replays are no-ops.
"""

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional

from django.db import transaction
from django.utils import timezone

from apps.notifications.services import notify_payment_confirmed
from apps.registrations.exceptions import InvalidTransition
from apps.registrations.models import Registration
from apps.registrations.services import fail_payment
from apps.registrations.states import RegistrationState
from .models import PaymentWebhook
from .services import log_transaction

logger = logging.getLogger(__name__)


class PaymentOutcome(Enum):
    SUCCESS = 'success'
    FAILURE = 'failure'
    INDETERMINATE = 'indeterminate'


SUCCESS_STATUSES = frozenset({'success', 'successful', 'completed', 'paid', '1'})
FAILURE_STATUSES = frozenset({'failed', 'failure', 'declined', 'cancelled', 'rejected', '0'})


def normalize_status(raw) -> PaymentOutcome:
    """
    Map a gateway status value to a payment outcome.

    Integers 1/0 and their string forms count; booleans never do.
    Anything unrecognized is INDETERMINATE.
    """
    if isinstance(raw, bool):
        return PaymentOutcome.INDETERMINATE
    if isinstance(raw, int):
        raw = str(raw)
    if not isinstance(raw, str):
        return PaymentOutcome.INDETERMINATE

    value = raw.strip().lower()
    if value in SUCCESS_STATUSES:
        return PaymentOutcome.SUCCESS
    if value in FAILURE_STATUSES:
        return PaymentOutcome.FAILURE
    return PaymentOutcome.INDETERMINATE


class WebhookResult:
    APPLIED = 'applied'
    DUPLICATE = 'duplicate'
    STALE = 'stale'
    INDETERMINATE = 'indeterminate'
    NOT_FOUND = 'not_found'
    AMBIGUOUS = 'ambiguous'
    AMOUNT_MISMATCH = 'amount_mismatch'
    INVALID_PAYLOAD = 'invalid_payload'


@dataclass
class ReconciliationResult:
    result: str
    outcome: PaymentOutcome = PaymentOutcome.INDETERMINATE
    registration: Optional[Registration] = None
    message: str = ''

    def as_dict(self) -> Dict[str, Any]:
        return {
            'result': self.result,
            'outcome': self.outcome.value,
            'registration_id': str(self.registration.id) if self.registration else None,
        }


TARGETS = {
    PaymentOutcome.SUCCESS: RegistrationState.CONFIRMED_PAID,
    PaymentOutcome.FAILURE: RegistrationState.PAYMENT_FAILED,
}

# States in which an outcome has already been applied
SETTLED = {
    PaymentOutcome.SUCCESS: frozenset({RegistrationState.CONFIRMED_PAID, RegistrationState.CHECKED_IN_PAID}),
    PaymentOutcome.FAILURE: frozenset({RegistrationState.PAYMENT_FAILED}),
}


def _as_text(value) -> str:
    if value is None:
        return ''
    return str(value).strip()


class WebhookReconciler:
    """Applies one payment callback to its registration."""

    def reconcile(self, payload, headers=None) -> ReconciliationResult:
        webhook = PaymentWebhook.objects.create(
            headers=dict(headers or {}),
            payload=payload if isinstance(payload, dict) else {'raw': _as_text(payload)[:2000]},
        )
        try:
            outcome = self._reconcile(webhook, payload)
        except Exception as e:
            webhook.error_message = str(e)
            webhook.processed_at = timezone.now()
            webhook.save(update_fields=['error_message', 'processed_at', 'updated_at'])
            logger.exception(f"[WEBHOOK] Error processing callback {webhook.id}")
            raise

        webhook.registration = outcome.registration
        webhook.outcome = outcome.outcome.value
        webhook.result = outcome.result
        webhook.error_message = outcome.message
        webhook.processed_at = timezone.now()
        webhook.save()

        log_transaction(
            outcome.registration, 'webhook',
            webhook.payload, outcome.as_dict(),
            outcome.result in (WebhookResult.APPLIED, WebhookResult.DUPLICATE),
            outcome.message,
        )
        return outcome

    def _reconcile(self, webhook, payload) -> ReconciliationResult:
        if not isinstance(payload, dict):
            return ReconciliationResult(WebhookResult.INVALID_PAYLOAD, message='Payload is not an object')

        data = payload.get('data') if isinstance(payload.get('data'), dict) else {}
        raw_status = payload.get('status')
        if raw_status is None:
            raw_status = data.get('txstatus')
        reference = _as_text(data.get('externalref') or payload.get('reference'))
        transaction_id = _as_text(
            data.get('transactionid') or data.get('transaction_id') or payload.get('transaction_id')
        )

        webhook.raw_status = _as_text(raw_status)[:100]
        webhook.reference = reference[:255]
        webhook.transaction_id = transaction_id[:255]

        if not reference and not transaction_id:
            logger.warning(f"[WEBHOOK] Callback {webhook.id} has no reference or transaction id")
            return ReconciliationResult(WebhookResult.INVALID_PAYLOAD, message='Missing reference or transaction_id')

        outcome = normalize_status(raw_status)

        registration, lookup_error = self._find_registration(reference, transaction_id)
        if registration is None:
            logger.warning(
                f"[WEBHOOK] {lookup_error} for reference={reference!r} transaction_id={transaction_id!r}"
            )
            return ReconciliationResult(lookup_error, outcome, message=lookup_error)

        if outcome == PaymentOutcome.INDETERMINATE:
            logger.info(
                f"[WEBHOOK] Unrecognized status {raw_status!r} for registration {registration.id}, no change"
            )
            return ReconciliationResult(WebhookResult.INDETERMINATE, outcome, registration)

        if outcome == PaymentOutcome.SUCCESS:
            mismatch = self._check_amount(registration, payload, data)
            if mismatch:
                logger.error(f"[WEBHOOK] Registration {registration.id}: {mismatch}")
                return ReconciliationResult(WebhookResult.AMOUNT_MISMATCH, outcome, registration, mismatch)

        return self._apply(registration, outcome)

    def _find_registration(self, reference, transaction_id):
        """
        Look the registration up by its id (the reference we sent as externalref),
        then by the gateway's tracking token.

        Returns:
            (registration, None) or (None, WebhookResult.NOT_FOUND / AMBIGUOUS)
        """
        queryset = Registration.objects.select_related('event', 'ticket_type')

        by_reference = None
        if reference:
            try:
                by_reference = queryset.filter(pk=uuid.UUID(reference)).first()
            except ValueError:
                by_reference = queryset.filter(payment_reference=reference).first()

        by_transaction = None
        if transaction_id:
            by_transaction = queryset.filter(payment_reference=transaction_id).first()

        if by_reference and by_transaction and by_reference.pk != by_transaction.pk:
            return None, WebhookResult.AMBIGUOUS
        registration = by_reference or by_transaction
        if registration is None:
            return None, WebhookResult.NOT_FOUND
        return registration, None

    def _check_amount(self, registration, payload, data) -> str:
        amount = payload.get('amount', data.get('amount'))
        if amount is not None:
            try:
                paid = Decimal(str(amount))
            except InvalidOperation:
                return f"Unreadable amount {amount!r}"
            if paid != registration.amount:
                return f"Paid amount {paid} does not match expected {registration.amount}"

        currency = payload.get('currency', data.get('currency'))
        if currency and str(currency).strip().upper() != registration.currency.upper():
            return f"Currency {currency} does not match expected {registration.currency}"
        return ''

    def _apply(self, registration, outcome) -> ReconciliationResult:
        target = TARGETS[outcome]
        try:
            if outcome == PaymentOutcome.SUCCESS:
                with transaction.atomic():
                    registration.transition_to(target)
                    notify_payment_confirmed(registration)
            else:
                fail_payment(registration, reason='Payment declined by gateway')
        except InvalidTransition:
            registration.refresh_from_db()
            if registration.state in SETTLED[outcome]:
                logger.info(f"[WEBHOOK] Duplicate {outcome.value} callback for registration {registration.id}")
                return ReconciliationResult(WebhookResult.DUPLICATE, outcome, registration)
            message = (
                f"{outcome.value} callback for registration {registration.id} "
                f"which is already {registration.state.name}"
            )
            # Money may have moved for a cancelled registration; an operator has to look
            logger.error(f"[WEBHOOK] Stale callback: {message}")
            return ReconciliationResult(WebhookResult.STALE, outcome, registration, message)

        logger.info(f"[WEBHOOK] Registration {registration.id} -> {target.name}")
        return ReconciliationResult(WebhookResult.APPLIED, outcome, registration)
