"""
Notification dispatcher.

Messages are queued only after the surrounding transaction commits, so a
rolled-back state change never texts anyone, and a broker outage never
fails the operation that triggered the message.
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction

from apps.registrations.states import PaymentStatus
from .tasks import send_sms_notification

logger = logging.getLogger(__name__)

DEFAULT_PENDING_TEMPLATE = (
    'Hi {name}, your registration for "{event}" is pending payment of GH₵{amount}. '
    'Ticket: {ticket_id}. Please complete payment to confirm your spot.'
)


def _enqueue(recipient, message, ref):
    try:
        send_sms_notification.delay(recipient, message, ref)
    except Exception as e:
        logger.error(f"[SMS] Could not queue {ref} for {recipient}: {e}")


def queue_sms(recipient, message, ref=None):
    """Queue one SMS after the current transaction commits. Returns False when skipped."""
    if not recipient:
        logger.warning(f"[SMS] No phone number for {ref}, skipping")
        return False
    if not settings.MOOLRE_VAS_KEY:
        logger.warning(f"[SMS] MOOLRE_VAS_KEY not configured, skipping {ref}")
        return False
    transaction.on_commit(lambda: _enqueue(recipient, message, ref))
    return True


def registration_created_message(registration):
    if registration.payment_status == PaymentStatus.PENDING:
        status_text = 'pending payment'
        closing = 'Please complete payment via the USSD prompt on your phone.'
    else:
        status_text = 'confirmed'
        closing = 'See you there!'
    return (
        f'Hi {registration.name}, your registration for "{registration.event.title}" is {status_text}. '
        f'Ticket ID: {registration.ticket_id}. {closing}'
    )


def payment_confirmed_message(registration):
    return (
        f'Payment confirmed! Hi {registration.name}, your registration for '
        f'"{registration.event.title}" is confirmed.\n'
        f'Ticket ID: {registration.ticket_id}\n'
        f'Ticket Type: {registration.ticket_type.name}\n'
        f'Amount: GH₵{registration.amount}\n'
        f'See you there!'
    )


def notify_registration_created(registration):
    return queue_sms(
        registration.phone,
        registration_created_message(registration),
        ref=registration.ticket_id,
    )


def notify_payment_confirmed(registration):
    return queue_sms(
        registration.phone,
        payment_confirmed_message(registration),
        ref=registration.ticket_id,
    )


def send_pending_payment_reminders(event, message_template=None):
    """
    Text every attendee of `event` whose payment is still pending.

    The template may use {name}, {event}, {ticket_id} and {amount}.

    Returns:
        Number of messages queued.
    """
    template = message_template or DEFAULT_PENDING_TEMPLATE
    try:
        template.format(name='', event='', ticket_id='', amount=Decimal('0.00'))
    except (KeyError, IndexError, ValueError) as e:
        raise ValueError(f"Invalid message template: {e}")

    pending = event.registrations.filter(payment_status=PaymentStatus.PENDING).exclude(phone='')

    queued = 0
    for registration in pending:
        message = template.format(
            name=registration.name,
            event=event.title,
            ticket_id=registration.ticket_id,
            amount=registration.amount,
        )
        if queue_sms(registration.phone, message, ref=registration.ticket_id):
            queued += 1

    logger.info(f"[SMS] Queued {queued} pending-payment reminders for event {event.id}")
    return queued
