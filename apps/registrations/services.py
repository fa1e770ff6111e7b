"""
Registration services: create, check in, cancel and look up registrations.

Creation reserves inventory first and inserts the registration inside the
same database transaction, so a failed insert never leaves a unit reserved.
Terminal state changes release the unit in the same transaction as the
state change.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from apps.events import inventory
from apps.events.models import EventStatus, TicketType
from apps.notifications import services as notifications
from core.phone_utils import normalize_ghana_phone
from core.utils import initials, random_digits
from .exceptions import (
    AlreadyCheckedIn,
    InvalidTransition,
    PaymentPending,
    RegistrationNotCheckable,
    RegistrationNotFound,
    RegistrationValidationError,
    StaleRegistrationState,
)
from .models import Registration
from .states import CANCEL_TARGET, CHECK_IN_TARGET, PaymentStatus, RegistrationState, Status

logger = logging.getLogger(__name__)

TICKET_ID_ATTEMPTS = 5


def generate_ticket_id(event, ticket_type):
    """
    Human-readable ticket code: event initials, tier prefix and random digits,
    e.g. 'BYC-REG-0427'. Unique across the system.
    """
    prefix = f"{initials(event.title)}-{ticket_type.name[:3].upper()}"
    for length in range(4, 4 + TICKET_ID_ATTEMPTS):
        ticket_id = f"{prefix}-{random_digits(length)}"
        if not Registration.objects.filter(ticket_id=ticket_id).exists():
            return ticket_id
    raise RegistrationValidationError("Could not allocate a ticket ID, please try again")


def _validate_attendee(attendee):
    errors = {}
    name = (attendee.get('name') or '').strip()
    email = (attendee.get('email') or '').strip().lower()
    phone = normalize_ghana_phone(attendee.get('phone') or '')

    if not name:
        errors['name'] = 'Name is required'
    try:
        validate_email(email)
    except DjangoValidationError:
        errors['email'] = 'Enter a valid email address'
    if not phone:
        errors['phone'] = 'Enter a valid Ghana phone number (233XXXXXXXXX)'

    if errors:
        raise RegistrationValidationError(fields=errors)
    return name, email, phone


def _parse_price(raw):
    """A finite, non-negative Decimal, or None."""
    try:
        price = Decimal(str(raw))
    except InvalidOperation:
        return None
    if not price.is_finite() or price < 0:
        return None
    return price


def _validate_custom_fields(event, values):
    """Check answers against the event's field definitions and return the price override, if any."""
    values = values or {}
    if not isinstance(values, dict):
        raise RegistrationValidationError(fields={'custom_field_values': 'Must be an object'})

    errors = {}
    price_override = None
    for field in event.custom_fields or []:
        field_id = field.get('id')
        value = values.get(field_id)
        empty = value is None or value == '' or value == []
        if field.get('required') and empty and value is not False:
            errors[field_id] = f"{field.get('label') or field_id} is required"
            continue
        if empty:
            continue
        if field.get('type') == 'select':
            options = field.get('options') or []
            if options and value not in options:
                errors[field_id] = f"'{value}' is not a valid option"
                continue
            overrides = field.get('price_overrides') or {}
            if value in overrides:
                price_override = _parse_price(overrides[value])
                if price_override is None:
                    logger.error(
                        f"[REGISTRATION] Bad price override {overrides[value]!r} on event {event.id} field {field_id}"
                    )
                    errors[field_id] = f"'{value}' has no valid price, please contact the organizer"

    if errors:
        raise RegistrationValidationError(fields=errors)
    return price_override


def create_registration(event_id, ticket_type_id, attendee, custom_field_values=None, user=None):
    """
    Register an attendee for a ticket type.

    Args:
        event_id: Event primary key
        ticket_type_id: TicketType primary key, must belong to the event
        attendee: dict with name, email and phone
        custom_field_values: answers to the event's custom fields
        user: authenticated user, if any

    Returns:
        The created Registration, CONFIRMED_FREE or PENDING_PAYMENT.

    Raises:
        SoldOut, RegistrationValidationError
    """
    try:
        ticket_type = TicketType.objects.select_related('event').get(pk=ticket_type_id, event_id=event_id)
    except (TicketType.DoesNotExist, DjangoValidationError):
        raise RegistrationValidationError("Unknown event or ticket type")

    event = ticket_type.event
    now = timezone.now()
    if not event.accepts_registrations(now) and event.get_status(now) != EventStatus.SOLD_OUT:
        raise RegistrationValidationError("Registration for this event is closed")
    if not ticket_type.is_on_sale(now):
        raise RegistrationValidationError("This ticket type is not on sale right now")

    name, email, phone = _validate_attendee(attendee or {})
    price_override = _validate_custom_fields(event, custom_field_values)
    amount = price_override if price_override is not None else ticket_type.price
    state = RegistrationState.initial(amount)

    try:
        with transaction.atomic():
            inventory.reserve(ticket_type.pk)
            registration = Registration.objects.create(
                event=event,
                ticket_type=ticket_type,
                user=user if user is not None and user.is_authenticated else None,
                name=name,
                email=email,
                phone=phone,
                ticket_id=generate_ticket_id(event, ticket_type),
                amount=amount,
                currency=ticket_type.currency,
                status=state.status,
                payment_status=state.payment_status,
                custom_field_values=custom_field_values or {},
            )
    except IntegrityError:
        logger.exception(f"[REGISTRATION] Insert failed for ticket type {ticket_type.pk}")
        raise RegistrationValidationError("Could not save the registration, please try again")

    logger.info(
        f"[REGISTRATION] Created {registration.ticket_id} for event {event.id} "
        f"({state.name}, amount={amount})"
    )
    notifications.notify_registration_created(registration)
    return registration


def get_by_ticket_id(ticket_id):
    try:
        return Registration.objects.select_related('event', 'ticket_type').get(
            ticket_id__iexact=(ticket_id or '').strip()
        )
    except Registration.DoesNotExist:
        raise RegistrationNotFound()


def check_in(ticket_id, staff_user=None):
    """
    Check an attendee in at the door.

    Raises:
        RegistrationNotFound, AlreadyCheckedIn, PaymentPending, RegistrationNotCheckable
    """
    registration = get_by_ticket_id(ticket_id)
    checked_in_by = staff_user if staff_user is not None and staff_user.is_authenticated else None

    try:
        registration.transition_to(
            _check_in_target(registration),
            checked_in_at=timezone.now(),
            checked_in_by=checked_in_by,
        )
    except StaleRegistrationState:
        # Another scan or a cancellation got there first
        registration.refresh_from_db()
        _check_in_target(registration)
        raise

    logger.info(f"[CHECK-IN] {registration.ticket_id} checked in")
    return registration


def _check_in_target(registration):
    if registration.status == Status.CHECKED_IN:
        raise AlreadyCheckedIn(checked_in_at=registration.checked_in_at.isoformat() if registration.checked_in_at else None)
    if registration.payment_status == PaymentStatus.PENDING:
        raise PaymentPending()

    target = CHECK_IN_TARGET.get(registration.state)
    if target is None:
        raise RegistrationNotCheckable()
    return target


def fail_payment(registration, reason=''):
    """PENDING_PAYMENT -> PAYMENT_FAILED and give the reserved unit back, atomically."""
    with transaction.atomic():
        registration.transition_to(
            RegistrationState.PAYMENT_FAILED,
            cancelled_at=timezone.now(),
            cancellation_reason=reason,
        )
        inventory.release(registration.ticket_type_id)
    logger.info(f"[REGISTRATION] {registration.ticket_id} payment failed: {reason}")
    return registration


def cancel_registration(registration, reason=''):
    """
    Staff cancellation. Pending payments fail, free tickets are cancelled and
    paid tickets are marked refunded; the inventory unit is released.

    Raises:
        InvalidTransition: the registration is already cancelled or checked in.
    """
    target = CANCEL_TARGET.get(registration.state)
    if target is None:
        raise InvalidTransition(f"Registration {registration.ticket_id} cannot be cancelled")

    with transaction.atomic():
        registration.transition_to(target, cancelled_at=timezone.now(), cancellation_reason=reason)
        inventory.release(registration.ticket_type_id)

    logger.info(f"[REGISTRATION] {registration.ticket_id} cancelled by staff ({target.name})")
    return registration


def find_registrations(query, limit=20):
    """Scanner lookup: exact ticket ID first, then email or phone."""
    query = (query or '').strip()
    if not query:
        return []

    queryset = Registration.objects.select_related('event', 'ticket_type')
    exact = list(queryset.filter(ticket_id__iexact=query))
    if exact:
        return exact

    conditions = Q(email__iexact=query)
    phone = normalize_ghana_phone(query)
    if phone:
        conditions |= Q(phone=phone)
    return list(queryset.filter(conditions)[:limit])
