"""
Inventory ledger for ticket types and event capacity.

Counters are only ever moved by conditional UPDATE statements evaluated by
the database (`F()` expressions on a filtered queryset), never by reading a
value in Python and writing it back. Concurrent callers therefore cannot
oversell: for the last unit exactly one UPDATE matches a row.
"""

import logging

from django.db import transaction
from django.db.models import F, Q
from rest_framework import status

from core.exceptions import BusinessError
from .models import Event, TicketType

logger = logging.getLogger(__name__)


class SoldOut(BusinessError):
    code = 'sold_out'
    message = 'Ticket unavailable: this ticket type or event is sold out'
    http_status = status.HTTP_409_CONFLICT


def _tier_has_room():
    return Q(quantity__isnull=True) | Q(sold__lt=F('quantity'))


def _event_has_room():
    return Q(capacity__isnull=True) | Q(registered_count__lt=F('capacity'))


def reserve(ticket_type_id):
    """
    Atomically take one unit of a ticket type and one seat of its event.

    Returns:
        The event id the ticket type belongs to.

    Raises:
        SoldOut: the tier or the event has no room left.
        TicketType.DoesNotExist: unknown ticket type.
    """
    event_id = TicketType.objects.values_list('event_id', flat=True).get(pk=ticket_type_id)

    with transaction.atomic():
        updated = TicketType.objects.filter(
            _tier_has_room(),
            pk=ticket_type_id,
        ).update(sold=F('sold') + 1)

        if updated == 0:
            logger.info(f"[INVENTORY] Ticket type {ticket_type_id} sold out")
            raise SoldOut()

        updated = Event.objects.filter(
            _event_has_room(),
            pk=event_id,
        ).update(registered_count=F('registered_count') + 1)

        if updated == 0:
            # Raising inside the atomic block rolls back the tier increment
            logger.info(f"[INVENTORY] Event {event_id} at capacity")
            raise SoldOut()

    logger.info(f"[INVENTORY] Reserved one unit of ticket type {ticket_type_id}")
    return event_id


def release(ticket_type_id):
    """
    Return one unit to a ticket type and one seat to its event.

    Compensating action for a registration that was cancelled or failed
    terminally after its reservation. Counters never go below zero.
    """
    event_id = TicketType.objects.values_list('event_id', flat=True).get(pk=ticket_type_id)

    with transaction.atomic():
        tiers = TicketType.objects.filter(pk=ticket_type_id, sold__gt=0).update(sold=F('sold') - 1)
        events = Event.objects.filter(
            pk=event_id,
            registered_count__gt=0,
        ).update(registered_count=F('registered_count') - 1)

    if not tiers or not events:
        logger.warning(
            f"[INVENTORY] Release for ticket type {ticket_type_id} found a zero counter "
            f"(tier updated={tiers}, event updated={events})"
        )
    else:
        logger.info(f"[INVENTORY] Released one unit of ticket type {ticket_type_id}")
