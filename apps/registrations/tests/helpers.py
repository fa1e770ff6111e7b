"""Shared fixtures for registration and payment tests."""

from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from apps.events.models import Event, TicketType


def make_event(title='Baptist Youth Conference', capacity=None, **kwargs):
    kwargs.setdefault('starts_at', timezone.now() + timedelta(days=30))
    return Event.objects.create(title=title, capacity=capacity, **kwargs)


def make_ticket_type(event, name='Regular', price='50.00', quantity=None, **kwargs):
    return TicketType.objects.create(
        event=event,
        name=name,
        price=Decimal(price),
        quantity=quantity,
        **kwargs
    )


def attendee(**overrides):
    data = {
        'name': 'Ama Mensah',
        'email': 'ama@example.com',
        'phone': '0241234567',
    }
    data.update(overrides)
    return data
