from datetime import timedelta
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.test import TestCase
from django.utils import timezone

from apps.events.models import Event, EventStatus, TicketType
from apps.registrations.tests.helpers import make_event, make_ticket_type


class EventStatusTests(TestCase):
    def test_upcoming(self):
        event = make_event()
        self.assertEqual(event.get_status(), EventStatus.UPCOMING)
        self.assertTrue(event.accepts_registrations())

    def test_ongoing(self):
        now = timezone.now()
        event = make_event(starts_at=now - timedelta(hours=1), ends_at=now + timedelta(hours=3))
        self.assertEqual(event.get_status(now), EventStatus.ONGOING)

    def test_closed_when_ended_or_archived(self):
        now = timezone.now()
        ended = make_event(starts_at=now - timedelta(days=2))
        archived = make_event(is_archived=True)

        self.assertEqual(ended.get_status(now), EventStatus.CLOSED)
        self.assertEqual(archived.get_status(now), EventStatus.CLOSED)
        self.assertFalse(archived.accepts_registrations(now))

    def test_sold_out_at_capacity(self):
        event = make_event(capacity=0)
        self.assertEqual(event.get_status(), EventStatus.SOLD_OUT)
        self.assertEqual(event.spots_left, 0)

    def test_unlimited_capacity_has_no_spots_left_value(self):
        event = make_event(capacity=None)
        self.assertTrue(event.is_unlimited)
        self.assertIsNone(event.spots_left)


class TicketTypeTests(TestCase):
    def setUp(self):
        self.event = make_event()

    def test_sales_window(self):
        now = timezone.now()
        early = make_ticket_type(self.event, name='Early', ends_at=now - timedelta(days=1))
        later = make_ticket_type(self.event, name='Late', starts_at=now + timedelta(days=1))
        open_ = make_ticket_type(self.event, name='Open')

        self.assertFalse(early.is_on_sale(now))
        self.assertFalse(later.is_on_sale(now))
        self.assertTrue(open_.is_on_sale(now))

    def test_sold_cannot_exceed_quantity(self):
        ticket_type = make_ticket_type(self.event, quantity=1)
        with self.assertRaises(IntegrityError), transaction.atomic():
            TicketType.objects.filter(pk=ticket_type.pk).update(sold=2)

    def test_price_cannot_be_negative(self):
        with self.assertRaises(IntegrityError), transaction.atomic():
            TicketType.objects.create(event=self.event, name='Broken', price=Decimal('-1.00'))

    def test_registered_count_cannot_exceed_capacity(self):
        event = make_event(capacity=1)
        with self.assertRaises(IntegrityError), transaction.atomic():
            Event.objects.filter(pk=event.pk).update(registered_count=2)
