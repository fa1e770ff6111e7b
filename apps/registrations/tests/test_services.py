import threading
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import connection, connections
from django.test import TestCase, TransactionTestCase
from django.utils import timezone

from apps.events.inventory import SoldOut
from apps.registrations import services
from apps.registrations.exceptions import (
    AlreadyCheckedIn,
    InvalidTransition,
    PaymentPending,
    RegistrationNotCheckable,
    RegistrationNotFound,
    RegistrationValidationError,
)
from apps.registrations.models import Registration
from apps.registrations.states import RegistrationState
from .helpers import attendee, make_event, make_ticket_type


class CreateRegistrationTests(TestCase):
    def setUp(self):
        self.event = make_event(capacity=100)
        self.paid = make_ticket_type(self.event, name='Regular', price='50.00', quantity=10)
        self.free = make_ticket_type(self.event, name='Free', price='0.00')

    def register(self, ticket_type=None, **kwargs):
        ticket_type = ticket_type or self.paid
        return services.create_registration(
            self.event.pk,
            ticket_type.pk,
            kwargs.pop('attendee', attendee()),
            **kwargs
        )

    def test_free_ticket_is_confirmed_immediately(self):
        registration = self.register(self.free)

        self.assertEqual(registration.state, RegistrationState.CONFIRMED_FREE)
        self.assertEqual(registration.payment_status, 'free')
        self.assertEqual(registration.amount, Decimal('0.00'))

    def test_paid_ticket_starts_pending(self):
        registration = self.register()

        self.assertEqual(registration.state, RegistrationState.PENDING_PAYMENT)
        self.assertEqual(registration.amount, Decimal('50.00'))
        self.assertIsNone(registration.payment_reference)

    def test_reserves_inventory(self):
        self.register()

        self.paid.refresh_from_db()
        self.event.refresh_from_db()
        self.assertEqual(self.paid.sold, 1)
        self.assertEqual(self.event.registered_count, 1)

    def test_attendee_details_are_normalized(self):
        registration = self.register(attendee=attendee(phone='024 123 4567', email=' Ama@Example.com '))

        self.assertEqual(registration.phone, '233241234567')
        self.assertEqual(registration.email, 'ama@example.com')

    def test_ticket_id_format(self):
        registration = self.register()

        self.assertTrue(registration.ticket_id.startswith('BYC-REG-'))
        self.assertRegex(registration.ticket_id, r'^BYC-REG-\d{4}$')

    def test_invalid_phone_is_rejected_without_reserving(self):
        with self.assertRaises(RegistrationValidationError) as ctx:
            self.register(attendee=attendee(phone='12345'))

        self.assertIn('phone', ctx.exception.details['fields'])
        self.paid.refresh_from_db()
        self.assertEqual(self.paid.sold, 0)

    def test_missing_name_and_bad_email(self):
        with self.assertRaises(RegistrationValidationError) as ctx:
            self.register(attendee=attendee(name='  ', email='not-an-email'))

        self.assertEqual(set(ctx.exception.details['fields']), {'name', 'email'})

    def test_sold_out(self):
        ticket_type = make_ticket_type(self.event, name='VIP', price='200.00', quantity=1)
        self.register(ticket_type)

        with self.assertRaises(SoldOut):
            self.register(ticket_type, attendee=attendee(email='second@example.com'))

        self.assertEqual(Registration.objects.filter(ticket_type=ticket_type).count(), 1)

    def test_event_capacity_applies_across_tiers(self):
        event = make_event(capacity=1)
        regular = make_ticket_type(event, name='Regular', price='0.00')
        vip = make_ticket_type(event, name='VIP', price='0.00')
        services.create_registration(event.pk, regular.pk, attendee())

        with self.assertRaises(SoldOut):
            services.create_registration(event.pk, vip.pk, attendee())

    def test_ticket_type_of_another_event(self):
        other = make_event(title='Other Event')
        with self.assertRaises(RegistrationValidationError):
            services.create_registration(other.pk, self.paid.pk, attendee())

    def test_closed_event(self):
        self.event.is_archived = True
        self.event.save()

        with self.assertRaises(RegistrationValidationError):
            self.register()

    def test_tier_outside_sales_window(self):
        ticket_type = make_ticket_type(self.event, name='Early', ends_at=timezone.now() - timedelta(days=1))

        with self.assertRaises(RegistrationValidationError):
            self.register(ticket_type)

    def test_required_custom_field(self):
        self.event.custom_fields = [
            {'id': 'church', 'label': 'Church', 'type': 'text', 'required': True},
        ]
        self.event.save()

        with self.assertRaises(RegistrationValidationError) as ctx:
            self.register(custom_field_values={})
        self.assertIn('church', ctx.exception.details['fields'])

        registration = self.register(custom_field_values={'church': 'Calvary Baptist'})
        self.assertEqual(registration.custom_field_values, {'church': 'Calvary Baptist'})

    def test_select_option_must_be_listed(self):
        self.event.custom_fields = [
            {'id': 'size', 'label': 'T-shirt', 'type': 'select', 'required': False, 'options': ['S', 'M', 'L']},
        ]
        self.event.save()

        with self.assertRaises(RegistrationValidationError):
            self.register(custom_field_values={'size': 'XXL'})

    def test_select_option_price_override(self):
        self.event.custom_fields = [
            {
                'id': 'category',
                'label': 'Category',
                'type': 'select',
                'required': True,
                'options': ['Youth', 'Adult'],
                'price_overrides': {'Youth': '20.00'},
            },
        ]
        self.event.save()

        youth = self.register(custom_field_values={'category': 'Youth'})
        adult = self.register(custom_field_values={'category': 'Adult'}, attendee=attendee(email='b@example.com'))

        self.assertEqual(youth.amount, Decimal('20.00'))
        self.assertEqual(adult.amount, Decimal('50.00'))

    def test_unusable_price_override_is_rejected(self):
        for bad_price in ('-10.00', 'NaN', 'Infinity', 'free'):
            self.event.custom_fields = [
                {
                    'id': 'category',
                    'label': 'Category',
                    'type': 'select',
                    'required': True,
                    'options': ['Youth', 'Adult'],
                    'price_overrides': {'Youth': bad_price},
                },
            ]
            self.event.save()

            with self.assertLogs('apps.registrations.services', level='ERROR'):
                with self.assertRaises(RegistrationValidationError) as ctx:
                    self.register(custom_field_values={'category': 'Youth'})
            self.assertIn('category', ctx.exception.details['fields'])

        self.paid.refresh_from_db()
        self.assertEqual(self.paid.sold, 0)
        self.assertFalse(Registration.objects.exists())

    def test_amount_survives_price_edit(self):
        registration = self.register()
        self.paid.price = Decimal('80.00')
        self.paid.save()

        registration.refresh_from_db()
        self.assertEqual(registration.amount, Decimal('50.00'))

    @patch('apps.notifications.services.send_sms_notification')
    def test_sms_is_queued_after_commit(self, mock_task):
        with self.captureOnCommitCallbacks(execute=True):
            registration = self.register()

        mock_task.delay.assert_called_once()
        recipient, message, ref = mock_task.delay.call_args[0]
        self.assertEqual(recipient, '233241234567')
        self.assertIn('pending payment', message)
        self.assertIn(registration.ticket_id, message)
        self.assertEqual(ref, registration.ticket_id)

    @patch('apps.notifications.services.send_sms_notification')
    def test_broker_failure_does_not_fail_registration(self, mock_task):
        mock_task.delay.side_effect = ConnectionError('broker down')

        with self.captureOnCommitCallbacks(execute=True):
            registration = self.register(self.free)

        self.assertTrue(Registration.objects.filter(pk=registration.pk).exists())


class CheckInTests(TestCase):
    def setUp(self):
        self.event = make_event()
        self.free = make_ticket_type(self.event, name='Free', price='0.00')
        self.paid = make_ticket_type(self.event, name='Regular', price='50.00')
        self.staff = get_user_model().objects.create_user(username='door', password='password123')

    def test_free_ticket_checks_in(self):
        registration = services.create_registration(self.event.pk, self.free.pk, attendee())

        checked = services.check_in(registration.ticket_id.lower(), staff_user=self.staff)

        self.assertEqual(checked.state, RegistrationState.CHECKED_IN_FREE)
        self.assertIsNotNone(checked.checked_in_at)
        self.assertEqual(checked.checked_in_by, self.staff)

    def test_paid_ticket_checks_in(self):
        registration = services.create_registration(self.event.pk, self.paid.pk, attendee())
        registration.transition_to(RegistrationState.CONFIRMED_PAID)

        checked = services.check_in(registration.ticket_id)

        self.assertEqual(checked.state, RegistrationState.CHECKED_IN_PAID)

    def test_already_checked_in(self):
        registration = services.create_registration(self.event.pk, self.free.pk, attendee())
        services.check_in(registration.ticket_id)

        with self.assertRaises(AlreadyCheckedIn):
            services.check_in(registration.ticket_id)

    def test_simultaneous_scan_loses_as_already_checked_in(self):
        registration = services.create_registration(self.event.pk, self.free.pk, attendee())
        scanned_earlier = Registration.objects.get(pk=registration.pk)
        services.check_in(registration.ticket_id)

        with patch('apps.registrations.services.get_by_ticket_id', return_value=scanned_earlier):
            with self.assertRaises(AlreadyCheckedIn):
                services.check_in(registration.ticket_id)

        registration.refresh_from_db()
        self.assertEqual(registration.state, RegistrationState.CHECKED_IN_FREE)

    def test_scan_racing_a_cancellation_is_not_checkable(self):
        registration = services.create_registration(self.event.pk, self.free.pk, attendee())
        scanned_earlier = Registration.objects.get(pk=registration.pk)
        services.cancel_registration(registration)

        with patch('apps.registrations.services.get_by_ticket_id', return_value=scanned_earlier):
            with self.assertRaises(RegistrationNotCheckable):
                services.check_in(registration.ticket_id)

        registration.refresh_from_db()
        self.assertEqual(registration.state, RegistrationState.CANCELLED_FREE)

    def test_pending_payment_cannot_check_in(self):
        registration = services.create_registration(self.event.pk, self.paid.pk, attendee())

        with self.assertRaises(PaymentPending):
            services.check_in(registration.ticket_id)

    def test_cancelled_cannot_check_in(self):
        registration = services.create_registration(self.event.pk, self.free.pk, attendee())
        services.cancel_registration(registration)

        with self.assertRaises(RegistrationNotCheckable):
            services.check_in(registration.ticket_id)

    def test_unknown_ticket(self):
        with self.assertRaises(RegistrationNotFound):
            services.check_in('NOPE-0000')


class CancelRegistrationTests(TestCase):
    def setUp(self):
        self.event = make_event(capacity=5)
        self.free = make_ticket_type(self.event, name='Free', price='0.00', quantity=5)
        self.paid = make_ticket_type(self.event, name='Regular', price='50.00', quantity=5)

    def test_pending_becomes_payment_failed_and_releases(self):
        registration = services.create_registration(self.event.pk, self.paid.pk, attendee())

        services.cancel_registration(registration, reason='Duplicate')

        self.assertEqual(registration.state, RegistrationState.PAYMENT_FAILED)
        self.assertEqual(registration.cancellation_reason, 'Duplicate')
        self.paid.refresh_from_db()
        self.event.refresh_from_db()
        self.assertEqual(self.paid.sold, 0)
        self.assertEqual(self.event.registered_count, 0)

    def test_free_becomes_cancelled_free(self):
        registration = services.create_registration(self.event.pk, self.free.pk, attendee())

        services.cancel_registration(registration)

        self.assertEqual(registration.state, RegistrationState.CANCELLED_FREE)

    def test_paid_becomes_refunded(self):
        registration = services.create_registration(self.event.pk, self.paid.pk, attendee())
        registration.transition_to(RegistrationState.CONFIRMED_PAID)

        services.cancel_registration(registration)

        self.assertEqual(registration.state, RegistrationState.REFUNDED)

    def test_cannot_cancel_twice(self):
        registration = services.create_registration(self.event.pk, self.free.pk, attendee())
        services.cancel_registration(registration)

        with self.assertRaises(InvalidTransition):
            services.cancel_registration(registration)

        self.free.refresh_from_db()
        self.assertEqual(self.free.sold, 0)


class FindRegistrationsTests(TestCase):
    def setUp(self):
        event = make_event()
        ticket_type = make_ticket_type(event, price='0.00')
        self.registration = services.create_registration(event.pk, ticket_type.pk, attendee())

    def test_by_ticket_id(self):
        self.assertEqual(services.find_registrations(self.registration.ticket_id), [self.registration])

    def test_by_email_or_local_phone(self):
        self.assertEqual(services.find_registrations('AMA@example.com'), [self.registration])
        self.assertEqual(services.find_registrations('0241234567'), [self.registration])

    def test_empty_query(self):
        self.assertEqual(services.find_registrations('   '), [])


@patch('apps.notifications.services.send_sms_notification')
class LastUnitTests(TransactionTestCase):
    """Two attendees going for the only place at a paid event."""

    def setUp(self):
        self.event = make_event(capacity=1)
        self.ticket_type = make_ticket_type(self.event, price='500.00')

    def attempt(self, email, outcomes, lock):
        try:
            services.create_registration(self.event.pk, self.ticket_type.pk, attendee(email=email))
            result = 'registered'
        except SoldOut:
            result = 'sold_out'
        finally:
            if connection.vendor == 'postgresql':
                connections.close_all()
        with lock:
            outcomes.append(result)

    def test_exactly_one_attendee_gets_the_last_place(self, mock_task):
        outcomes = []
        lock = threading.Lock()
        emails = ['ama@example.com', 'kofi@example.com']

        if connection.vendor == 'postgresql':
            threads = [threading.Thread(target=self.attempt, args=(email, outcomes, lock)) for email in emails]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()
        else:
            # SQLite serializes writers, so run the attempts back to back
            for email in emails:
                self.attempt(email, outcomes, lock)

        self.assertEqual(sorted(outcomes), ['registered', 'sold_out'])
        registration = Registration.objects.get()
        self.assertEqual(registration.state, RegistrationState.PENDING_PAYMENT)
        self.assertEqual(registration.amount, Decimal('500.00'))
        self.event.refresh_from_db()
        self.ticket_type.refresh_from_db()
        self.assertEqual(self.event.registered_count, 1)
        self.assertEqual(self.ticket_type.sold, 1)
