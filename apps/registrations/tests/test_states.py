from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from apps.registrations.exceptions import InvalidTransition, StaleRegistrationState
from apps.registrations.models import Registration
from apps.registrations.states import (
    InvalidStateCombination,
    PaymentStatus,
    RegistrationState,
    Status,
)
from .helpers import make_event, make_ticket_type


class RegistrationStateTests(SimpleTestCase):
    def test_initial_state_depends_on_price(self):
        self.assertEqual(RegistrationState.initial(Decimal('0')), RegistrationState.CONFIRMED_FREE)
        self.assertEqual(RegistrationState.initial(Decimal('0.00')), RegistrationState.CONFIRMED_FREE)
        self.assertEqual(RegistrationState.initial(Decimal('10.00')), RegistrationState.PENDING_PAYMENT)

    def test_of_maps_column_pairs(self):
        self.assertEqual(RegistrationState.of('pending', 'pending'), RegistrationState.PENDING_PAYMENT)
        self.assertEqual(RegistrationState.of('checked-in', 'paid'), RegistrationState.CHECKED_IN_PAID)
        self.assertEqual(RegistrationState.of('cancelled', 'refunded'), RegistrationState.REFUNDED)

    def test_unknown_combination_is_rejected(self):
        with self.assertRaises(InvalidStateCombination):
            RegistrationState.of(Status.CONFIRMED, PaymentStatus.PENDING)
        with self.assertRaises(InvalidStateCombination):
            RegistrationState.of('checked-in', 'failed')
        with self.assertRaises(InvalidStateCombination):
            RegistrationState.of('bogus', 'paid')

    def test_allowed_transitions(self):
        pending = RegistrationState.PENDING_PAYMENT
        self.assertTrue(pending.can_transition_to(RegistrationState.CONFIRMED_PAID))
        self.assertTrue(pending.can_transition_to(RegistrationState.PAYMENT_FAILED))
        self.assertFalse(pending.can_transition_to(RegistrationState.CHECKED_IN_PAID))
        self.assertFalse(RegistrationState.CONFIRMED_FREE.can_transition_to(RegistrationState.CONFIRMED_PAID))

    def test_cancelled_and_checked_in_are_terminal(self):
        for state in RegistrationState:
            expected = state.status in (Status.CANCELLED, Status.CHECKED_IN)
            self.assertEqual(state.is_terminal, expected, state.name)


class TransitionTests(TestCase):
    def setUp(self):
        event = make_event()
        ticket_type = make_ticket_type(event, price='50.00')
        self.registration = Registration.objects.create(
            event=event,
            ticket_type=ticket_type,
            name='Kofi Boateng',
            email='kofi@example.com',
            phone='233201234567',
            ticket_id='BYC-REG-0001',
            amount=Decimal('50.00'),
            status=Status.PENDING,
            payment_status=PaymentStatus.PENDING,
        )

    def test_transition_updates_row_and_instance(self):
        self.registration.transition_to(RegistrationState.CONFIRMED_PAID)

        self.assertEqual(self.registration.state, RegistrationState.CONFIRMED_PAID)
        stored = Registration.objects.get(pk=self.registration.pk)
        self.assertEqual(stored.status, 'confirmed')
        self.assertEqual(stored.payment_status, 'paid')

    def test_disallowed_transition(self):
        with self.assertRaises(InvalidTransition):
            self.registration.transition_to(RegistrationState.CHECKED_IN_PAID)

    def test_second_actor_loses_the_compare_and_swap(self):
        other = Registration.objects.get(pk=self.registration.pk)
        self.registration.transition_to(RegistrationState.CONFIRMED_PAID)

        with self.assertRaises(StaleRegistrationState):
            other.transition_to(RegistrationState.PAYMENT_FAILED)

        self.assertEqual(
            Registration.objects.get(pk=self.registration.pk).state,
            RegistrationState.CONFIRMED_PAID
        )

    def test_amount_is_immutable_once_saved(self):
        registration = Registration.objects.get(pk=self.registration.pk)
        registration.amount = Decimal('10.00')
        with self.assertRaises(ValueError):
            registration.save()
