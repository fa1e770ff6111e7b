"""
Registration lifecycle.

A registration's `status` and `payment_status` columns are only ever written
as one of the pairs below. Code works with `RegistrationState`; the two
columns exist because the storage contract (and everything reading it)
expects them.
"""

from enum import Enum

from django.db import models
from django.utils.translation import gettext_lazy as _


class Status(models.TextChoices):
    CONFIRMED = 'confirmed', _('Confirmed')
    PENDING = 'pending', _('Pending')
    CANCELLED = 'cancelled', _('Cancelled')
    CHECKED_IN = 'checked-in', _('Checked in')


class PaymentStatus(models.TextChoices):
    PAID = 'paid', _('Paid')
    PENDING = 'pending', _('Pending')
    FREE = 'free', _('Free')
    REFUNDED = 'refunded', _('Refunded')
    FAILED = 'failed', _('Failed')


class InvalidStateCombination(ValueError):
    """A (status, payment_status) pair that no lifecycle state maps to."""


class RegistrationState(Enum):
    PENDING_PAYMENT = (Status.PENDING, PaymentStatus.PENDING)
    CONFIRMED_FREE = (Status.CONFIRMED, PaymentStatus.FREE)
    CONFIRMED_PAID = (Status.CONFIRMED, PaymentStatus.PAID)
    PAYMENT_FAILED = (Status.CANCELLED, PaymentStatus.FAILED)
    CANCELLED_FREE = (Status.CANCELLED, PaymentStatus.FREE)
    REFUNDED = (Status.CANCELLED, PaymentStatus.REFUNDED)
    CHECKED_IN_FREE = (Status.CHECKED_IN, PaymentStatus.FREE)
    CHECKED_IN_PAID = (Status.CHECKED_IN, PaymentStatus.PAID)

    @property
    def status(self):
        return self.value[0]

    @property
    def payment_status(self):
        return self.value[1]

    @classmethod
    def of(cls, status, payment_status):
        try:
            return cls((Status(status), PaymentStatus(payment_status)))
        except ValueError:
            raise InvalidStateCombination(
                f"No registration state for status={status!r}, payment_status={payment_status!r}"
            ) from None

    @classmethod
    def initial(cls, price):
        """Free tickets skip the payment flow entirely."""
        return cls.CONFIRMED_FREE if price == 0 else cls.PENDING_PAYMENT

    @property
    def is_terminal(self):
        return not TRANSITIONS[self]

    def can_transition_to(self, target):
        return target in TRANSITIONS[self]


TRANSITIONS = {
    RegistrationState.PENDING_PAYMENT: frozenset({
        RegistrationState.CONFIRMED_PAID,
        RegistrationState.PAYMENT_FAILED,
    }),
    RegistrationState.CONFIRMED_FREE: frozenset({
        RegistrationState.CHECKED_IN_FREE,
        RegistrationState.CANCELLED_FREE,
    }),
    RegistrationState.CONFIRMED_PAID: frozenset({
        RegistrationState.CHECKED_IN_PAID,
        RegistrationState.REFUNDED,
    }),
    RegistrationState.PAYMENT_FAILED: frozenset(),
    RegistrationState.CANCELLED_FREE: frozenset(),
    RegistrationState.REFUNDED: frozenset(),
    RegistrationState.CHECKED_IN_FREE: frozenset(),
    RegistrationState.CHECKED_IN_PAID: frozenset(),
}

CHECK_IN_TARGET = {
    RegistrationState.CONFIRMED_FREE: RegistrationState.CHECKED_IN_FREE,
    RegistrationState.CONFIRMED_PAID: RegistrationState.CHECKED_IN_PAID,
}

CANCEL_TARGET = {
    RegistrationState.PENDING_PAYMENT: RegistrationState.PAYMENT_FAILED,
    RegistrationState.CONFIRMED_FREE: RegistrationState.CANCELLED_FREE,
    RegistrationState.CONFIRMED_PAID: RegistrationState.REFUNDED,
}
