"""Models for the registrations app."""

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.models import BaseModel
from .exceptions import InvalidTransition, StaleRegistrationState
from .states import PaymentStatus, RegistrationState, Status


class Registration(BaseModel):
    """One attendee's registration for one ticket type of one event."""

    event = models.ForeignKey(
        'events.Event',
        on_delete=models.CASCADE,
        related_name='registrations',
        verbose_name=_("event")
    )
    # Deletable only together with the event (cascade), never on its own
    ticket_type = models.ForeignKey(
        'events.TicketType',
        on_delete=models.RESTRICT,
        related_name='registrations',
        verbose_name=_("ticket type")
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='registrations',
        verbose_name=_("user"),
        null=True,
        blank=True
    )

    name = models.CharField(_("name"), max_length=255)
    email = models.EmailField(_("email"))
    phone = models.CharField(
        _("phone"),
        max_length=20,
        blank=True,
        db_index=True,
        help_text=_("Normalized international format, 233XXXXXXXXX")
    )
    ticket_id = models.CharField(_("ticket ID"), max_length=32, unique=True)

    # Snapshot of the ticket price at registration time
    amount = models.DecimalField(_("amount"), max_digits=10, decimal_places=2, editable=False)
    currency = models.CharField(_("currency"), max_length=3, default='GHS')

    status = models.CharField(_("status"), max_length=20, choices=Status.choices)
    payment_status = models.CharField(_("payment status"), max_length=20, choices=PaymentStatus.choices)

    payment_reference = models.CharField(
        _("payment reference"),
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        db_column='stripe_payment_intent_id',
        help_text=_("Gateway tracking token used to match payment callbacks")
    )

    custom_field_values = models.JSONField(_("custom field values"), default=dict, blank=True)

    checked_in_at = models.DateTimeField(_("checked in at"), null=True, blank=True)
    checked_in_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='checked_in_registrations',
        verbose_name=_("checked in by"),
        null=True,
        blank=True
    )
    cancelled_at = models.DateTimeField(_("cancelled at"), null=True, blank=True)
    cancellation_reason = models.TextField(_("cancellation reason"), blank=True)

    class Meta:
        verbose_name = _("registration")
        verbose_name_plural = _("registrations")
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['event', 'payment_status'], name='registratio_event_i_5b1c3e_idx'),
            models.Index(fields=['email'], name='registratio_email_8d2f4a_idx'),
        ]

    def __str__(self):
        return f"{self.ticket_id} - {self.name}"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_amount = instance.__dict__.get('amount')
        return instance

    def save(self, *args, **kwargs):
        loaded = getattr(self, '_loaded_amount', None)
        if not self._state.adding and loaded is not None and self.amount != loaded:
            raise ValueError("Registration amount is a snapshot and cannot be changed")
        super().save(*args, **kwargs)
        self._loaded_amount = self.amount

    @property
    def state(self):
        return RegistrationState.of(self.status, self.payment_status)

    def transition_to(self, target, **changes):
        """
        Move to `target` with a compare-and-swap UPDATE keyed on the current state.

        Extra column values in `changes` are written in the same statement.

        Raises:
            InvalidTransition: the lifecycle does not allow current -> target.
            StaleRegistrationState: the stored state no longer matches this instance.
        """
        current = self.state
        if not current.can_transition_to(target):
            raise InvalidTransition(
                f"Cannot move registration {self.ticket_id} from {current.name} to {target.name}",
                current=current.name,
                target=target.name,
            )

        now = timezone.now()
        updated = Registration.objects.filter(
            pk=self.pk,
            status=current.status,
            payment_status=current.payment_status,
        ).update(
            status=target.status,
            payment_status=target.payment_status,
            updated_at=now,
            **changes
        )
        if updated == 0:
            raise StaleRegistrationState(current=current.name, target=target.name)

        self.status = target.status
        self.payment_status = target.payment_status
        self.updated_at = now
        for field, value in changes.items():
            setattr(self, field, value)
        return self
