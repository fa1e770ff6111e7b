"""Models for the events app."""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from decimal import Decimal

from core.models import BaseModel


class EventStatus(models.TextChoices):
    UPCOMING = 'upcoming', _('Upcoming')
    ONGOING = 'ongoing', _('Ongoing')
    CLOSED = 'closed', _('Closed')
    SOLD_OUT = 'sold-out', _('Sold out')


class Event(BaseModel):
    """An event people register for. Owns its ticket types."""

    title = models.CharField(_("title"), max_length=255)
    description = models.TextField(_("description"), blank=True)
    venue = models.CharField(_("venue"), max_length=255, blank=True)
    starts_at = models.DateTimeField(_("starts at"))
    ends_at = models.DateTimeField(_("ends at"), null=True, blank=True)
    capacity = models.PositiveIntegerField(
        _("capacity"),
        null=True,
        blank=True,
        help_text=_("Leave empty for unlimited capacity")
    )
    # Maintained only through apps.events.inventory
    registered_count = models.PositiveIntegerField(_("registered count"), default=0, editable=False)
    is_archived = models.BooleanField(_("archived"), default=False)
    custom_fields = models.JSONField(
        _("custom fields"),
        default=list,
        blank=True,
        help_text=_("Registration form fields: [{id, label, type, required, options, price_overrides}]")
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='created_events',
        verbose_name=_("created by"),
        null=True,
        blank=True
    )

    class Meta:
        verbose_name = _("event")
        verbose_name_plural = _("events")
        ordering = ['starts_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(capacity__isnull=True) | models.Q(registered_count__lte=models.F('capacity')),
                name='%(app_label)s_%(class)s_registered_within_capacity'
            ),
        ]

    def __str__(self):
        return self.title

    @property
    def is_unlimited(self):
        return self.capacity is None

    @property
    def spots_left(self):
        """Remaining event-level capacity, None when unlimited."""
        if self.capacity is None:
            return None
        return max(0, self.capacity - self.registered_count)

    def has_ended(self, now=None):
        now = now or timezone.now()
        end = self.ends_at or self.starts_at
        return end < now

    def get_status(self, now=None):
        """Derive the public status from dates, archive flag and capacity."""
        now = now or timezone.now()
        if self.is_archived or self.has_ended(now):
            return EventStatus.CLOSED
        if self.capacity is not None and self.registered_count >= self.capacity:
            return EventStatus.SOLD_OUT
        if self.starts_at <= now:
            return EventStatus.ONGOING
        return EventStatus.UPCOMING

    def accepts_registrations(self, now=None):
        return self.get_status(now) in (EventStatus.UPCOMING, EventStatus.ONGOING)


class TicketType(BaseModel):
    """A ticket tier with its own price and inventory within one event."""

    event = models.ForeignKey(
        Event,
        on_delete=models.CASCADE,
        related_name='ticket_types',
        verbose_name=_("event")
    )
    name = models.CharField(_("name"), max_length=100)
    description = models.TextField(_("description"), blank=True)
    price = models.DecimalField(
        _("price"),
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    currency = models.CharField(_("currency"), max_length=3, default='GHS')
    quantity = models.PositiveIntegerField(
        _("quantity"),
        null=True,
        blank=True,
        help_text=_("Leave empty for unlimited quantity")
    )
    # Maintained only through apps.events.inventory
    sold = models.PositiveIntegerField(_("sold"), default=0, editable=False)
    starts_at = models.DateTimeField(
        _("sales start"),
        null=True,
        blank=True,
        help_text=_("Leave empty for immediate availability.")
    )
    ends_at = models.DateTimeField(_("sales end"), null=True, blank=True)

    class Meta:
        verbose_name = _("ticket type")
        verbose_name_plural = _("ticket types")
        ordering = ['price', 'name']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__isnull=True) | models.Q(sold__lte=models.F('quantity')),
                name='%(app_label)s_%(class)s_sold_within_quantity'
            ),
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name='%(app_label)s_%(class)s_price_not_negative'
            ),
        ]

    def __str__(self):
        return f"{self.event.title} - {self.name}"

    @property
    def available(self):
        """Units left, None when unlimited."""
        if self.quantity is None:
            return None
        return max(0, self.quantity - self.sold)

    @property
    def is_sold_out(self):
        return self.quantity is not None and self.sold >= self.quantity

    def is_on_sale(self, now=None):
        """Return True if now falls inside the optional sales window."""
        now = now or timezone.now()
        if self.starts_at and now < self.starts_at:
            return False
        if self.ends_at and now > self.ends_at:
            return False
        return True
