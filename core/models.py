"""Base models for the EventGate platform."""

import uuid
from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class TimeStampedModel(models.Model):
    """Abstract base model that provides self-updating created_at and updated_at fields."""

    created_at = models.DateTimeField(_("Created at"), auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(_("Updated at"), auto_now=True)

    class Meta:
        abstract = True


class UUIDModel(models.Model):
    """Abstract base model that provides a UUID primary key."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    class Meta:
        abstract = True


class BaseModel(TimeStampedModel, UUIDModel):
    """Base model for all EventGate models."""

    class Meta:
        abstract = True


class AppRole(models.TextChoices):
    ADMIN = 'admin', _('Admin')
    EVENT_MANAGER = 'event_manager', _('Event Manager')
    FINANCE_OFFICER = 'finance_officer', _('Finance Officer')
    CHECKIN_STAFF = 'checkin_staff', _('Check-in Staff')


class UserRole(BaseModel):
    """Platform role granted to a staff user."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='app_roles',
        verbose_name=_("user")
    )
    role = models.CharField(_("role"), max_length=32, choices=AppRole.choices)

    class Meta:
        verbose_name = _("user role")
        verbose_name_plural = _("user roles")
        constraints = [
            models.UniqueConstraint(fields=['user', 'role'], name='core_userrole_unique_user_role'),
        ]

    def __str__(self):
        return f"{self.user} - {self.role}"

    @classmethod
    def user_has_role(cls, user, *roles):
        """Return True if the user holds any of the given roles (superusers always do)."""
        if not user or not user.is_authenticated:
            return False
        if user.is_superuser:
            return True
        return cls.objects.filter(user=user, role__in=roles).exists()
