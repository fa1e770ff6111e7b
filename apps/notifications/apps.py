"""App configuration for the notifications app."""

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """Outbound SMS to attendees."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.notifications'
