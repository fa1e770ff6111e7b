"""App configuration for the registrations app."""

from django.apps import AppConfig


class RegistrationsConfig(AppConfig):
    """Attendee registrations and their lifecycle."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.registrations'
