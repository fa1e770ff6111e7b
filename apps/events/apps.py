"""App configuration for the events app."""

from django.apps import AppConfig


class EventsConfig(AppConfig):
    """Events, ticket types and their inventory counters."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.events'
