"""
Celery configuration for the EventGate platform.

Only fire-and-forget notification work runs here; payment reconciliation
stays synchronous inside the webhook request.
"""

import os
from celery import Celery

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

app = Celery('eventgate')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django app configs.
app.autodiscover_tasks()

app.conf.task_routes = {
    'apps.notifications.tasks.send_sms_notification': {'queue': 'notifications'},
}

app.conf.update(
    timezone='Africa/Accra',
    enable_utc=True,

    # SMS is at-most-once: acknowledge on receipt, never redeliver
    task_acks_late=False,
    worker_prefetch_multiplier=1,
    task_soft_time_limit=60,
    task_time_limit=90,

    result_expires=3600,
    worker_max_tasks_per_child=1000,

    task_default_queue='default',
    task_default_exchange='default',
    task_default_exchange_type='direct',
    task_default_routing_key='default',
)
