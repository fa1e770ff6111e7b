"""
Test settings for EventGate project.

SQLite (or PostgreSQL with DB_ENGINE=postgresql), eager Celery and fixed gateway credentials.
"""

import os

from decouple import config

os.environ.setdefault('SECRET_KEY', 'test-secret-key-not-for-production')

from .base import *  # noqa

DEBUG = False

# SQLite by default; DB_ENGINE=postgresql runs the row-contention tests against the
# PostgreSQL settings from base.
if config('DB_ENGINE', default='sqlite') != 'postgresql':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'test_db.sqlite3',
            'TEST': {
                'NAME': BASE_DIR / 'test_db.sqlite3',
            },
        }
    }

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = False

MOOLRE_API_BASE = 'https://moolre.test'
MOOLRE_API_USER = 'test-user'
MOOLRE_API_KEY = 'test-key'
MOOLRE_API_PUBKEY = 'test-pubkey'
MOOLRE_VAS_KEY = 'test-vas-key'
MOOLRE_WEBHOOK_SECRET = 'test-webhook-secret'
MOOLRE_TIMEOUT_SECONDS = 5

LOGGING['root']['level'] = 'WARNING'
