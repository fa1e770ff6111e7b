"""
Development settings for EventGate project.

These settings are suitable for local development environment.
"""

from .base import *  # noqa
from decouple import config

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = True

# Database - Use PostgreSQL
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': config('DB_NAME', default='eventgate_db'),
        'USER': config('DB_USER', default='eventgate_user'),
        'PASSWORD': config('DB_PASSWORD', default='eventgate_password'),
        'HOST': config('DB_HOST', default='db'),
        'PORT': config('DB_PORT', default='5432'),
    }
}

# Cache
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

# CORS settings
CORS_ALLOW_ALL_ORIGINS = True  # In development only
CORS_ALLOW_CREDENTIALS = True

REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'] = {
    'anon': '1000/day',
    'user': '10000/day',
}

# CSRF settings for development
CSRF_TRUSTED_ORIGINS = ['http://localhost:8080', 'http://localhost:8000']
CSRF_COOKIE_SECURE = False

LOGGING['loggers']['payment_processor'] = {
    'handlers': ['console'],
    'level': 'DEBUG',
    'propagate': False,
}
