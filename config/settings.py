"""
Django settings for the task service.

Only the ORM, migrations and management commands are used; there is no
HTTP stack here. Requests arrive through lambda_handlers.py.
"""
import os
from pathlib import Path

from .database import get_database_config

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'task-service-insecure-development-key')

DEBUG = os.getenv('DJANGO_DEBUG', 'false').lower() == 'true'

ALLOWED_HOSTS = []

INSTALLED_APPS = [
    'apps.tasks',
]

DATABASES = {
    'default': get_database_config(BASE_DIR),
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# All timestamps are stored and returned in UTC
USE_TZ = True
TIME_ZONE = 'UTC'

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'default',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': os.getenv('LOG_LEVEL', 'INFO'),
    },
    'loggers': {
        'django.db.backends': {
            'level': 'WARNING',
        },
    },
}
