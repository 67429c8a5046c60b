"""
Test bootstrap: configure Django once before any test module imports models.

Tests use their own SQLite files per store, so there is no shared test
database to create.
"""
import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
os.environ.setdefault('ENVIRONMENT', 'test')

import django

django.setup()
