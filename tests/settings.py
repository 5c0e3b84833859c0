"""Django settings for django-bookings tests."""

import os
import tempfile

SECRET_KEY = "test-secret-key-not-for-production"

# File-backed so threads in the concurrency tests share one database.
# IMMEDIATE takes the write lock at BEGIN, like a row lock on PostgreSQL.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.path.join(tempfile.gettempdir(), "django_bookings.sqlite3"),
        "OPTIONS": {
            "transaction_mode": "IMMEDIATE",
            "timeout": 20,
        },
        "TEST": {
            "NAME": os.path.join(tempfile.gettempdir(), "test_django_bookings.sqlite3"),
        },
    }
}

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "django_bookings",
]

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

USE_TZ = True
TIME_ZONE = "UTC"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

BOOKINGS_DAILY_SUMMARY_DAYS = 7
BOOKINGS_UTILIZATION_WINDOW_DAYS = 30
