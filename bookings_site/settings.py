"""
Django settings for the bookings_site project.

A minimal site for running the django_bookings management commands against a
real database. SQLite by default; set BOOKINGS_DB_ENGINE=postgres for
PostgreSQL.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-bookings-key-change-in-production")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv("DEBUG", "True").lower() in ("true", "1", "yes")

ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django_bookings",
]

DB_ENGINE = os.getenv("BOOKINGS_DB_ENGINE", "sqlite").lower()
DB_TIMEOUT = int(os.getenv("BOOKINGS_DB_TIMEOUT", "20"))

if DB_ENGINE == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("POSTGRES_DB", "bookings"),
            "USER": os.getenv("POSTGRES_USER", "postgres"),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD", "postgres"),
            "HOST": os.getenv("POSTGRES_HOST", "localhost"),
            "PORT": os.getenv("POSTGRES_PORT", "5432"),
            "OPTIONS": {
                "connect_timeout": DB_TIMEOUT,
            },
        }
    }
elif DB_ENGINE == "sqlite":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": os.getenv("SQLITE_PATH", str(BASE_DIR / "bookings.sqlite3")),
            "OPTIONS": {
                # Take the write lock at BEGIN so check-then-insert cannot interleave
                "transaction_mode": "IMMEDIATE",
                "timeout": DB_TIMEOUT,
            },
        }
    }
else:
    raise ValueError(f"BOOKINGS_DB_ENGINE must be 'sqlite' or 'postgres', got {DB_ENGINE!r}")

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Django Bookings configuration
BOOKINGS_DATABASE_ALIAS = "default"
BOOKINGS_DAILY_SUMMARY_DAYS = int(os.getenv("BOOKINGS_DAILY_SUMMARY_DAYS", "7"))
BOOKINGS_UTILIZATION_WINDOW_DAYS = int(os.getenv("BOOKINGS_UTILIZATION_WINDOW_DAYS", "30"))

# Logging configuration
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": os.getenv("DJANGO_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "django_bookings": {
            "handlers": ["console"],
            "level": os.getenv("BOOKINGS_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
