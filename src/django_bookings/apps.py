"""Django app configuration for django-bookings."""

from django.apps import AppConfig


class DjangoBookingsConfig(AppConfig):
    """App configuration for django-bookings."""

    name = 'django_bookings'
    verbose_name = 'Django Bookings'
    default_auto_field = 'django.db.models.BigAutoField'
