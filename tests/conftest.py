"""Shared fixtures for django-bookings tests."""

from datetime import timedelta

import pytest
from django.utils import timezone

from django_bookings.services import create_booking, create_court, create_time_slot


@pytest.fixture
def principal(django_user_model):
    """An active administrator."""
    return django_user_model.objects.create_user(
        username="admin",
        password="admin-pass-123",
        email="admin@example.com",
    )


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def tomorrow(today):
    return today + timedelta(days=1)


@pytest.fixture
def court(db):
    return create_court("Court 1", "50000", description="Indoor")


@pytest.fixture
def other_court(db):
    return create_court("Court 2", "75000")


@pytest.fixture
def slot(db):
    return create_time_slot("08:00", "10:00", "Morning")


@pytest.fixture
def late_slot(db):
    return create_time_slot("10:00", "12:00", "Late morning")


@pytest.fixture
def make_booking(court, slot, principal, today):
    """Factory for bookings; defaults to court/slot/today/principal."""

    def _make_booking(**kwargs):
        params = {
            "court_id": court.pk,
            "slot_id": slot.pk,
            "booking_date": today,
            "customer_name": "Alice",
            "created_by": principal.pk,
        }
        params.update(kwargs)
        return create_booking(**params)

    return _make_booking
