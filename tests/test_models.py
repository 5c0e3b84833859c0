"""Tests for model constraints and querysets."""

from datetime import time, timedelta
from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction
from freezegun import freeze_time

from django_bookings.models import Booking, Court, TimeSlot


@pytest.mark.django_db
class TestBookingConstraints:
    """The database is the final authority on double booking."""

    def _row(self, court, slot, principal, today, **kwargs):
        params = {
            "court": court,
            "slot": slot,
            "booking_date": today,
            "customer_name": "Alice",
            "created_by": principal,
        }
        params.update(kwargs)
        return Booking.objects.create(**params)

    def test_second_live_row_rejected(self, court, slot, principal, today):
        self._row(court, slot, principal, today)

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                self._row(court, slot, principal, today)

    def test_cancelled_rows_do_not_count(self, court, slot, principal, today):
        self._row(court, slot, principal, today, booking_status="cancelled")
        self._row(court, slot, principal, today, booking_status="cancelled")

        assert self._row(court, slot, principal, today).pk is not None

    def test_negative_amount_rejected(self, court, slot, principal, today):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                self._row(court, slot, principal, today, total_amount=Decimal("-1"))

    def test_effective_status_property(self, court, slot, principal, today):
        booking = self._row(court, slot, principal, today)

        assert booking.effective_status == "confirmed"
        with freeze_time(today + timedelta(days=1)):
            assert booking.effective_status == "completed"


@pytest.mark.django_db
class TestRegistryConstraints:

    def test_slot_must_start_before_end(self):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                TimeSlot.objects.create(start_time=time(10), end_time=time(9), name="Bad")

    def test_live_court_names_unique(self, court):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Court.objects.create(name=court.name)

    def test_live_court_names_unique_ignoring_case(self, court):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Court.objects.create(name=court.name.swapcase())

    def test_overlapping_queryset(self, slot, late_slot):
        assert list(TimeSlot.objects.overlapping(time(9), time(11)).order_by("start_time")) == [
            slot,
            late_slot,
        ]
        assert not TimeSlot.objects.overlapping(time(12), time(13)).exists()
        assert slot.overlaps(time(9, 59), time(11))
        assert not slot.overlaps(time(10), time(11))
