"""Tests for management commands."""

import json
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from django_bookings.models import Court, TimeSlot


def run_command(*args, **kwargs):
    out = StringIO()
    call_command(*args, stdout=out, **kwargs)
    return out.getvalue()


@pytest.mark.django_db
class TestSeedCommand:
    """Tests for bookings_seed."""

    def test_seeds_courts_and_two_hour_slots(self):
        output = run_command("bookings_seed")

        assert "Seeding complete" in output
        assert list(Court.objects.values_list("name", flat=True)) == ["Court 1", "Court 2", "Court 3"]
        slots = list(TimeSlot.objects.order_by("start_time"))
        assert len(slots) == 7
        assert slots[0].label == "08:00-10:00 (08:00 - 10:00)"
        assert f"{slots[-1].end_time:%H:%M}" == "22:00"

    def test_is_idempotent(self):
        run_command("bookings_seed")
        output = run_command("bookings_seed")

        assert "skip court 'Court 1'" in output
        assert Court.objects.count() == 3
        assert TimeSlot.objects.count() == 7

    def test_creates_administrator(self, django_user_model):
        run_command("bookings_seed", "--courts", "0", "--admin-username", "boss", "--admin-password", "pw-123456")

        assert django_user_model.objects.filter(username="boss").exists()
        assert Court.objects.count() == 0

    def test_bad_price_is_a_command_error(self):
        with pytest.raises(CommandError):
            run_command("bookings_seed", "--price", "-5")


@pytest.mark.django_db
class TestCheckCommand:
    """Tests for bookings_check."""

    def test_reports_incomplete_setup(self):
        output = run_command("bookings_check")

        assert "incomplete_setup" in output

    def test_json_report(self, principal, court, slot):
        output = run_command("bookings_check", "--format", "json")

        report = json.loads(output)
        assert report["system_status"] == "ready"
        assert report["totals"]["courts"] == 1


@pytest.mark.django_db
class TestReportCommand:
    """Tests for bookings_report."""

    def test_dashboard_json(self, make_booking, today):
        make_booking(payment_status="paid")

        output = run_command("bookings_report", "dashboard", "--format", "json")

        data = json.loads(output)
        assert data["date"] == today.isoformat()
        assert data["bookings"] == 1
        assert data["revenue"] == "50000.00"

    def test_daily_text(self, make_booking):
        make_booking()

        output = run_command("bookings_report", "daily")

        assert "Daily report" in output
        assert "court_name=Court 1" in output

    def test_invalid_input_is_a_command_error(self, db):
        with pytest.raises(CommandError):
            run_command("bookings_report", "daily", "--start", "not-a-date")
