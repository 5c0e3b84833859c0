"""Tests for time slot registry services."""

from datetime import time, timedelta

import pytest
from freezegun import freeze_time

from django_bookings.exceptions import (
    ConflictInUse,
    InvalidInput,
    InvalidRange,
    NotFound,
    OverlapConflict,
)
from django_bookings.models import TimeSlot
from django_bookings.services import (
    cancel_booking,
    create_time_slot,
    delete_time_slot,
    get_time_slot,
    list_time_slots,
    update_time_slot,
)


@pytest.mark.django_db
class TestCreateTimeSlot:
    """Tests for create_time_slot()."""

    def test_creates_active_slot_by_default(self):
        slot = create_time_slot(time(8, 0), time(10, 0), "Morning")

        assert slot.pk is not None
        assert slot.start_time == time(8, 0)
        assert slot.end_time == time(10, 0)
        assert slot.status == TimeSlot.Status.ACTIVE

    def test_accepts_iso_time_strings(self):
        slot = create_time_slot("18:30", "20:00", "Evening")

        assert slot.start_time == time(18, 30)
        assert slot.end_time == time(20, 0)

    def test_start_equal_to_end_is_invalid_range(self):
        with pytest.raises(InvalidRange):
            create_time_slot("08:00", "08:00", "Empty")

    def test_start_after_end_is_invalid_range(self):
        with pytest.raises(InvalidRange):
            create_time_slot("12:00", "10:00", "Backwards")

    def test_overlapping_active_slot_rejected(self):
        create_time_slot("08:00", "10:00", "Morning")

        with pytest.raises(OverlapConflict):
            create_time_slot("09:00", "11:00", "Overlap", status="active")

        assert TimeSlot.objects.count() == 1

    def test_contained_slot_rejected(self):
        create_time_slot("08:00", "12:00", "Long")

        with pytest.raises(OverlapConflict):
            create_time_slot("09:00", "10:00", "Inside")

    def test_adjacent_slots_do_not_overlap(self):
        create_time_slot("08:00", "10:00", "Morning")

        slot = create_time_slot("10:00", "12:00", "Late morning")

        assert slot.pk is not None

    def test_inactive_slots_do_not_block_new_slots(self):
        create_time_slot("08:00", "10:00", "Old morning", status="inactive")

        slot = create_time_slot("09:00", "11:00", "New morning")

        assert slot.is_active

    def test_blank_name_rejected(self):
        with pytest.raises(InvalidInput):
            create_time_slot("08:00", "10:00", "   ")

    def test_unknown_status_rejected(self):
        with pytest.raises(InvalidInput):
            create_time_slot("08:00", "10:00", "Morning", status="paused")

    def test_malformed_time_rejected(self):
        with pytest.raises(InvalidInput):
            create_time_slot("8 o'clock", "10:00", "Morning")


@pytest.mark.django_db
class TestReadTimeSlots:
    """Tests for list_time_slots() and get_time_slot()."""

    def test_list_is_ordered_by_start_time(self):
        create_time_slot("14:00", "16:00", "Afternoon")
        create_time_slot("08:00", "10:00", "Morning")
        create_time_slot("10:00", "12:00", "Late morning", status="inactive")

        slots = list_time_slots()

        assert [s.name for s in slots] == ["Morning", "Late morning", "Afternoon"]

    def test_list_active_only(self):
        create_time_slot("08:00", "10:00", "Morning")
        create_time_slot("10:00", "12:00", "Late morning", status="inactive")

        assert [s.name for s in list_time_slots(active_only=True)] == ["Morning"]

    def test_get_returns_slot(self, slot):
        assert get_time_slot(slot.pk) == slot

    def test_get_unknown_slot_raises_not_found(self):
        with pytest.raises(NotFound) as exc_info:
            get_time_slot(999)

        assert exc_info.value.entity == "TimeSlot"


@pytest.mark.django_db
class TestUpdateTimeSlot:
    """Tests for update_time_slot()."""

    def test_partial_update_keeps_other_fields(self, slot):
        updated = update_time_slot(slot.pk, name="Early")

        assert updated.name == "Early"
        assert updated.start_time == time(8, 0)
        assert updated.end_time == time(10, 0)
        assert updated.status == TimeSlot.Status.ACTIVE

    def test_unknown_slot_raises_not_found(self):
        with pytest.raises(NotFound):
            update_time_slot(999, name="Nope")

    def test_move_with_upcoming_booking_rejected(self, slot, make_booking, tomorrow):
        make_booking(booking_date=tomorrow)

        with pytest.raises(ConflictInUse):
            update_time_slot(slot.pk, start_time="07:00", end_time="09:00")

        slot.refresh_from_db()
        assert slot.start_time == time(8, 0)

    def test_move_with_booking_today_rejected(self, slot, make_booking):
        make_booking()

        with pytest.raises(ConflictInUse):
            update_time_slot(slot.pk, end_time="11:00")

    def test_deactivate_with_upcoming_booking_rejected(self, slot, make_booking, tomorrow):
        make_booking(booking_date=tomorrow)

        with pytest.raises(ConflictInUse):
            update_time_slot(slot.pk, status="inactive")

    def test_rename_with_upcoming_booking_allowed(self, slot, make_booking, tomorrow):
        make_booking(booking_date=tomorrow)

        updated = update_time_slot(slot.pk, name="Prime time")

        assert updated.name == "Prime time"

    def test_unchanged_times_with_upcoming_booking_allowed(self, slot, make_booking, tomorrow):
        make_booking(booking_date=tomorrow)

        updated = update_time_slot(slot.pk, start_time="08:00", end_time="10:00", status="active")

        assert updated.start_time == time(8, 0)

    def test_cancelled_booking_does_not_block(self, slot, make_booking, tomorrow):
        booking = make_booking(booking_date=tomorrow)
        cancel_booking(booking.pk)

        updated = update_time_slot(slot.pk, status="inactive")

        assert updated.status == TimeSlot.Status.INACTIVE

    def test_past_booking_does_not_block(self, slot, make_booking, today):
        make_booking(booking_date=today)

        with freeze_time(today + timedelta(days=3)):
            updated = update_time_slot(slot.pk, start_time="07:00", end_time="09:00")

        assert updated.start_time == time(7, 0)

    def test_single_bound_is_validated_against_existing_other_bound(self, slot):
        with pytest.raises(InvalidRange):
            update_time_slot(slot.pk, end_time="07:00")

    def test_move_into_other_active_slot_rejected(self, slot, late_slot):
        with pytest.raises(OverlapConflict):
            update_time_slot(slot.pk, start_time="08:00", end_time="11:00")

    def test_overlap_check_excludes_itself(self, slot):
        updated = update_time_slot(slot.pk, start_time="08:30", end_time="10:30")

        assert updated.start_time == time(8, 30)
        assert updated.end_time == time(10, 30)

    def test_reactivating_into_overlap_rejected(self):
        old = create_time_slot("08:00", "10:00", "Old morning", status="inactive")
        create_time_slot("09:00", "11:00", "New morning")

        with pytest.raises(OverlapConflict):
            update_time_slot(old.pk, status="active")


@pytest.mark.django_db
class TestDeleteTimeSlot:
    """Tests for delete_time_slot()."""

    def test_deletes_unused_slot(self, slot):
        delete_time_slot(slot.pk)

        assert not TimeSlot.objects.filter(pk=slot.pk).exists()

    def test_unknown_slot_raises_not_found(self):
        with pytest.raises(NotFound):
            delete_time_slot(999)

    def test_slot_with_live_booking_cannot_be_deleted(self, slot, make_booking):
        make_booking()

        with pytest.raises(ConflictInUse):
            delete_time_slot(slot.pk)

    def test_slot_with_only_cancelled_booking_cannot_be_deleted(self, slot, make_booking):
        booking = make_booking()
        cancel_booking(booking.pk)

        with pytest.raises(ConflictInUse):
            delete_time_slot(slot.pk)

        assert TimeSlot.objects.filter(pk=slot.pk).exists()
