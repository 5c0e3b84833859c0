"""End-to-end booking scenarios across registries and ledger."""

from datetime import timedelta
from decimal import Decimal

import pytest

from django_bookings.exceptions import (
    ConflictInUse,
    OverlapConflict,
    PastDateRejected,
    SlotTaken,
    TerminalState,
)
from django_bookings.models import Booking, TimeSlot
from django_bookings.services import (
    cancel_booking,
    create_booking,
    create_court,
    create_time_slot,
    delete_court,
    delete_time_slot,
    update_booking_status,
)


@pytest.mark.django_db
class TestScenarios:

    def test_overlapping_active_slot_is_refused(self):
        create_time_slot("08:00", "10:00", "Morning")

        with pytest.raises(OverlapConflict):
            create_time_slot("09:00", "11:00", "Mid morning", status="active")

    def test_second_booking_of_same_triple_is_refused(self, principal, today):
        court = create_court("Court1", 50000)
        slot = create_time_slot("08:00", "10:00", "Morning")

        booking = create_booking(court.pk, slot.pk, today, "Alice", principal.pk)
        assert booking.total_amount == Decimal("50000.00")

        with pytest.raises(SlotTaken):
            create_booking(court.pk, slot.pk, today, "Alice", principal.pk)

    def test_booking_yesterday_is_refused(self, court, slot, principal, today):
        with pytest.raises(PastDateRejected):
            create_booking(court.pk, slot.pk, today - timedelta(days=1), "Alice", principal.pk)

    def test_cancelled_booking_cannot_be_reconfirmed(self, make_booking, principal):
        booking = make_booking()
        cancel_booking(booking.pk)

        with pytest.raises(TerminalState):
            update_booking_status(booking.pk, booking_status="confirmed", updated_by=principal.pk)

        assert Booking.objects.get(pk=booking.pk).is_cancelled

    def test_court_and_slot_deletion_rules_differ(self, court, slot, make_booking):
        booking = make_booking()

        with pytest.raises(ConflictInUse):
            delete_court(court.pk)

        cancel_booking(booking.pk)

        # Slots keep their history: any booking blocks deletion
        with pytest.raises(ConflictInUse):
            delete_time_slot(slot.pk)
        assert TimeSlot.objects.filter(pk=slot.pk).exists()

        # Courts only care about live bookings
        delete_court(court.pk)
