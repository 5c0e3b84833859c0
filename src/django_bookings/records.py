"""Plain-dict records for the presentation boundary.

Dates are ISO-8601 strings, times are "HH:MM", money is a decimal string.
"""

from decimal import Decimal


def _iso(value):
    return value.isoformat() if value is not None else None


def _hhmm(value):
    return value.strftime("%H:%M") if value is not None else None


def _money(value):
    return str(value) if value is not None else None


def court_record(court) -> dict:
    return {
        "id": court.pk,
        "name": court.name,
        "description": court.description,
        "price": _money(court.price),
        "status": court.status,
        "created_at": _iso(court.created_at),
        "updated_at": _iso(court.updated_at),
    }


def slot_record(slot) -> dict:
    return {
        "id": slot.pk,
        "name": slot.name,
        "start_time": _hhmm(slot.start_time),
        "end_time": _hhmm(slot.end_time),
        "status": slot.status,
    }


def booking_record(booking) -> dict:
    """
    Booking as a dict.

    ``effective_status`` uses the queryset annotation when the booking came
    from a selector, otherwise the model property.
    """
    effective_status = getattr(booking, "reported_status", None) or booking.effective_status
    return {
        "id": booking.pk,
        "court_id": booking.court_id,
        "court_name": booking.court.name,
        "slot_id": booking.slot_id,
        "slot_name": booking.slot.name,
        "start_time": _hhmm(booking.slot.start_time),
        "end_time": _hhmm(booking.slot.end_time),
        "booking_date": _iso(booking.booking_date),
        "customer_name": booking.customer_name,
        "customer_phone": booking.customer_phone,
        "total_amount": _money(booking.total_amount),
        "payment_status": booking.payment_status,
        "booking_status": booking.booking_status,
        "effective_status": effective_status,
        "notes": booking.notes,
        "created_by": booking.created_by_id,
        "updated_by": booking.updated_by_id,
        "created_at": _iso(booking.created_at),
        "updated_at": _iso(booking.updated_at),
    }


def principal_record(principal) -> dict:
    return {
        "id": principal.pk,
        "username": principal.get_username(),
        "full_name": principal.get_full_name(),
        "email": principal.email,
        "is_active": principal.is_active,
        "last_login": _iso(principal.last_login),
    }


def available_slot_record(item) -> dict:
    record = slot_record(item.slot)
    record["is_available"] = item.is_available
    return record


def board_record(board) -> dict:
    return {
        "court": court_record(board.court),
        "booking_date": _iso(board.booking_date),
        "slots": [
            {
                **slot_record(entry.slot),
                "is_available": entry.is_available,
                "booking": booking_record(entry.booking) if entry.booking else None,
            }
            for entry in board.entries
        ],
        "totals": {
            "total": board.total,
            "booked": board.booked,
            "available": board.available,
        },
    }


def _plain(value):
    """Report rows and health data: stringify dates and decimals, recursively."""
    if isinstance(value, Decimal):
        return str(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def to_record(value):
    """Convert a service or selector result to plain data."""
    from django.contrib.auth import get_user_model

    from .models import Booking, Court, TimeSlot
    from .selectors import AvailableSlot, CourtSlotBoard

    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [to_record(item) for item in value]
    if isinstance(value, Booking):
        return booking_record(value)
    if isinstance(value, Court):
        return court_record(value)
    if isinstance(value, TimeSlot):
        return slot_record(value)
    if isinstance(value, get_user_model()):
        return principal_record(value)
    if isinstance(value, AvailableSlot):
        return available_slot_record(value)
    if isinstance(value, CourtSlotBoard):
        return board_record(value)
    return _plain(value)
