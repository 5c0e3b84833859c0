"""Django Bookings - Court and time-slot booking primitives.

Models:
    Court: A bookable court with a session price
    TimeSlot: A recurring time-of-day window
    Booking: One court + one slot on one calendar date

Services (the only supported write path):
    create_time_slot, update_time_slot, delete_time_slot
    create_court, update_court, delete_court
    create_booking, update_booking_status, update_booking_details, cancel_booking

Selectors (read-only):
    list_available_slots, count_available_slots, get_booking, booking_history
"""

__version__ = "0.1.0"

__all__ = [
    # Models
    "Court",
    "TimeSlot",
    "Booking",
    # Services
    "create_time_slot",
    "update_time_slot",
    "delete_time_slot",
    "create_court",
    "update_court",
    "delete_court",
    "create_booking",
    "update_booking_status",
    "update_booking_details",
    "cancel_booking",
    # Selectors
    "list_available_slots",
    "count_available_slots",
    "get_booking",
    "booking_history",
    # Exceptions
    "BookingsError",
]

_MODELS = ("Court", "TimeSlot", "Booking")
_SELECTORS = ("list_available_slots", "count_available_slots", "get_booking", "booking_history")


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name in _MODELS:
        from . import models
        return getattr(models, name)

    if name in _SELECTORS:
        from . import selectors
        return getattr(selectors, name)

    if name == "BookingsError":
        from .exceptions import BookingsError
        return BookingsError

    if name in __all__:
        from . import services
        return getattr(services, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
