"""Write services for django-bookings.

Every function takes an optional ``storage`` keyword (StorageContext) and runs
in a single transaction on it.
"""

from .bookings import (
    cancel_booking,
    create_booking,
    update_booking_details,
    update_booking_status,
)
from .courts import create_court, delete_court, get_court, list_courts, update_court
from .principals import (
    authenticate_principal,
    change_password,
    create_principal,
    resolve_principal,
)
from .slots import (
    create_time_slot,
    delete_time_slot,
    get_time_slot,
    list_time_slots,
    update_time_slot,
)

__all__ = [
    # Time slots
    "list_time_slots",
    "get_time_slot",
    "create_time_slot",
    "update_time_slot",
    "delete_time_slot",
    # Courts
    "list_courts",
    "get_court",
    "create_court",
    "update_court",
    "delete_court",
    # Bookings
    "create_booking",
    "update_booking_status",
    "update_booking_details",
    "cancel_booking",
    # Principals
    "authenticate_principal",
    "resolve_principal",
    "create_principal",
    "change_password",
]
