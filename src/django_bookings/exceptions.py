"""Custom exceptions for django-bookings.

Every exception carries a machine-readable ``kind``. Business-rule failures
are expected and recoverable by the caller; ``StorageUnavailable`` is not a
business rule and should feed the caller's retry policy.
"""


class BookingsError(Exception):
    """Base exception for booking errors."""

    kind = "error"
    is_business_rule = True
    default_message = "Booking operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(BookingsError):
    """Raised when a referenced court, slot, booking or principal id is unknown."""

    kind = "NotFound"
    default_message = "Not found"

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")


class InvalidInput(BookingsError):
    """Raised when a value is malformed or outside its enumerated set."""

    kind = "InvalidInput"
    default_message = "Invalid input"


class InvalidRange(BookingsError):
    """Raised when a time slot does not start before it ends."""

    kind = "InvalidRange"
    default_message = "Start time must be before end time"


class OverlapConflict(BookingsError):
    """Raised when a time slot would overlap another active time slot."""

    kind = "OverlapConflict"
    default_message = "Time slot overlaps with an existing active slot"


class ConflictInUse(BookingsError):
    """Raised when deletion or modification is blocked by existing bookings."""

    kind = "ConflictInUse"
    default_message = "Entity is referenced by existing bookings"


class DuplicateName(BookingsError):
    """Raised when a court name, username or email is already taken."""

    kind = "DuplicateName"
    default_message = "Name already exists"


class PastDateRejected(BookingsError):
    """Raised when a booking date is before today."""

    kind = "PastDateRejected"
    default_message = "Booking date cannot be in the past"


class ResourceUnavailable(BookingsError):
    """Raised when the court does not exist or is not active."""

    kind = "ResourceUnavailable"
    default_message = "Court not found or not active"


class WindowUnavailable(BookingsError):
    """Raised when the time slot does not exist or is not active."""

    kind = "WindowUnavailable"
    default_message = "Time slot not found or not active"


class InvalidCustomer(BookingsError):
    """Raised when the customer name is missing or blank."""

    kind = "InvalidCustomer"
    default_message = "Customer name is required"


class SlotTaken(BookingsError):
    """Raised when the court/slot/date triple already has a live booking."""

    kind = "SlotTaken"
    default_message = "Slot is already booked for that date"


class TerminalState(BookingsError):
    """Raised when a status change is attempted on a cancelled booking."""

    kind = "TerminalState"
    default_message = "Cancelled bookings cannot change status"

    def __init__(self, booking_id):
        self.booking_id = booking_id
        super().__init__(f"Booking '{booking_id}' is cancelled; its status cannot change")


class InvalidPrincipal(BookingsError):
    """Raised when a principal id is unknown or inactive, or credentials fail."""

    kind = "InvalidPrincipal"
    default_message = "Unknown or inactive principal"


class StorageUnavailable(BookingsError):
    """Raised when the database cannot complete the transaction."""

    kind = "StorageUnavailable"
    is_business_rule = False
    default_message = "Storage unavailable"
