"""Input coercion for the service boundary.

Callers may pass typed values (date, time, Decimal, int) or their ISO-8601 /
string forms. Anything else raises InvalidInput.
"""

from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.core.validators import DecimalValidator

from .exceptions import InvalidInput


def coerce_id(value, field: str) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidInput(f"{field} must be an integer id")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be an integer id")


def coerce_date(value, field: str = "date") -> date:
    """Accept a date or an ISO-8601 calendar date string. No time zone conversion."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise InvalidInput(f"{field} must be an ISO-8601 date (YYYY-MM-DD), got {value!r}")


def coerce_time(value, field: str) -> time:
    if isinstance(value, time):
        return value.replace(tzinfo=None)
    if isinstance(value, str):
        try:
            return time.fromisoformat(value.strip())
        except ValueError:
            pass
    raise InvalidInput(f"{field} must be a time (HH:MM[:SS]), got {value!r}")


def coerce_amount(value, field: str, max_digits: int = 10, decimal_places: int = 2) -> Decimal:
    """Non-negative decimal rounded to decimal_places that fits a DecimalField(max_digits)."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInput(f"{field} must be a decimal number, got {value!r}")
    if not amount.is_finite():
        raise InvalidInput(f"{field} must be a finite number")
    if amount < 0:
        raise InvalidInput(f"{field} cannot be negative")
    try:
        amount = amount.quantize(Decimal(1).scaleb(-decimal_places))
        DecimalValidator(max_digits, decimal_places)(amount)
    except (InvalidOperation, ValidationError):
        raise InvalidInput(
            f"{field} must have at most {max_digits - decimal_places} digits "
            f"before the decimal point, got {value!r}"
        )
    return amount


def coerce_choice(value, choices, field: str) -> str:
    """Restrict value to a TextChoices enumeration."""
    if value not in choices.values:
        allowed = ", ".join(choices.values)
        raise InvalidInput(f"{field} must be one of: {allowed}; got {value!r}")
    return str(value)


def validate_pagination(limit, offset) -> tuple[int | None, int]:
    if limit is not None:
        limit = coerce_id(limit, "limit")
        if limit < 0:
            raise InvalidInput("limit cannot be negative")
    offset = 0 if offset is None else coerce_id(offset, "offset")
    if offset < 0:
        raise InvalidInput("offset cannot be negative")
    return limit, offset
