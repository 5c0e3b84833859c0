"""Outcome-tagged results for presentation layers.

Services raise; a presentation layer (CLI, API view) wraps each call with
``run`` to get an explicit outcome tag plus a plain record:

    outcome = run(create_booking, court.pk, slot.pk, "2025-06-01", "Alice", user.pk)
    if outcome.ok:
        booking_id = outcome.data["id"]
    else:
        print(outcome.outcome, outcome.message)
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable

from django.db import InterfaceError, OperationalError

from .exceptions import BookingsError, StorageUnavailable
from .records import to_record

logger = logging.getLogger(__name__)

SUCCESS = "success"
UNEXPECTED = "error"


@dataclass(frozen=True)
class Outcome:
    """``outcome`` is "success", an error kind such as "SlotTaken", or "error"."""

    outcome: str
    data: Any = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome == SUCCESS

    @property
    def is_business_rule(self) -> bool:
        return self.outcome not in (SUCCESS, UNEXPECTED, StorageUnavailable.kind)

    def to_dict(self) -> dict:
        return asdict(self)


def run(operation: Callable, *args, **kwargs) -> Outcome:
    """
    Call a service or selector and tag its result.

    Business-rule failures become their kind. Connection-level database
    errors become StorageUnavailable and anything else becomes "error"; both
    are logged with the traceback.
    """
    try:
        result = operation(*args, **kwargs)
    except BookingsError as e:
        if e.is_business_rule:
            logger.info(f"{operation.__name__} rejected: {e.kind}: {e.message}")
        else:
            logger.error(f"{operation.__name__} failed: {e.kind}: {e.message}")
        return Outcome(outcome=e.kind, message=e.message)
    except (OperationalError, InterfaceError) as e:
        logger.error(f"{operation.__name__} storage failure: {e}", exc_info=True)
        return Outcome(outcome=StorageUnavailable.kind, message=f"Storage unavailable: {e}")
    except Exception:
        logger.exception(f"{operation.__name__} failed unexpectedly")
        return Outcome(outcome=UNEXPECTED, message="Unexpected error")

    return Outcome(outcome=SUCCESS, data=to_record(result))
