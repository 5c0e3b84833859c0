"""Storage context for django-bookings.

Every service and selector takes an optional ``storage`` keyword. The context
names the database alias, scopes one transaction per operation and turns
connection-level failures into StorageUnavailable.

Lifecycle:
    storage = open_storage()          # process start, verifies the connection
    create_booking(..., storage=storage)
    storage.close()                   # shutdown
"""

import logging
from contextlib import contextmanager

from django.db import InterfaceError, OperationalError, connections, transaction
from django.utils import timezone

from . import conf
from .exceptions import StorageUnavailable

logger = logging.getLogger(__name__)


class StorageContext:
    """A database alias plus the transaction discipline used on it."""

    def __init__(self, alias: str | None = None):
        self.alias = alias or conf.get_database_alias()

    def __repr__(self):
        return f"StorageContext(alias={self.alias!r})"

    def objects(self, model, manager_name: str = "objects"):
        """Return ``model.<manager_name>`` bound to this context's database."""
        return getattr(model, manager_name).db_manager(self.alias)

    @contextmanager
    def guard(self):
        """Map connection failures to StorageUnavailable without opening a transaction."""
        try:
            yield self
        except (OperationalError, InterfaceError) as e:
            logger.error(f"Storage failure on '{self.alias}': {e}", exc_info=True)
            raise StorageUnavailable(f"Storage unavailable: {e}") from e

    @contextmanager
    def atomic(self):
        """
        All-or-nothing scope for one mutating operation.

        Any exception leaving the block rolls the transaction back, including
        business-rule failures raised by the service.
        """
        with self.guard():
            with transaction.atomic(using=self.alias):
                yield self

    def ensure_connection(self):
        with self.guard():
            connections[self.alias].ensure_connection()

    def close(self):
        """Release this thread's connection for the alias."""
        connections[self.alias].close()

    def health(self) -> dict:
        """
        Connectivity and setup report.

        system_status is "ready" once at least one principal, court and time
        slot exist, otherwise "incomplete_setup".
        """
        from django.contrib.auth import get_user_model

        from .models import Booking, Court, TimeSlot

        today = timezone.localdate()
        connection = connections[self.alias]
        with self.guard():
            connection.ensure_connection()
            totals = {
                "principals": self.objects(get_user_model(), "_default_manager").count(),
                "courts": self.objects(Court).count(),
                "time_slots": self.objects(TimeSlot).count(),
                "bookings": self.objects(Booking).count(),
                "live_bookings_today": self.objects(Booking).live().filter(booking_date=today).count(),
            }

        ready = totals["principals"] > 0 and totals["courts"] > 0 and totals["time_slots"] > 0
        return {
            "status": "success",
            "server_time": timezone.now().isoformat(),
            "database": {
                "alias": self.alias,
                "vendor": connection.vendor,
                "name": str(connection.settings_dict.get("NAME", "")),
            },
            "totals": totals,
            "system_status": "ready" if ready else "incomplete_setup",
        }


def get_storage(storage: StorageContext | None = None) -> StorageContext:
    """Return the given context, or one for BOOKINGS_DATABASE_ALIAS."""
    if storage is not None:
        return storage
    return StorageContext()


def open_storage(alias: str | None = None) -> StorageContext:
    """Create a storage context and verify its connection."""
    storage = StorageContext(alias)
    storage.ensure_connection()
    logger.info(f"Opened booking storage on '{storage.alias}'")
    return storage
