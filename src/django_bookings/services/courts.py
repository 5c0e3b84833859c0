"""Court registry services."""

import logging

from django.db import IntegrityError
from django.utils import timezone

from ..exceptions import ConflictInUse, DuplicateName, InvalidInput, NotFound
from ..models import Court
from ..storage import StorageContext, get_storage
from ..validators import coerce_amount, coerce_choice, coerce_id
from .common import apply_tracked_update, get_constraint_name

logger = logging.getLogger(__name__)


def _clean_name(name) -> str:
    name = (name or "").strip()
    if not name:
        raise InvalidInput("Court name is required")
    if len(name) > Court._meta.get_field("name").max_length:
        raise InvalidInput("Court name is too long")
    return name


def _coerce_price(price):
    field = Court._meta.get_field("price")
    return coerce_amount(price, "price", field.max_digits, field.decimal_places)


def _assert_name_free(storage: StorageContext, name: str, exclude_id=None):
    clash = storage.objects(Court).filter(name__iexact=name)
    if exclude_id is not None:
        clash = clash.exclude(pk=exclude_id)
    if clash.exists():
        raise DuplicateName(f"Court name '{name}' already exists")


def _save_court(storage: StorageContext, court: Court) -> None:
    try:
        with storage.atomic():
            court.save(using=storage.alias)
    except IntegrityError as e:
        constraint = get_constraint_name(e)
        # SQLite reports no constraint name; name is the only unique column on courts
        if constraint == "bookings_court_unique_live_name" or (
            constraint is None and "unique" in str(e).lower()
        ):
            raise DuplicateName(f"Court name '{court.name}' already exists") from e
        raise


def list_courts(*, active_only: bool = False, storage: StorageContext | None = None) -> list[Court]:
    """Courts that have not been deleted, ordered by name."""
    storage = get_storage(storage)
    courts = storage.objects(Court).all()
    if active_only:
        courts = courts.active()
    with storage.guard():
        return list(courts.order_by("name"))


def get_court(court_id, *, storage: StorageContext | None = None) -> Court:
    """
    Get a court by id.

    Raises:
        NotFound: If the id is unknown or the court was deleted
    """
    storage = get_storage(storage)
    pk = coerce_id(court_id, "court_id")
    with storage.guard():
        court = storage.objects(Court).filter(pk=pk).first()
    if court is None:
        raise NotFound("Court", court_id)
    return court


def create_court(
    name: str,
    price,
    description: str = "",
    status: str | None = None,
    *,
    storage: StorageContext | None = None,
) -> Court:
    """
    Create a court.

    Args:
        name: Unique display name
        price: Non-negative price per session
        description: Optional free text
        status: "active" (default), "maintenance" or "inactive"

    Raises:
        DuplicateName: If another live court has this name
        InvalidInput: If name is blank, price is negative or status is unknown
    """
    storage = get_storage(storage)
    name = _clean_name(name)
    price = _coerce_price(price)
    status = coerce_choice(status or Court.Status.ACTIVE, Court.Status, "status")

    court = Court(name=name, description=description or "", price=price, status=status)
    with storage.atomic():
        _assert_name_free(storage, name)
        _save_court(storage, court)

    logger.info(f"Created court {court.pk} '{court.name}' at {court.price} [{court.status}]")
    return court


def update_court(
    court_id,
    name: str | None = None,
    description: str | None = None,
    price=None,
    status: str | None = None,
    *,
    storage: StorageContext | None = None,
) -> Court:
    """
    Partially update a court. None means "leave unchanged".

    Price changes never touch existing bookings; their total_amount was frozen
    when they were created.

    Raises:
        NotFound: If the court does not exist
        InvalidInput: If no field is supplied or a value is invalid
        DuplicateName: If the new name belongs to another live court
    """
    storage = get_storage(storage)
    pk = coerce_id(court_id, "court_id")
    if name is None and description is None and price is None and status is None:
        raise InvalidInput("No fields to update")
    if name is not None:
        name = _clean_name(name)
    if price is not None:
        price = _coerce_price(price)
    if status is not None:
        status = coerce_choice(status, Court.Status, "status")

    with storage.atomic():
        court = storage.objects(Court).select_for_update().filter(pk=pk).first()
        if court is None:
            raise NotFound("Court", court_id)

        changes = {}
        apply_tracked_update(court, "name", name, changes)
        apply_tracked_update(court, "description", description, changes)
        apply_tracked_update(court, "price", price, changes)
        apply_tracked_update(court, "status", status, changes)

        if not changes:
            return court
        if "name" in changes:
            _assert_name_free(storage, court.name, exclude_id=court.pk)
        _save_court(storage, court)

    logger.info(f"Updated court {court.pk}: {changes}")
    return court


def delete_court(court_id, *, storage: StorageContext | None = None) -> None:
    """
    Delete a court.

    Blocked while any non-cancelled booking references the court. Cancelled
    bookings do not block; the court is soft-deleted so they keep their
    reference.

    Raises:
        NotFound: If the court does not exist
        ConflictInUse: If a non-cancelled booking references the court
    """
    storage = get_storage(storage)
    pk = coerce_id(court_id, "court_id")

    with storage.atomic():
        court = storage.objects(Court).select_for_update().filter(pk=pk).first()
        if court is None:
            raise NotFound("Court", court_id)
        if court.bookings.db_manager(storage.alias).live().exists():
            raise ConflictInUse(f"Cannot delete court '{court.name}' with active bookings")

        court.deleted_at = timezone.now()
        court.save(using=storage.alias, update_fields=["deleted_at", "updated_at"])

    logger.info(f"Deleted court {pk} '{court.name}'")
