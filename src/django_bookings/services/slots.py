"""Time slot registry services.

Functions:
- list_time_slots(): All slots ordered by start time
- get_time_slot(): One slot by id
- create_time_slot(): New slot, rejected if it overlaps an active slot
- update_time_slot(): Partial update guarded by upcoming bookings
- delete_time_slot(): Hard delete of a slot that was never booked

Overlap checks and the write that follows them run under the slot registry
lock, so two callers cannot commit overlapping active slots.
"""

import logging

from django.db.models import ProtectedError
from django.utils import timezone

from ..exceptions import ConflictInUse, InvalidInput, InvalidRange, NotFound, OverlapConflict
from ..models import RegistryLock, TimeSlot
from ..storage import StorageContext, get_storage
from ..validators import coerce_choice, coerce_id, coerce_time

logger = logging.getLogger(__name__)

SLOT_REGISTRY_LOCK = "time_slots"


def _lock_slot_registry(storage: StorageContext) -> RegistryLock:
    """Take the registry-wide lock row. Must be called inside storage.atomic()."""
    locks = storage.objects(RegistryLock)
    lock, _ = locks.get_or_create(name=SLOT_REGISTRY_LOCK)
    return locks.select_for_update().get(pk=lock.pk)


def _clean_name(name) -> str:
    name = (name or "").strip()
    if not name:
        raise InvalidInput("Time slot name is required")
    return name


def _assert_no_overlap(storage: StorageContext, start_time, end_time, exclude_id=None):
    clashes = storage.objects(TimeSlot).active().overlapping(start_time, end_time)
    if exclude_id is not None:
        clashes = clashes.exclude(pk=exclude_id)
    clash = clashes.order_by("start_time").first()
    if clash is not None:
        raise OverlapConflict(
            f"Time slot {start_time:%H:%M}-{end_time:%H:%M} overlaps active slot '{clash.label}'"
        )


def list_time_slots(*, active_only: bool = False, storage: StorageContext | None = None) -> list[TimeSlot]:
    """All time slots ordered by start time ascending."""
    storage = get_storage(storage)
    slots = storage.objects(TimeSlot).all()
    if active_only:
        slots = slots.active()
    with storage.guard():
        return list(slots.order_by("start_time", "end_time"))


def get_time_slot(slot_id, *, storage: StorageContext | None = None) -> TimeSlot:
    """
    Get a time slot by id.

    Raises:
        NotFound: If no slot has this id
    """
    storage = get_storage(storage)
    pk = coerce_id(slot_id, "slot_id")
    with storage.guard():
        slot = storage.objects(TimeSlot).filter(pk=pk).first()
    if slot is None:
        raise NotFound("TimeSlot", slot_id)
    return slot


def create_time_slot(
    start_time,
    end_time,
    name: str,
    status: str | None = None,
    *,
    storage: StorageContext | None = None,
) -> TimeSlot:
    """
    Create a time slot.

    Args:
        start_time: Slot start (time or "HH:MM")
        end_time: Slot end, exclusive (time or "HH:MM")
        name: Display name
        status: "active" (default) or "inactive"

    Returns:
        The created TimeSlot

    Raises:
        InvalidRange: If start_time >= end_time
        OverlapConflict: If [start_time, end_time) overlaps an active slot
    """
    storage = get_storage(storage)
    start_time = coerce_time(start_time, "start_time")
    end_time = coerce_time(end_time, "end_time")
    name = _clean_name(name)
    status = coerce_choice(status or TimeSlot.Status.ACTIVE, TimeSlot.Status, "status")

    if start_time >= end_time:
        raise InvalidRange()

    with storage.atomic():
        _lock_slot_registry(storage)
        _assert_no_overlap(storage, start_time, end_time)
        slot = storage.objects(TimeSlot).create(
            start_time=start_time,
            end_time=end_time,
            name=name,
            status=status,
        )

    logger.info(f"Created time slot {slot.pk} {slot.label} [{slot.status}]")
    return slot


def update_time_slot(
    slot_id,
    start_time=None,
    end_time=None,
    name: str | None = None,
    status: str | None = None,
    *,
    storage: StorageContext | None = None,
) -> TimeSlot:
    """
    Partially update a time slot. None means "leave unchanged".

    Moving the slot (start/end) or deactivating it is refused while live
    bookings on or after today reference it. The resulting range is
    re-validated, and checked for overlap against the other active slots when
    it moved or became active.

    Raises:
        NotFound: If no slot has this id
        ConflictInUse: If upcoming live bookings block the change
        InvalidRange: If the resulting start >= end
        OverlapConflict: If the resulting range overlaps another active slot
    """
    storage = get_storage(storage)
    pk = coerce_id(slot_id, "slot_id")
    if start_time is not None:
        start_time = coerce_time(start_time, "start_time")
    if end_time is not None:
        end_time = coerce_time(end_time, "end_time")
    if name is not None:
        name = _clean_name(name)
    if status is not None:
        status = coerce_choice(status, TimeSlot.Status, "status")

    with storage.atomic():
        _lock_slot_registry(storage)
        slot = storage.objects(TimeSlot).select_for_update().filter(pk=pk).first()
        if slot is None:
            raise NotFound("TimeSlot", slot_id)

        new_start = slot.start_time if start_time is None else start_time
        new_end = slot.end_time if end_time is None else end_time
        new_status = slot.status if status is None else status

        moved = new_start != slot.start_time or new_end != slot.end_time
        deactivating = (
            new_status == TimeSlot.Status.INACTIVE and slot.status != TimeSlot.Status.INACTIVE
        )
        activating = new_status == TimeSlot.Status.ACTIVE and slot.status != TimeSlot.Status.ACTIVE

        if moved or deactivating:
            upcoming = slot.bookings.db_manager(storage.alias).live().filter(
                booking_date__gte=timezone.localdate()
            )
            if upcoming.exists():
                raise ConflictInUse(
                    f"Cannot move or deactivate time slot {slot.pk}: it has upcoming bookings"
                )

        if new_start >= new_end:
            raise InvalidRange()

        if moved or activating:
            _assert_no_overlap(storage, new_start, new_end, exclude_id=slot.pk)

        slot.start_time = new_start
        slot.end_time = new_end
        slot.status = new_status
        if name is not None:
            slot.name = name
        slot.save(using=storage.alias)

    logger.info(f"Updated time slot {slot.pk} {slot.label} [{slot.status}]")
    return slot


def delete_time_slot(slot_id, *, storage: StorageContext | None = None) -> None:
    """
    Delete a time slot that has never been booked.

    Any booking, cancelled ones included, blocks deletion so slot usage
    history survives; deactivate the slot instead.

    Raises:
        NotFound: If no slot has this id
        ConflictInUse: If any booking references the slot
    """
    storage = get_storage(storage)
    pk = coerce_id(slot_id, "slot_id")

    with storage.atomic():
        slot = storage.objects(TimeSlot).select_for_update().filter(pk=pk).first()
        if slot is None:
            raise NotFound("TimeSlot", slot_id)
        if slot.bookings.db_manager(storage.alias).exists():
            raise ConflictInUse(
                f"Cannot delete time slot {slot.pk} with existing bookings. "
                "Set status to inactive instead."
            )
        try:
            slot.delete(using=storage.alias)
        except ProtectedError as e:
            raise ConflictInUse(f"Cannot delete time slot {pk}: it is referenced by bookings") from e

    logger.info(f"Deleted time slot {pk}")
