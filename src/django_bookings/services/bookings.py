"""Booking ledger services.

All writes to Booking go through this module. Each function runs in one
transaction: preconditions, the write and the final constraint check commit
together or not at all.

Double booking is prevented twice:
- a fast-path existence check that yields a readable SlotTaken
- the bookings_one_live_booking_per_slot constraint, which decides races
"""

import logging

from django.db import IntegrityError
from django.utils import timezone

from ..exceptions import (
    InvalidCustomer,
    InvalidInput,
    NotFound,
    PastDateRejected,
    ResourceUnavailable,
    SlotTaken,
    TerminalState,
    WindowUnavailable,
)
from ..models import Booking, Court, TimeSlot
from ..storage import StorageContext, get_storage
from ..validators import coerce_amount, coerce_choice, coerce_date, coerce_id
from .common import apply_tracked_update, get_constraint_name
from .principals import resolve_principal

logger = logging.getLogger(__name__)

UNIQUE_LIVE_BOOKING_CONSTRAINT = "bookings_one_live_booking_per_slot"


def _clean_customer_name(customer_name) -> str:
    customer_name = (customer_name or "").strip()
    if not customer_name:
        raise InvalidCustomer()
    if len(customer_name) > Booking._meta.get_field("customer_name").max_length:
        raise InvalidCustomer("Customer name is too long")
    return customer_name


def _clean_phone(customer_phone) -> str:
    customer_phone = (customer_phone or "").strip()
    if len(customer_phone) > Booking._meta.get_field("customer_phone").max_length:
        raise InvalidInput("Customer phone is too long")
    return customer_phone


def _lock_booking(storage: StorageContext, booking_id) -> Booking:
    pk = coerce_id(booking_id, "booking_id")
    booking = storage.objects(Booking).select_for_update().filter(pk=pk).first()
    if booking is None:
        raise NotFound("Booking", booking_id)
    return booking


def create_booking(
    court_id,
    slot_id,
    booking_date,
    customer_name: str,
    created_by,
    customer_phone: str = "",
    payment_status: str = Booking.PaymentStatus.UNPAID,
    notes: str = "",
    total_amount=None,
    *,
    storage: StorageContext | None = None,
) -> Booking:
    """
    Book one court and one time slot on one date.

    Checks run in this order: date, court, slot, customer name, principal,
    then the uniqueness of (court, slot, date).

    Args:
        court_id: Court to book
        slot_id: TimeSlot to book
        booking_date: Calendar date (date or "YYYY-MM-DD")
        customer_name: Required, non-blank
        created_by: Id of the principal recording the booking
        customer_phone: Optional
        payment_status: "unpaid" (default), "paid" or "partial"
        notes: Optional free text
        total_amount: Omitted or zero means the court's current price

    Returns:
        The created Booking (confirmed)

    Raises:
        PastDateRejected: If booking_date is before today
        ResourceUnavailable: If the court is unknown or not active
        WindowUnavailable: If the slot is unknown or not active
        InvalidCustomer: If customer_name is blank
        InvalidPrincipal: If created_by is unknown or inactive
        SlotTaken: If a non-cancelled booking already holds the triple
    """
    storage = get_storage(storage)
    booking_date = coerce_date(booking_date, "booking_date")
    court_pk = coerce_id(court_id, "court_id")
    slot_pk = coerce_id(slot_id, "slot_id")
    payment_status = coerce_choice(payment_status, Booking.PaymentStatus, "payment_status")
    customer_phone = _clean_phone(customer_phone)
    if total_amount is not None:
        field = Booking._meta.get_field("total_amount")
        total_amount = coerce_amount(
            total_amount, "total_amount", field.max_digits, field.decimal_places
        )

    if booking_date < timezone.localdate():
        raise PastDateRejected(f"Booking date {booking_date.isoformat()} is in the past")

    with storage.atomic():
        # Lock the court so status changes and deletion wait for this booking
        court = storage.objects(Court).select_for_update().filter(pk=court_pk).first()
        if court is None or not court.is_active:
            raise ResourceUnavailable(f"Court '{court_id}' not found or not active")

        slot = storage.objects(TimeSlot).select_for_update().filter(pk=slot_pk).first()
        if slot is None or not slot.is_active:
            raise WindowUnavailable(f"Time slot '{slot_id}' not found or not active")

        customer_name = _clean_customer_name(customer_name)
        principal = resolve_principal(created_by, storage=storage)

        if not total_amount:
            total_amount = court.price

        bookings = storage.objects(Booking)
        if bookings.live().for_triple(court.pk, slot.pk, booking_date).exists():
            raise SlotTaken(
                f"Court '{court.name}' is already booked for {slot.label} on {booking_date.isoformat()}"
            )

        try:
            with storage.atomic():
                booking = bookings.create(
                    court=court,
                    slot=slot,
                    booking_date=booking_date,
                    customer_name=customer_name,
                    customer_phone=customer_phone,
                    total_amount=total_amount,
                    payment_status=payment_status,
                    booking_status=Booking.BookingStatus.CONFIRMED,
                    notes=notes or "",
                    created_by=principal,
                )
        except IntegrityError as e:
            constraint = get_constraint_name(e)
            if constraint == UNIQUE_LIVE_BOOKING_CONSTRAINT or (
                constraint is None
                and bookings.live().for_triple(court.pk, slot.pk, booking_date).exists()
            ):
                logger.warning(
                    f"Lost booking race for court {court.pk} slot {slot.pk} on {booking_date}"
                )
                raise SlotTaken(
                    f"Court '{court.name}' was booked for {slot.label} on "
                    f"{booking_date.isoformat()} by a concurrent request"
                ) from e
            raise

    logger.info(
        f"Created booking {booking.pk}: court {court.pk} slot {slot.pk} on {booking_date} "
        f"for '{customer_name}' ({total_amount}) by principal {principal.pk}"
    )
    return booking


def update_booking_status(
    booking_id,
    payment_status: str | None = None,
    booking_status: str | None = None,
    updated_by=None,
    *,
    storage: StorageContext | None = None,
) -> Booking:
    """
    Change payment and/or booking status.

    A cancelled booking rejects every status change, including setting
    cancelled again.

    Raises:
        InvalidInput: If neither status is supplied or a value is unknown
        NotFound: If the booking does not exist
        TerminalState: If the booking is cancelled
        InvalidPrincipal: If updated_by is unknown or inactive
    """
    storage = get_storage(storage)
    if payment_status is None and booking_status is None:
        raise InvalidInput("Supply payment_status and/or booking_status")
    if payment_status is not None:
        payment_status = coerce_choice(payment_status, Booking.PaymentStatus, "payment_status")
    if booking_status is not None:
        booking_status = coerce_choice(booking_status, Booking.BookingStatus, "booking_status")

    with storage.atomic():
        booking = _lock_booking(storage, booking_id)
        if booking.is_cancelled:
            raise TerminalState(booking.pk)
        principal = resolve_principal(updated_by, storage=storage)

        changes = {}
        apply_tracked_update(booking, "payment_status", payment_status, changes)
        apply_tracked_update(booking, "booking_status", booking_status, changes)
        booking.updated_by = principal
        booking.save(
            using=storage.alias,
            update_fields=["payment_status", "booking_status", "updated_by", "updated_at"],
        )

    logger.info(f"Updated booking {booking.pk} status by principal {principal.pk}: {changes}")
    return booking


def update_booking_details(
    booking_id,
    customer_name: str | None = None,
    customer_phone: str | None = None,
    notes: str | None = None,
    *,
    storage: StorageContext | None = None,
) -> Booking:
    """
    Edit customer name, phone and notes. Allowed in any booking status.

    Raises:
        InvalidInput: If no field is supplied
        InvalidCustomer: If customer_name is supplied blank
        NotFound: If the booking does not exist
    """
    storage = get_storage(storage)
    if customer_name is None and customer_phone is None and notes is None:
        raise InvalidInput("No fields to update")
    if customer_name is not None:
        customer_name = _clean_customer_name(customer_name)
    if customer_phone is not None:
        customer_phone = _clean_phone(customer_phone)

    with storage.atomic():
        booking = _lock_booking(storage, booking_id)
        changes = {}
        apply_tracked_update(booking, "customer_name", customer_name, changes)
        apply_tracked_update(booking, "customer_phone", customer_phone, changes)
        apply_tracked_update(booking, "notes", notes, changes)
        if changes:
            booking.save(
                using=storage.alias,
                update_fields=["customer_name", "customer_phone", "notes", "updated_at"],
            )

    logger.info(f"Updated booking {booking.pk} details: {sorted(changes)}")
    return booking


def cancel_booking(booking_id, *, cancelled_by=None, storage: StorageContext | None = None) -> Booking:
    """
    Cancel a booking. Cancelling an already cancelled booking is a no-op.

    The slot is free for rebooking as soon as this commits.

    Args:
        booking_id: Booking to cancel
        cancelled_by: Optional principal id, recorded as updated_by

    Raises:
        NotFound: If the booking does not exist
        InvalidPrincipal: If cancelled_by is given but unknown or inactive
    """
    storage = get_storage(storage)

    with storage.atomic():
        booking = _lock_booking(storage, booking_id)
        if booking.is_cancelled:
            logger.info(f"Booking {booking.pk} already cancelled")
            return booking

        update_fields = ["booking_status", "updated_at"]
        if cancelled_by is not None:
            booking.updated_by = resolve_principal(cancelled_by, storage=storage)
            update_fields.append("updated_by")
        booking.booking_status = Booking.BookingStatus.CANCELLED
        booking.save(using=storage.alias, update_fields=update_fields)

    logger.info(f"Cancelled booking {booking.pk}")
    return booking
