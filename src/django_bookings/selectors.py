"""Read-only queries for django-bookings.

Nothing here takes locks or writes. Availability answers are advisory:
create_booking is the only authority on whether a slot can still be taken.
"""

from dataclasses import dataclass, field
from datetime import date

from django.db.models import Exists, OuterRef, Q

from .exceptions import NotFound
from .models import Booking, Court, TimeSlot
from .storage import StorageContext, get_storage
from .validators import coerce_choice, coerce_date, coerce_id, validate_pagination


@dataclass(frozen=True)
class AvailableSlot:
    """An active time slot and whether a court is free in it on some date."""

    slot: TimeSlot
    is_available: bool

    @property
    def slot_id(self) -> int:
        return self.slot.pk


@dataclass(frozen=True)
class BoardEntry:
    slot: TimeSlot
    booking: Booking | None = None

    @property
    def is_available(self) -> bool:
        return self.booking is None


@dataclass(frozen=True)
class CourtSlotBoard:
    """Every active slot of one court on one date, with the booking holding it."""

    court: Court
    booking_date: date
    entries: list[BoardEntry] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.entries)

    @property
    def booked(self) -> int:
        return sum(1 for entry in self.entries if entry.booking is not None)

    @property
    def available(self) -> int:
        return self.total - self.booked


@dataclass
class BookingHistoryFilter:
    """
    Optional, AND-combined history filters.

    Each filter becomes a bound query parameter; unset filters are skipped.
    """

    court_id: int | None = None
    date_from: date | None = None
    date_to: date | None = None
    booking_status: str | None = None
    payment_status: str | None = None
    search: str | None = None

    def __post_init__(self):
        if self.court_id is not None:
            self.court_id = coerce_id(self.court_id, "court_id")
        if self.date_from is not None:
            self.date_from = coerce_date(self.date_from, "date_from")
        if self.date_to is not None:
            self.date_to = coerce_date(self.date_to, "date_to")
        if self.booking_status is not None:
            self.booking_status = coerce_choice(
                self.booking_status, Booking.BookingStatus, "booking_status"
            )
        if self.payment_status is not None:
            self.payment_status = coerce_choice(
                self.payment_status, Booking.PaymentStatus, "payment_status"
            )
        if self.search is not None:
            self.search = str(self.search).strip() or None

    def to_q(self) -> Q:
        q = Q()
        if self.court_id is not None:
            q &= Q(court_id=self.court_id)
        if self.date_from is not None:
            q &= Q(booking_date__gte=self.date_from)
        if self.date_to is not None:
            q &= Q(booking_date__lte=self.date_to)
        if self.booking_status is not None:
            q &= Q(booking_status=self.booking_status)
        if self.payment_status is not None:
            q &= Q(payment_status=self.payment_status)
        if self.search:
            q &= Q(customer_name__icontains=self.search) | Q(customer_phone__icontains=self.search)
        return q


def _get_live_court(storage: StorageContext, court_id) -> Court:
    pk = coerce_id(court_id, "court_id")
    court = storage.objects(Court).filter(pk=pk).first()
    if court is None:
        raise NotFound("Court", court_id)
    return court


def _live_bookings_for(storage: StorageContext, court_id, booking_date: date):
    return storage.objects(Booking).live().filter(court_id=court_id, booking_date=booking_date)


def list_available_slots(
    court_id, booking_date, *, storage: StorageContext | None = None
) -> list[AvailableSlot]:
    """
    Every active time slot, flagged with whether the court is free in it.

    A slot is available when no non-cancelled booking holds
    (court, slot, booking_date). The court may be in any status.

    Raises:
        NotFound: If the court does not exist
    """
    storage = get_storage(storage)
    booking_date = coerce_date(booking_date, "booking_date")

    with storage.guard():
        court = _get_live_court(storage, court_id)
        taken = _live_bookings_for(storage, court.pk, booking_date).filter(slot_id=OuterRef("pk"))
        slots = (
            storage.objects(TimeSlot)
            .active()
            .annotate(is_taken=Exists(taken))
            .order_by("start_time")
        )
        return [AvailableSlot(slot=slot, is_available=not slot.is_taken) for slot in slots]


def count_available_slots(court_id, booking_date, *, storage: StorageContext | None = None) -> int:
    """
    Active slot count minus non-cancelled bookings of the court on the date.

    Raises:
        NotFound: If the court does not exist
    """
    storage = get_storage(storage)
    booking_date = coerce_date(booking_date, "booking_date")

    with storage.guard():
        court = _get_live_court(storage, court_id)
        active_slots = storage.objects(TimeSlot).active().count()
        booked = _live_bookings_for(storage, court.pk, booking_date).count()
    return active_slots - booked


def court_slot_board(court_id, booking_date, *, storage: StorageContext | None = None) -> CourtSlotBoard:
    """Active slots of a court on a date, each with its occupying booking, if any."""
    storage = get_storage(storage)
    booking_date = coerce_date(booking_date, "booking_date")

    with storage.guard():
        court = _get_live_court(storage, court_id)
        bookings = {
            booking.slot_id: booking
            for booking in _live_bookings_for(storage, court.pk, booking_date)
            .with_reported_status()
            .select_related("court", "slot")
        }
        slots = storage.objects(TimeSlot).active().order_by("start_time")
        entries = [BoardEntry(slot=slot, booking=bookings.get(slot.pk)) for slot in slots]
    return CourtSlotBoard(court=court, booking_date=booking_date, entries=entries)


def get_booking(booking_id, *, storage: StorageContext | None = None) -> Booking:
    """
    Get a booking with its court, slot and principals loaded.

    The booking carries ``reported_status``: confirmed bookings dated before
    today read as completed.

    Raises:
        NotFound: If the booking does not exist
    """
    storage = get_storage(storage)
    pk = coerce_id(booking_id, "booking_id")
    with storage.guard():
        booking = (
            storage.objects(Booking)
            .with_reported_status()
            .select_related("court", "slot", "created_by", "updated_by")
            .filter(pk=pk)
            .first()
        )
    if booking is None:
        raise NotFound("Booking", booking_id)
    return booking


def booking_history(
    court_id=None,
    date_from=None,
    date_to=None,
    limit=None,
    offset=0,
    *,
    booking_status: str | None = None,
    payment_status: str | None = None,
    search: str | None = None,
    storage: StorageContext | None = None,
) -> list[Booking]:
    """
    Bookings matching every supplied filter.

    Ordered by booking date descending, then slot start time ascending.
    Without ``limit`` the whole filtered set is returned.

    Raises:
        InvalidInput: If a filter value or limit/offset is malformed
    """
    storage = get_storage(storage)
    filters = BookingHistoryFilter(
        court_id=court_id,
        date_from=date_from,
        date_to=date_to,
        booking_status=booking_status,
        payment_status=payment_status,
        search=search,
    )
    limit, offset = validate_pagination(limit, offset)

    bookings = (
        storage.objects(Booking)
        .with_reported_status()
        .select_related("court", "slot", "created_by")
        .filter(filters.to_q())
        .order_by("-booking_date", "slot__start_time", "pk")
    )
    if limit is not None:
        bookings = bookings[offset : offset + limit]
    elif offset:
        bookings = bookings[offset:]

    with storage.guard():
        return list(bookings)


__all__ = [
    "AvailableSlot",
    "BoardEntry",
    "CourtSlotBoard",
    "BookingHistoryFilter",
    "list_available_slots",
    "count_available_slots",
    "court_slot_board",
    "get_booking",
    "booking_history",
]
