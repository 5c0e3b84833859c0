"""Read-only booking reports.

Every figure is aggregated from the booking ledger at query time; nothing is
stored, so reports can always be rebuilt. Revenue counts only paid,
non-cancelled bookings unless stated otherwise.
"""

from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce, TruncMonth
from django.utils import timezone

from . import conf
from .exceptions import InvalidInput, InvalidRange
from .models import Booking, Court, TimeSlot
from .storage import StorageContext, get_storage
from .validators import coerce_date, coerce_id

ZERO = Decimal("0.00")

NOT_CANCELLED = ~Q(booking_status=Booking.BookingStatus.CANCELLED)
PAID = Q(payment_status=Booking.PaymentStatus.PAID) & NOT_CANCELLED
LIVE_STATUSES = [Booking.BookingStatus.CONFIRMED, Booking.BookingStatus.COMPLETED]


def _money_sum(field_name: str, condition: Q | None = None):
    return Coalesce(
        Sum(field_name, filter=condition),
        Value(ZERO),
        output_field=DecimalField(max_digits=12, decimal_places=2),
    )


def daily_summary(start=None, end=None, *, storage: StorageContext | None = None) -> list[dict]:
    """
    Per date and court: booking counts by status and paid revenue.

    Defaults to the last BOOKINGS_DAILY_SUMMARY_DAYS days ending today.
    Rows are ordered newest date first, then court name.
    """
    storage = get_storage(storage)
    end = coerce_date(end, "end") if end is not None else timezone.localdate()
    if start is None:
        start = end - timedelta(days=conf.get_daily_summary_days() - 1)
    else:
        start = coerce_date(start, "start")
    if start > end:
        raise InvalidRange("Report start date must not be after its end date")

    rows = (
        storage.objects(Booking)
        .filter(booking_date__range=(start, end))
        .values("booking_date", "court_id", "court__name")
        .annotate(
            total_bookings=Count("id"),
            paid=Count("id", filter=PAID),
            unpaid=Count("id", filter=Q(payment_status=Booking.PaymentStatus.UNPAID) & NOT_CANCELLED),
            partial=Count("id", filter=Q(payment_status=Booking.PaymentStatus.PARTIAL) & NOT_CANCELLED),
            cancelled=Count("id", filter=Q(booking_status=Booking.BookingStatus.CANCELLED)),
            revenue=_money_sum("total_amount", PAID),
        )
        .order_by("-booking_date", "court__name")
    )
    with storage.guard():
        return [
            {
                "date": row["booking_date"],
                "court_id": row["court_id"],
                "court_name": row["court__name"],
                "total_bookings": row["total_bookings"],
                "paid": row["paid"],
                "unpaid": row["unpaid"],
                "partial": row["partial"],
                "cancelled": row["cancelled"],
                "revenue": row["revenue"],
            }
            for row in rows
        ]


def revenue_summary(year=None, court_id=None, *, storage: StorageContext | None = None) -> list[dict]:
    """
    Per month and court for one year: non-cancelled bookings and revenue by
    payment status.

    ``outstanding`` is the amount on unpaid bookings, ``partial`` the amount
    on partially paid ones.
    """
    storage = get_storage(storage)
    year = coerce_id(year, "year") if year is not None else timezone.localdate().year
    if not 1 <= year <= 9999:
        raise InvalidInput(f"year out of range: {year}")

    bookings = storage.objects(Booking).filter(NOT_CANCELLED, booking_date__year=year)
    if court_id is not None:
        bookings = bookings.filter(court_id=coerce_id(court_id, "court_id"))

    rows = (
        bookings.annotate(month=TruncMonth("booking_date"))
        .values("month", "court_id", "court__name")
        .annotate(
            bookings=Count("id"),
            paid_revenue=_money_sum("total_amount", Q(payment_status=Booking.PaymentStatus.PAID)),
            outstanding=_money_sum("total_amount", Q(payment_status=Booking.PaymentStatus.UNPAID)),
            partial=_money_sum("total_amount", Q(payment_status=Booking.PaymentStatus.PARTIAL)),
        )
        .order_by("month", "court__name")
    )
    with storage.guard():
        return [
            {
                "month": f"{row['month']:%Y-%m}",
                "court_id": row["court_id"],
                "court_name": row["court__name"],
                "bookings": row["bookings"],
                "paid_revenue": row["paid_revenue"],
                "outstanding": row["outstanding"],
                "partial": row["partial"],
            }
            for row in rows
        ]


def court_utilization(*, storage: StorageContext | None = None) -> list[dict]:
    """
    Per court: usage over the last BOOKINGS_UTILIZATION_WINDOW_DAYS days and today.

    ``utilization`` is the percentage of court/slot/day combinations in the
    window that hold a non-cancelled booking.
    """
    storage = get_storage(storage)
    today = timezone.localdate()
    window_days = conf.get_utilization_window_days()
    since = today - timedelta(days=window_days - 1)

    in_window = Q(
        bookings__booking_date__range=(since, today),
        bookings__booking_status__in=LIVE_STATUSES,
    )
    on_today = Q(bookings__booking_date=today, bookings__booking_status__in=LIVE_STATUSES)

    with storage.guard():
        active_slots = storage.objects(TimeSlot).active().count()
        courts = (
            storage.objects(Court)
            .annotate(
                window_bookings=Count("bookings", filter=in_window),
                today_bookings=Count("bookings", filter=on_today),
                paid_revenue=_money_sum(
                    "bookings__total_amount",
                    in_window & Q(bookings__payment_status=Booking.PaymentStatus.PAID),
                ),
            )
            .order_by("name")
        )
        rows = list(courts)

    capacity = active_slots * window_days
    report = []
    for court in rows:
        utilization = Decimal("0.00")
        if capacity:
            utilization = (Decimal(court.window_bookings * 100) / capacity).quantize(Decimal("0.01"))
        report.append(
            {
                "court_id": court.pk,
                "court_name": court.name,
                "status": court.status,
                "window_days": window_days,
                "window_bookings": court.window_bookings,
                "today_bookings": court.today_bookings,
                "active_slots": active_slots,
                "available_today": active_slots - court.today_bookings,
                "paid_revenue": court.paid_revenue,
                "utilization": utilization,
            }
        )
    return report


def dashboard_stats(on_date=None, *, storage: StorageContext | None = None) -> dict:
    """Headline figures for one date (default today) and its month."""
    storage = get_storage(storage)
    on_date = coerce_date(on_date, "date") if on_date is not None else timezone.localdate()
    month_start = on_date.replace(day=1)

    bookings = storage.objects(Booking)
    with storage.guard():
        day = bookings.filter(NOT_CANCELLED, booking_date=on_date).aggregate(
            bookings=Count("id"),
            paid=Count("id", filter=Q(payment_status=Booking.PaymentStatus.PAID)),
            unpaid=Count("id", filter=Q(payment_status=Booking.PaymentStatus.UNPAID)),
            partial=Count("id", filter=Q(payment_status=Booking.PaymentStatus.PARTIAL)),
            revenue=_money_sum("total_amount", Q(payment_status=Booking.PaymentStatus.PAID)),
        )
        month_revenue = bookings.filter(
            PAID, booking_date__range=(month_start, on_date)
        ).aggregate(total=_money_sum("total_amount"))["total"]
        active_courts = storage.objects(Court).active().count()
        active_slots = storage.objects(TimeSlot).active().count()

    return {
        "date": on_date,
        "active_courts": active_courts,
        "active_slots": active_slots,
        "bookings": day["bookings"],
        "paid": day["paid"],
        "unpaid": day["unpaid"],
        "partial": day["partial"],
        "revenue": day["revenue"],
        "month_revenue": month_revenue,
    }


__all__ = [
    "daily_summary",
    "revenue_summary",
    "court_utilization",
    "dashboard_stats",
]
