"""Court, TimeSlot and Booking models.

Write through services only:
- django_bookings.services.slots
- django_bookings.services.courts
- django_bookings.services.bookings

The database is the final authority for double booking: a conditional unique
constraint allows at most one non-cancelled booking per (court, slot, date).
"""

from datetime import date, time
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Case, CharField, F, Q, Value, When
from django.db.models.functions import Lower
from django.utils import timezone


class BookingsBaseModel(models.Model):
    """Base model with timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# =============================================================================
# Courts
# =============================================================================


class CourtQuerySet(models.QuerySet):
    """Custom queryset for Court model."""

    def active(self):
        """Return courts that accept new bookings."""
        return self.filter(status=Court.Status.ACTIVE)


class CourtManager(models.Manager):
    """Manager that hides soft-deleted courts."""

    def get_queryset(self):
        return CourtQuerySet(self.model, using=self._db).filter(deleted_at__isnull=True)

    def active(self):
        return self.get_queryset().active()


class Court(BookingsBaseModel):
    """
    A bookable court.

    Deleting a court is a soft delete (deleted_at) so bookings that still
    reference it keep their history. Names are unique among live courts, ignoring case.
    Soft-deleted courts release their name.
    """

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        MAINTENANCE = "maintenance", "Maintenance"
        INACTIVE = "inactive", "Inactive"

    name = models.CharField(max_length=50)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Price per session",
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = CourtManager()
    all_objects = models.Manager()

    class Meta:
        app_label = "django_bookings"
        constraints = [
            models.UniqueConstraint(
                Lower("name"),
                condition=Q(deleted_at__isnull=True),
                name="bookings_court_unique_live_name",
            ),
            models.CheckConstraint(
                condition=Q(price__gte=0),
                name="bookings_court_price_non_negative",
            ),
        ]
        ordering = ["name"]

    def __str__(self):
        return self.name

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


# =============================================================================
# Time slots
# =============================================================================


class TimeSlotQuerySet(models.QuerySet):
    """Custom queryset for TimeSlot model."""

    def active(self):
        return self.filter(status=TimeSlot.Status.ACTIVE)

    def overlapping(self, start_time: time, end_time: time):
        """Slots sharing any instant with the half-open range [start_time, end_time)."""
        return self.filter(start_time__lt=end_time, end_time__gt=start_time)


class TimeSlot(BookingsBaseModel):
    """
    A recurring time-of-day window, usable on any calendar date.

    Key invariants:
    - start_time < end_time
    - Active slots never overlap (enforced by services under RegistryLock)
    """

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"

    start_time = models.TimeField()
    end_time = models.TimeField()
    name = models.CharField(max_length=50)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )

    objects = TimeSlotQuerySet.as_manager()

    class Meta:
        app_label = "django_bookings"
        constraints = [
            models.CheckConstraint(
                condition=Q(start_time__lt=F("end_time")),
                name="bookings_timeslot_start_before_end",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "start_time"], name="bookings_slot_status_start"),
        ]
        ordering = ["start_time"]

    def __str__(self):
        return self.label

    @property
    def label(self) -> str:
        return f"{self.name} ({self.start_time:%H:%M} - {self.end_time:%H:%M})"

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE

    def overlaps(self, start_time: time, end_time: time) -> bool:
        return start_time < self.end_time and end_time > self.start_time


class RegistryLock(models.Model):
    """
    Named lock row.

    Services lock a row with select_for_update() to serialize writers that
    check-then-insert against a whole table (e.g. the slot overlap check).
    """

    name = models.CharField(max_length=50, unique=True)

    class Meta:
        app_label = "django_bookings"

    def __str__(self):
        return self.name


# =============================================================================
# Bookings
# =============================================================================


class BookingQuerySet(models.QuerySet):
    """Custom queryset for Booking model."""

    def live(self):
        """Bookings that still claim their slot (anything but cancelled)."""
        return self.exclude(booking_status=Booking.BookingStatus.CANCELLED)

    def for_triple(self, court_id, slot_id, booking_date: date):
        return self.filter(court_id=court_id, slot_id=slot_id, booking_date=booking_date)

    def with_reported_status(self, today: date | None = None):
        """Annotate ``reported_status``: confirmed bookings in the past read as completed."""
        today = today or timezone.localdate()
        return self.annotate(
            reported_status=Case(
                When(
                    booking_date__lt=today,
                    booking_status=Booking.BookingStatus.CONFIRMED,
                    then=Value(Booking.BookingStatus.COMPLETED.value),
                ),
                default=F("booking_status"),
                output_field=CharField(),
            )
        )


class Booking(BookingsBaseModel):
    """
    A claim of one court and one time slot on one calendar date.

    Key invariants:
    - At most one non-cancelled booking per (court, slot, booking_date)
    - Cancellation is terminal
    - total_amount is frozen at creation
    - Never physically deleted
    """

    class PaymentStatus(models.TextChoices):
        PAID = "paid", "Paid"
        UNPAID = "unpaid", "Unpaid"
        PARTIAL = "partial", "Partial"

    class BookingStatus(models.TextChoices):
        CONFIRMED = "confirmed", "Confirmed"
        CANCELLED = "cancelled", "Cancelled"
        COMPLETED = "completed", "Completed"

    court = models.ForeignKey(
        Court,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    slot = models.ForeignKey(
        TimeSlot,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    booking_date = models.DateField()

    customer_name = models.CharField(max_length=100)
    customer_phone = models.CharField(max_length=20, blank=True, default="")

    total_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Price locked at booking creation",
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )
    booking_status = models.CharField(
        max_length=20,
        choices=BookingStatus.choices,
        default=BookingStatus.CONFIRMED,
    )
    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings_created",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bookings_updated",
    )

    objects = BookingQuerySet.as_manager()

    class Meta:
        app_label = "django_bookings"
        constraints = [
            # Cancelled bookings are excluded, allowing rebooking after cancellation
            models.UniqueConstraint(
                fields=["court", "slot", "booking_date"],
                name="bookings_one_live_booking_per_slot",
                condition=Q(booking_status__in=["confirmed", "completed"]),
            ),
            models.CheckConstraint(
                condition=Q(total_amount__gte=0),
                name="bookings_booking_amount_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["court", "booking_date"], name="bookings_bk_court_date"),
            models.Index(fields=["slot", "booking_date"], name="bookings_bk_slot_date"),
            models.Index(fields=["booking_date", "booking_status"], name="bookings_bk_date_status"),
        ]
        ordering = ["-booking_date", "-created_at"]

    def __str__(self):
        return f"{self.customer_name} - {self.court} {self.booking_date}"

    @property
    def is_cancelled(self) -> bool:
        return self.booking_status == self.BookingStatus.CANCELLED

    @property
    def effective_status(self) -> str:
        """Confirmed bookings whose date has passed read as completed."""
        if (
            self.booking_status == self.BookingStatus.CONFIRMED
            and self.booking_date < timezone.localdate()
        ):
            return self.BookingStatus.COMPLETED.value
        return self.booking_status
