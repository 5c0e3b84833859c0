"""
Management command to seed sample courts and time slots.

Creates courts "Court 1".."Court N" and two-hour slots from 08:00 to 22:00.
Safe to run repeatedly: existing courts and identical slots are skipped.
"""

from datetime import time

from django.core.management.base import BaseCommand, CommandError

from django_bookings.exceptions import BookingsError, DuplicateName, OverlapConflict
from django_bookings.models import Court, TimeSlot
from django_bookings.services import create_court, create_principal, create_time_slot
from django_bookings.storage import StorageContext

FIRST_HOUR = 8
LAST_HOUR = 22
SLOT_HOURS = 2


def default_slots():
    """(start, end, name) for the standard two-hour slots."""
    for hour in range(FIRST_HOUR, LAST_HOUR, SLOT_HOURS):
        start = time(hour, 0)
        end = time(hour + SLOT_HOURS, 0)
        yield start, end, f"{start:%H:%M}-{end:%H:%M}"


class Command(BaseCommand):
    help = "Seed sample courts and two-hour time slots (08:00-22:00)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--courts",
            type=int,
            default=3,
            help="Number of sample courts (default: 3)",
        )
        parser.add_argument(
            "--price",
            default="50000",
            help="Price per session for new courts (default: 50000)",
        )
        parser.add_argument(
            "--admin-username",
            help="Also create an administrator with this username",
        )
        parser.add_argument(
            "--admin-password",
            help="Password for --admin-username",
        )
        parser.add_argument(
            "--database",
            default=None,
            help="Database alias (default: BOOKINGS_DATABASE_ALIAS)",
        )

    def handle(self, *args, **options):
        storage = StorageContext(options["database"])
        if options["courts"] < 0:
            raise CommandError("--courts cannot be negative")

        try:
            self._seed_courts(storage, options["courts"], options["price"])
            self._seed_slots(storage)
            if options["admin_username"]:
                self._seed_admin(storage, options["admin_username"], options["admin_password"])
        except BookingsError as e:
            raise CommandError(f"{e.kind}: {e.message}") from e

        self.stdout.write(self.style.SUCCESS("Seeding complete"))

    def _seed_courts(self, storage, count, price):
        for number in range(1, count + 1):
            name = f"Court {number}"
            if storage.objects(Court).filter(name=name).exists():
                self.stdout.write(f"  skip court '{name}' (exists)")
                continue
            try:
                court = create_court(name, price, description=f"Sample court {number}", storage=storage)
            except DuplicateName:
                self.stdout.write(f"  skip court '{name}' (exists)")
                continue
            self.stdout.write(self.style.SUCCESS(f"  created court {court.pk} '{court.name}'"))

    def _seed_slots(self, storage):
        for start, end, name in default_slots():
            if storage.objects(TimeSlot).filter(start_time=start, end_time=end).exists():
                self.stdout.write(f"  skip slot {name} (exists)")
                continue
            try:
                slot = create_time_slot(start, end, name, storage=storage)
            except OverlapConflict as e:
                self.stdout.write(self.style.WARNING(f"  skip slot {name}: {e.message}"))
                continue
            self.stdout.write(self.style.SUCCESS(f"  created slot {slot.pk} {slot.label}"))

    def _seed_admin(self, storage, username, password):
        if not password:
            raise CommandError("--admin-password is required with --admin-username")
        try:
            principal = create_principal(username, password, full_name="Administrator", storage=storage)
        except DuplicateName:
            self.stdout.write(f"  skip administrator '{username}' (exists)")
            return
        self.stdout.write(self.style.SUCCESS(f"  created administrator {principal.pk} '{username}'"))
