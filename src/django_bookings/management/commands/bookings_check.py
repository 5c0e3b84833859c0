"""Management command to report booking storage health."""

import json

from django.core.management.base import BaseCommand, CommandError

from django_bookings.exceptions import StorageUnavailable
from django_bookings.storage import StorageContext


class Command(BaseCommand):
    help = "Check database connectivity and booking setup"

    def add_arguments(self, parser):
        parser.add_argument(
            "--format",
            choices=["text", "json"],
            default="text",
            help="Output format (default: text)",
        )
        parser.add_argument(
            "--database",
            default=None,
            help="Database alias (default: BOOKINGS_DATABASE_ALIAS)",
        )

    def handle(self, *args, **options):
        storage = StorageContext(options["database"])
        try:
            report = storage.health()
        except StorageUnavailable as e:
            raise CommandError(e.message) from e

        if options["format"] == "json":
            self.stdout.write(json.dumps(report, indent=2))
            return

        database = report["database"]
        self.stdout.write(f"Database: {database['alias']} ({database['vendor']}) {database['name']}")
        self.stdout.write(f"Server time: {report['server_time']}")
        for name, value in report["totals"].items():
            self.stdout.write(f"  {name}: {value}")

        if report["system_status"] == "ready":
            self.stdout.write(self.style.SUCCESS("System status: ready"))
        else:
            self.stdout.write(
                self.style.WARNING(
                    "System status: incomplete_setup (needs a principal, a court and a time slot)"
                )
            )
