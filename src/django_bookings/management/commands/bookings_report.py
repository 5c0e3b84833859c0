"""Management command to print booking reports."""

import json

from django.core.management.base import BaseCommand, CommandError

from django_bookings import reports
from django_bookings.outcomes import run
from django_bookings.storage import StorageContext

REPORTS = {
    "daily": reports.daily_summary,
    "revenue": reports.revenue_summary,
    "utilization": reports.court_utilization,
    "dashboard": reports.dashboard_stats,
}


class Command(BaseCommand):
    help = "Print a booking report: daily, revenue, utilization or dashboard"

    def add_arguments(self, parser):
        parser.add_argument("report", choices=sorted(REPORTS))
        parser.add_argument("--start", help="daily: first date (YYYY-MM-DD)")
        parser.add_argument("--end", help="daily: last date (YYYY-MM-DD)")
        parser.add_argument("--year", type=int, help="revenue: calendar year")
        parser.add_argument("--court", type=int, help="revenue: limit to one court id")
        parser.add_argument("--date", help="dashboard: date (YYYY-MM-DD)")
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
        name = options["report"]
        kwargs = {"storage": StorageContext(options["database"])}
        if name == "daily":
            kwargs.update(start=options["start"], end=options["end"])
        elif name == "revenue":
            kwargs.update(year=options["year"], court_id=options["court"])
        elif name == "dashboard":
            kwargs.update(on_date=options["date"])

        outcome = run(REPORTS[name], **kwargs)
        if not outcome.ok:
            raise CommandError(f"{outcome.outcome}: {outcome.message}")

        if options["format"] == "json":
            self.stdout.write(json.dumps(outcome.data, indent=2))
            return

        self.stdout.write(self.style.NOTICE(f"{name.title()} report"))
        rows = outcome.data if isinstance(outcome.data, list) else [outcome.data]
        if not rows:
            self.stdout.write("  (no data)")
        for row in rows:
            self.stdout.write("  " + "  ".join(f"{key}={value}" for key, value in row.items()))
