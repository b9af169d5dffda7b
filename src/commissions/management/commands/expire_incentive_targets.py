"""Close incentive targets of finished months that were never achieved."""

from __future__ import annotations

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from commissions.incentives import expire_past_targets


class Command(BaseCommand):
    help = "Mark still-active incentive targets of past months as expired."

    def add_arguments(self, parser):
        parser.add_argument(
            "--today",
            default="",
            help="Reference date (YYYY-MM-DD). Defaults to the local date.",
        )

    def handle(self, *args, **options):
        raw = (options.get("today") or "").strip()
        today = None
        if raw:
            try:
                today = date.fromisoformat(raw)
            except ValueError as exc:
                raise CommandError(f"Invalid --today value: {raw}") from exc

        expired = expire_past_targets(today=today)
        self.stdout.write(self.style.SUCCESS(f"{expired} incentive target(s) expired."))
