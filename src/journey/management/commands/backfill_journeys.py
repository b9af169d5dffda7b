"""Seed missing milestone records for existing customers."""

from __future__ import annotations

from django.core.management.base import BaseCommand
from django.db.models import Count

from customers.models import Customer
from journey import catalog
from journey.services import initialize_journey


class Command(BaseCommand):
    help = (
        "Create the pending milestone records that customers are missing "
        "(customers imported without signals, or after the catalog grew)."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--apply",
            action="store_true",
            help="Apply changes. Without this flag, command runs in dry-run mode.",
        )

    def handle(self, *args, **options):
        apply_changes = bool(options.get("apply"))
        expected = len(catalog.all_definitions())

        incomplete = list(
            Customer.objects
            .annotate(record_count=Count("milestones"))
            .filter(record_count__lt=expected)
            .order_by("created_at")
        )
        if not incomplete:
            self.stdout.write("All customers have a complete journey.")
            return

        for customer in incomplete:
            missing = expected - customer.record_count
            if apply_changes:
                initialize_journey(customer.pk)
                self.stdout.write(self.style.SUCCESS(f"[SEED] {customer} +{missing}"))
            else:
                self.stdout.write(f"[DRY-RUN] {customer} missing {missing}")

        mode = "applied" if apply_changes else "dry-run"
        self.stdout.write(f"{len(incomplete)} customer(s) processed ({mode}).")
