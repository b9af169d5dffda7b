from io import StringIO

import pytest
from django.core.management import call_command

from journey import catalog
from journey.models import MilestoneRecord


@pytest.mark.django_db
class TestBackfillJourneys:
    def test_dry_run_reports_without_writing(self, customer):
        MilestoneRecord.objects.filter(customer=customer, ordinal_index__gte=10).delete()
        out = StringIO()

        call_command("backfill_journeys", stdout=out)

        assert "[DRY-RUN]" in out.getvalue()
        assert "missing 4" in out.getvalue()
        assert MilestoneRecord.objects.filter(customer=customer).count() == 10

    def test_apply_seeds_missing_records(self, customer, advance_journey):
        advance_journey(customer, "site_survey")
        MilestoneRecord.objects.filter(customer=customer, ordinal_index__gte=10).delete()
        out = StringIO()

        call_command("backfill_journeys", "--apply", stdout=out)

        records = MilestoneRecord.objects.filter(customer=customer)
        assert records.count() == len(catalog.all_definitions())
        # Existing progress is untouched.
        assert records.filter(status=MilestoneRecord.Status.COMPLETED).count() == 2
        assert "[SEED]" in out.getvalue()

    def test_nothing_to_do(self, customer):
        out = StringIO()
        call_command("backfill_journeys", stdout=out)
        assert "All customers have a complete journey." in out.getvalue()
