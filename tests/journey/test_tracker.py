import uuid

import pytest

from core.actors import Actor
from core.exceptions import AlreadyCompletedError, NotFoundError, OutOfOrderError
from customers.models import Customer
from journey import catalog, services
from journey.models import MilestoneRecord
from journey.services import complete_milestone, get_journey, initialize_journey, journey_progress
from journey.signals import milestone_completed


@pytest.mark.django_db
class TestInitializeJourney:
    def test_customer_creation_seeds_pending_records(self, customer):
        records = get_journey(customer.pk)
        assert len(records) == len(catalog.all_definitions())
        assert all(r.status == MilestoneRecord.Status.PENDING for r in records)
        assert [r.milestone_key for r in records] == [d.key for d in catalog.all_definitions()]

    def test_initialize_is_idempotent(self, customer):
        initialize_journey(customer.pk)
        initialize_journey(customer.pk)
        assert MilestoneRecord.objects.filter(customer=customer).count() == len(catalog.all_definitions())

    def test_initialize_fills_missing_records(self, customer):
        MilestoneRecord.objects.filter(customer=customer, milestone_key="subsidy_received").delete()
        records = initialize_journey(customer.pk)
        assert "subsidy_received" in [r.milestone_key for r in records]

    def test_unknown_customer(self):
        with pytest.raises(NotFoundError):
            initialize_journey(uuid.uuid4())


@pytest.mark.django_db
class TestCompleteMilestone:
    def test_first_milestone_completes(self, customer):
        actor = Actor(role="operator", id="42")
        record = complete_milestone(customer.pk, "application_submitted", notes="KYC ok", actor=actor)

        assert record.status == MilestoneRecord.Status.COMPLETED
        assert record.completed_at is not None
        assert record.notes == "KYC ok"
        assert record.updated_by_role == "operator"
        assert record.updated_by_id == "42"

    def test_out_of_order_is_rejected(self, customer):
        complete_milestone(customer.pk, "application_submitted")

        with pytest.raises(OutOfOrderError) as excinfo:
            complete_milestone(customer.pk, "site_survey")

        assert excinfo.value.context["blocked_by"] == "documents_verified"
        record = MilestoneRecord.objects.get(customer=customer, milestone_key="site_survey")
        assert record.status == MilestoneRecord.Status.PENDING
        assert record.completed_at is None

    def test_every_later_milestone_is_blocked_on_fresh_journey(self, customer):
        for definition in catalog.all_definitions()[1:]:
            with pytest.raises(OutOfOrderError):
                complete_milestone(customer.pk, definition.key)

    def test_double_completion_keeps_original_timestamp(self, customer):
        first = complete_milestone(customer.pk, "application_submitted", notes="first")

        with pytest.raises(AlreadyCompletedError):
            complete_milestone(customer.pk, "application_submitted", notes="second")

        record = MilestoneRecord.objects.get(pk=first.pk)
        assert record.completed_at == first.completed_at
        assert record.notes == "first"

    def test_losing_a_concurrent_completion(self, customer, monkeypatch):
        winner = complete_milestone(customer.pk, "application_submitted", notes="first")
        real_lookup = services.get_or_not_found

        def stale_lookup(queryset, label, **lookup):
            record = real_lookup(queryset, label, **lookup)
            if label == "Milestone record":
                # The racing request read the row before the winner committed.
                record.status = MilestoneRecord.Status.PENDING
                record.completed_at = None
            return record

        monkeypatch.setattr(services, "get_or_not_found", stale_lookup)
        received = []

        def handler(sender, record, **kwargs):
            received.append(record.pk)

        milestone_completed.connect(handler)
        try:
            with pytest.raises(AlreadyCompletedError):
                complete_milestone(customer.pk, "application_submitted", notes="second")
        finally:
            milestone_completed.disconnect(handler)

        record = MilestoneRecord.objects.get(pk=winner.pk)
        assert record.completed_at == winner.completed_at
        assert record.notes == "first"
        assert received == []

    def test_unknown_milestone_key(self, customer):
        with pytest.raises(NotFoundError):
            complete_milestone(customer.pk, "rocket_launch")

    def test_unknown_customer(self):
        with pytest.raises(NotFoundError):
            complete_milestone(uuid.uuid4(), "application_submitted")

    def test_missing_predecessor_record_counts_as_pending(self, customer):
        complete_milestone(customer.pk, "application_submitted")
        MilestoneRecord.objects.filter(customer=customer, milestone_key="documents_verified").delete()

        with pytest.raises(OutOfOrderError):
            complete_milestone(customer.pk, "site_survey")

    def test_full_journey_in_order(self, customer, complete_journey):
        complete_journey(customer)
        assert all(r.is_completed for r in get_journey(customer.pk))

    def test_coarse_customer_status_is_untouched(self, customer, complete_journey):
        complete_journey(customer)
        customer.refresh_from_db()
        assert customer.status == Customer.Status.PENDING

    def test_signal_sent_on_completion(self, customer):
        received = []

        def handler(sender, record, customer_id, actor, **kwargs):
            received.append((record.milestone_key, customer_id, actor.role))

        milestone_completed.connect(handler)
        try:
            complete_milestone(customer.pk, "application_submitted")
            with pytest.raises(AlreadyCompletedError):
                complete_milestone(customer.pk, "application_submitted")
        finally:
            milestone_completed.disconnect(handler)

        assert received == [("application_submitted", customer.pk, "system")]


@pytest.mark.django_db
def test_journey_progress(customer):
    complete_milestone(customer.pk, "application_submitted")
    complete_milestone(customer.pk, "documents_verified")

    progress = journey_progress(get_journey(customer.pk))

    assert progress["completed"] == 2
    assert progress["total"] == len(catalog.all_definitions())
    assert progress["next_milestone"] == "site_survey"
    assert progress["is_complete"] is False


def test_journey_progress_empty():
    assert journey_progress([]) == {
        "completed": 0,
        "total": 0,
        "percent": 0,
        "next_milestone": None,
        "is_complete": False,
    }
