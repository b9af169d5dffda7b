"""Milestone tracker: per-customer progress over the journey catalog.

Completion is strictly sequential: a milestone can only be completed when
every milestone with a smaller ordinal is already completed, and a completed
milestone is immutable. Both rules are enforced here, under a row lock, so
that concurrent operators cannot bypass them.
"""
from __future__ import annotations

import logging

from django.utils import timezone

from core.actors import Actor
from core.exceptions import AlreadyCompletedError, OutOfOrderError
from core.shortcuts import get_or_not_found
from core.transactions import atomic_with_retry
from customers.models import Customer

from . import catalog
from .models import MilestoneRecord
from .signals import milestone_completed

logger = logging.getLogger("solarcrm")


# ---------------------------------------------------------------------------
# initialize_journey
# ---------------------------------------------------------------------------

@atomic_with_retry
def initialize_journey(customer_id) -> list[MilestoneRecord]:
    """Create the missing pending records for *customer_id*.

    Safe to call repeatedly: the ``(customer, milestone_key)`` unique
    constraint turns duplicate inserts into no-ops, so a second call (or a
    call after the catalog grew) only adds what is missing.
    """
    customer = get_or_not_found(Customer.objects.all(), "Customer", pk=customer_id)
    MilestoneRecord.objects.bulk_create(
        [
            MilestoneRecord(
                customer=customer,
                milestone_key=definition.key,
                ordinal_index=definition.ordinal_index,
            )
            for definition in catalog.all_definitions()
        ],
        ignore_conflicts=True,
    )
    return get_journey(customer.pk)


# ---------------------------------------------------------------------------
# complete_milestone
# ---------------------------------------------------------------------------

@atomic_with_retry
def complete_milestone(customer_id, milestone_key: str, notes: str = "", actor: Actor | None = None) -> MilestoneRecord:
    """Mark one milestone as completed.

    Parameters
    ----------
    customer_id : UUID
        The customer whose journey advances.
    milestone_key : str
        Catalog key of the milestone.
    notes : str
        Free-text operator notes stored on the record.
    actor : Actor, optional
        Who performed the change; defaults to the system actor.

    Returns
    -------
    MilestoneRecord
        The updated record.

    Raises
    ------
    NotFoundError
        Unknown milestone key, or no record for this customer.
    AlreadyCompletedError
        The record is already completed (it is left untouched).
    OutOfOrderError
        A milestone with a smaller ordinal is still pending.
    """
    actor = actor or Actor.system()
    definition = catalog.get_definition(milestone_key)

    record = get_or_not_found(
        MilestoneRecord.objects.select_for_update(),
        "Milestone record",
        customer_id=customer_id,
        milestone_key=definition.key,
    )
    if record.is_completed:
        raise AlreadyCompletedError(
            f"Milestone '{definition.key}' is already completed.",
            milestone_key=definition.key,
        )

    # Missing predecessor rows count as pending.
    done_before = MilestoneRecord.objects.filter(
        customer_id=customer_id,
        ordinal_index__lt=definition.ordinal_index,
        status=MilestoneRecord.Status.COMPLETED,
    ).count()
    if done_before < definition.ordinal_index:
        blocking = _first_pending_before(customer_id, definition.ordinal_index)
        raise OutOfOrderError(
            f"Milestone '{definition.key}' cannot be completed before '{blocking}'.",
            milestone_key=definition.key,
            blocked_by=blocking,
        )

    now = timezone.now()
    updated = MilestoneRecord.objects.filter(
        pk=record.pk,
        status=MilestoneRecord.Status.PENDING,
    ).update(
        status=MilestoneRecord.Status.COMPLETED,
        completed_at=now,
        notes=notes or "",
        updated_by_role=actor.role,
        updated_by_id=str(actor.id or ""),
        updated_at=now,
    )
    if updated == 0:
        # Lost the race to a concurrent completion.
        raise AlreadyCompletedError(
            f"Milestone '{definition.key}' is already completed.",
            milestone_key=definition.key,
        )

    record.refresh_from_db()
    logger.info(
        "milestone completed customer=%s key=%s by=%s:%s",
        customer_id, definition.key, actor.role, actor.id,
    )
    milestone_completed.send(
        sender=MilestoneRecord,
        record=record,
        customer_id=record.customer_id,
        actor=actor,
    )
    return record


def _first_pending_before(customer_id, ordinal_index: int) -> str:
    completed = set(
        MilestoneRecord.objects.filter(
            customer_id=customer_id,
            ordinal_index__lt=ordinal_index,
            status=MilestoneRecord.Status.COMPLETED,
        ).values_list("milestone_key", flat=True)
    )
    for definition in catalog.all_definitions()[:ordinal_index]:
        if definition.key not in completed:
            return definition.key
    return ""


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def get_journey(customer_id) -> list[MilestoneRecord]:
    """Return the customer's records ordered by ordinal index."""
    get_or_not_found(Customer.objects.all(), "Customer", pk=customer_id)
    return list(
        MilestoneRecord.objects
        .filter(customer_id=customer_id)
        .order_by("ordinal_index")
    )


def journey_progress(records) -> dict:
    """Summarise a journey as returned by :func:`get_journey`."""
    records = list(records)
    total = len(records)
    completed = sum(1 for r in records if r.is_completed)
    next_pending = next((r.milestone_key for r in records if not r.is_completed), None)
    return {
        "completed": completed,
        "total": total,
        "percent": round(completed * 100 / total) if total else 0,
        "next_milestone": next_pending,
        "is_complete": total > 0 and completed == total,
    }

