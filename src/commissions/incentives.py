"""Monthly incentive aggregation.

Every fresh installation commission is rolled up into the partner's target
for the commission's calendar month. The increment and the
``active -> achieved`` transition happen under the same row lock, and the
transition itself is a conditional update, so one period can never pay two
bonuses.
"""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.db.models import F
from django.utils import timezone

from .models import Commission, IncentiveTarget
from .rates import get_incentive_defaults
from .signals import incentive_achieved

logger = logging.getLogger("solarcrm")


def _period_of(moment) -> tuple[int, int]:
    local = timezone.localtime(moment) if moment else timezone.localtime()
    return local.month, local.year


def get_or_create_target(partner_id, partner_type: str, month: int, year: int) -> IncentiveTarget:
    """Fetch the period's target, creating it with the configured defaults."""
    defaults = get_incentive_defaults()
    target, created = IncentiveTarget.objects.get_or_create(
        partner_id=partner_id,
        partner_type=partner_type,
        month=month,
        year=year,
        defaults={
            "target_installations": defaults.target_installations,
            "target_capacity_kw": defaults.target_capacity_kw,
            "bonus_amount": defaults.bonus_amount,
        },
    )
    if created:
        logger.info("incentive target opened partner=%s period=%02d/%s", partner_id, month, year)
    return target


def apply_installation(commission: Commission) -> IncentiveTarget:
    """Roll one installation commission into its period target.

    Must run inside the transaction that created *commission*.
    """
    month, year = _period_of(commission.created_at)
    target = get_or_create_target(commission.partner_id, commission.partner_type, month, year)

    # Lock, then increment in SQL so concurrent increments never lose an update.
    target = IncentiveTarget.objects.select_for_update().get(pk=target.pk)
    now = timezone.now()
    IncentiveTarget.objects.filter(pk=target.pk).update(
        achieved_installations=F("achieved_installations") + 1,
        achieved_capacity_kw=F("achieved_capacity_kw") + (commission.capacity_kw or Decimal("0")),
        updated_at=now,
    )
    target.refresh_from_db()

    if target.status == IncentiveTarget.Status.ACTIVE and target.installations_met and target.capacity_met:
        flipped = IncentiveTarget.objects.filter(
            pk=target.pk,
            status=IncentiveTarget.Status.ACTIVE,
        ).update(status=IncentiveTarget.Status.ACHIEVED, achieved_at=now, updated_at=now)
        if flipped:
            target.refresh_from_db()
            _award_bonus(target)
    return target


def _award_bonus(target: IncentiveTarget) -> Commission:
    from commissions.services import record_bonus

    bonus = record_bonus(
        target.partner_id,
        target.partner_type,
        target.bonus_amount,
        incentive_target=target,
        notes=f"Monthly target bonus for {target.month}/{target.year}",
    )
    logger.info(
        "incentive achieved partner=%s period=%02d/%s bonus=%s",
        target.partner_id, target.month, target.year, bonus.commission_amount,
    )
    incentive_achieved.send(sender=IncentiveTarget, target=target, bonus=bonus)
    return bonus


# ---------------------------------------------------------------------------
# Queries / maintenance
# ---------------------------------------------------------------------------

def current_target(partner_id, partner_type: str, today: date | None = None) -> IncentiveTarget:
    """The partner's target for the current month, opened with the defaults if needed."""
    today = today or timezone.localdate()
    return get_or_create_target(partner_id, partner_type, today.month, today.year)


def targets_for_partner(partner_id):
    return IncentiveTarget.objects.filter(partner_id=partner_id).order_by("-year", "-month")


def expire_past_targets(today: date | None = None) -> int:
    """Move still-active targets of finished months to ``expired``."""
    today = today or timezone.localdate()
    updated = (
        IncentiveTarget.objects
        .filter(status=IncentiveTarget.Status.ACTIVE)
        .filter(year__lt=today.year)
        .update(status=IncentiveTarget.Status.EXPIRED, updated_at=timezone.now())
    )
    updated += (
        IncentiveTarget.objects
        .filter(status=IncentiveTarget.Status.ACTIVE, year=today.year, month__lt=today.month)
        .update(status=IncentiveTarget.Status.EXPIRED, updated_at=timezone.now())
    )
    if updated:
        logger.info("expired %s incentive target(s) before %02d/%s", updated, today.month, today.year)
    return updated
