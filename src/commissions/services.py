"""Commission ledger.

Installation commissions are idempotent per ``(partner, customer)``: the
check-then-insert is backed by a partial unique constraint, and a losing
concurrent insert returns the winner's row instead of raising. Inverter and
bonus commissions are append-only. Everything is created ``pending``; the
payout subsystem owns later transitions.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from core.shortcuts import get_or_not_found
from core.transactions import atomic_with_retry
from customers.models import Customer
from partners.models import Partner

from .calculator import compute_installation_commission, compute_inverter_commission, normalize_capacity
from .incentives import apply_installation
from .models import Commission
from .rates import get_rates
from .signals import commission_earned

logger = logging.getLogger("solarcrm")

ZERO = Decimal("0.00")


# ---------------------------------------------------------------------------
# record_installation_commission
# ---------------------------------------------------------------------------

@atomic_with_retry
def record_installation_commission(
    customer_id,
    partner_id,
    partner_type: str,
    panel_type: str,
    capacity_kw,
) -> Commission:
    """Record the installation commission owed to one partner for one customer.

    Parameters
    ----------
    customer_id : UUID
        The installed customer.
    partner_id : UUID
        The partner earning the commission.
    partner_type : str
        ``"ddp"`` or ``"bdp"``; selects the rate column.
    panel_type : str
        ``"dcr"`` or ``"non_dcr"``.
    capacity_kw : Decimal
        Installed capacity.

    Returns
    -------
    Commission
        The new row, or the existing one if this pair was already paid out.
    """
    # One rounded value feeds the amount, the stored row and the target.
    capacity_kw = normalize_capacity(capacity_kw)
    existing = _installation_commission(partner_id, customer_id)
    if existing is not None:
        logger.info("installation commission already recorded partner=%s customer=%s", partner_id, customer_id)
        return existing

    amount = compute_installation_commission(panel_type, capacity_kw, partner_type)
    partner = get_or_not_found(Partner.objects.all(), "Partner", pk=partner_id)
    customer = get_or_not_found(Customer.objects.all(), "Customer", pk=customer_id)

    try:
        with transaction.atomic():
            commission = Commission.objects.create(
                partner=partner,
                partner_type=partner_type,
                customer=customer,
                source=Commission.Source.INSTALLATION,
                panel_type=panel_type,
                capacity_kw=capacity_kw,
                commission_amount=amount,
                rate_version=get_rates().version,
                notes=f"Installation commission for {customer.name}",
            )
    except IntegrityError:
        winner = _installation_commission(partner_id, customer_id)
        if winner is None:
            raise
        logger.info("concurrent installation commission suppressed partner=%s customer=%s", partner_id, customer_id)
        return winner

    logger.info(
        "installation commission partner=%s customer=%s amount=%s",
        partner.pk, customer.pk, amount,
    )
    apply_installation(commission)
    commission_earned.send(sender=Commission, commission=commission)
    return commission


def _installation_commission(partner_id, customer_id):
    return Commission.objects.filter(
        partner_id=partner_id,
        customer_id=customer_id,
        source=Commission.Source.INSTALLATION,
    ).first()


# ---------------------------------------------------------------------------
# Append-only entries
# ---------------------------------------------------------------------------

@atomic_with_retry
def record_inverter_commission(
    partner_id,
    partner_type: str,
    units_sold: int,
    notes: str = "",
    reference: str = "",
) -> Commission:
    """Append one inverter-sale commission (per-unit rate x units)."""
    if int(units_sold) != units_sold or units_sold <= 0:
        raise ValueError("units_sold must be a positive integer.")
    partner = get_or_not_found(Partner.objects.all(), "Partner", pk=partner_id)
    amount = compute_inverter_commission(partner_type) * units_sold

    commission = Commission.objects.create(
        partner=partner,
        partner_type=partner_type,
        source=Commission.Source.INVERTER,
        units=units_sold,
        commission_amount=amount,
        rate_version=get_rates().version,
        notes=notes or f"Inverter sale ({units_sold} unit(s))",
        reference=reference or "",
    )
    logger.info("inverter commission partner=%s units=%s amount=%s", partner.pk, units_sold, amount)
    commission_earned.send(sender=Commission, commission=commission)
    return commission


@atomic_with_retry
def record_bonus(
    partner_id,
    partner_type: str,
    amount,
    incentive_target=None,
    notes: str = "",
) -> Commission:
    """Append one bonus commission.

    When *incentive_target* is given the database allows a single bonus
    per target.
    """
    amount = Decimal(str(amount))
    if amount <= 0:
        raise ValueError("Bonus amount must be positive.")
    partner = get_or_not_found(Partner.objects.all(), "Partner", pk=partner_id)

    commission = Commission.objects.create(
        partner=partner,
        partner_type=partner_type,
        source=Commission.Source.BONUS,
        commission_amount=amount,
        incentive_target=incentive_target,
        notes=notes,
    )
    commission_earned.send(sender=Commission, commission=commission)
    return commission


# ---------------------------------------------------------------------------
# Business flows
# ---------------------------------------------------------------------------

@atomic_with_retry
def award_installation_commissions(customer: Customer) -> list[Commission]:
    """Pay the owning partner, and its parent BDP, for a finished installation.

    Direct website customers, customers without an owning partner and
    customers without a positive capacity earn nothing.
    """
    if customer.source == Customer.Source.WEBSITE_DIRECT:
        logger.info("no commission for direct customer=%s", customer.pk)
        return []
    if customer.ddp_id is None:
        logger.warning("no owning partner for customer=%s, commission skipped", customer.pk)
        return []
    capacity = customer.proposed_capacity
    if capacity is None or capacity <= 0:
        logger.warning("no proposed capacity for customer=%s, commission skipped", customer.pk)
        return []

    owner = customer.ddp
    awarded = [
        record_installation_commission(customer.pk, owner.pk, owner.role, customer.panel_type, capacity),
    ]
    if owner.role == Partner.Role.DDP and owner.parent_bdp is not None:
        bdp = owner.parent_bdp
        awarded.append(
            record_installation_commission(customer.pk, bdp.pk, Partner.Role.BDP, customer.panel_type, capacity)
        )
    return awarded


@atomic_with_retry
def record_inverter_sale(partner_id, units_sold: int, reference: str = "") -> list[Commission]:
    """Commission the selling partner and, for a DDP, its parent BDP."""
    partner = get_or_not_found(Partner.objects.select_related("parent"), "Partner", pk=partner_id)
    recorded = [
        record_inverter_commission(partner.pk, partner.role, units_sold, reference=reference),
    ]
    if partner.role == Partner.Role.DDP and partner.parent_bdp is not None:
        bdp = partner.parent_bdp
        recorded.append(
            record_inverter_commission(
                bdp.pk,
                Partner.Role.BDP,
                units_sold,
                notes=f"Inverter sale by {partner.name} ({units_sold} unit(s))",
                reference=reference,
            )
        )
    return recorded


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def commissions_for_partner(partner_id, status: str | None = None, source: str | None = None):
    qs = Commission.objects.filter(partner_id=partner_id).select_related("customer")
    if status:
        qs = qs.filter(status=status)
    if source:
        qs = qs.filter(source=source)
    return qs.order_by("-created_at")


def commission_summary(partner_id) -> dict:
    """Totals for a partner's earnings dashboard."""
    get_or_not_found(Partner.objects.all(), "Partner", pk=partner_id)
    today = timezone.localdate()
    qs = Commission.objects.filter(partner_id=partner_id)
    S = Commission.Status
    src = Commission.Source
    agg = qs.aggregate(
        total=Sum("commission_amount"),
        pending=Sum("commission_amount", filter=Q(status__in=[S.PENDING, S.APPROVED])),
        paid=Sum("commission_amount", filter=Q(status=S.PAID)),
        installation=Sum("commission_amount", filter=Q(source=src.INSTALLATION)),
        inverter=Sum("commission_amount", filter=Q(source=src.INVERTER)),
        bonus=Sum("commission_amount", filter=Q(source=src.BONUS)),
        installation_count=Count("id", filter=Q(source=src.INSTALLATION)),
        this_month=Sum(
            "commission_amount",
            filter=Q(created_at__year=today.year, created_at__month=today.month),
        ),
    )
    return {
        "total_earned": agg["total"] or ZERO,
        "pending_amount": agg["pending"] or ZERO,
        "paid_amount": agg["paid"] or ZERO,
        "installation_amount": agg["installation"] or ZERO,
        "inverter_amount": agg["inverter"] or ZERO,
        "bonus_amount": agg["bonus"] or ZERO,
        "installation_count": agg["installation_count"] or 0,
        "this_month_amount": agg["this_month"] or ZERO,
    }
