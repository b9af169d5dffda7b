"""Notification sink: turns domain events into in-app rows and emails.

Delivery is idempotent per (event, object, audience), so it can be retried
freely. Email failures are logged and never raised.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.email import send_branded_email

from .models import Notification

logger = logging.getLogger("solarcrm")

EventType = Notification.EventType


@dataclass
class Draft:
    audience: str
    title: str
    message: str
    partner: object = None
    customer: object = None
    payload: dict = field(default_factory=dict)


def _money(amount) -> str:
    return f"{getattr(settings, 'CURRENCY_SYMBOL', 'Rs')} {amount:,.2f}"


# ---------------------------------------------------------------------------
# Draft builders, one per event type
# ---------------------------------------------------------------------------

def _milestone_drafts(record_id) -> list[Draft]:
    from journey.models import MilestoneRecord

    record = MilestoneRecord.objects.select_related("customer", "customer__ddp").get(pk=record_id)
    customer = record.customer
    label = record.definition.label
    payload = {"customer_id": str(customer.pk), "milestone_key": record.milestone_key}
    drafts = [
        Draft(
            audience="customer",
            customer=customer,
            title=f"{label} completed",
            message=f"Your solar installation has reached the '{label}' stage.",
            payload=payload,
        ),
    ]
    if customer.ddp_id:
        drafts.append(Draft(
            audience="partner",
            partner=customer.ddp,
            customer=customer,
            title=f"{customer.name}: {label}",
            message=f"Milestone '{label}' was completed for {customer.name}.",
            payload=payload,
        ))
    return drafts


def _vendor_drafts(assignment_id) -> list[Draft]:
    from journey.models import VendorAssignment

    assignment = VendorAssignment.objects.select_related("customer", "customer__ddp", "vendor").get(pk=assignment_id)
    customer = assignment.customer
    vendor = assignment.vendor
    payload = {
        "customer_id": str(customer.pk),
        "vendor_id": str(vendor.pk),
        "job_role": assignment.job_role,
    }
    drafts = [
        Draft(
            audience="customer",
            customer=customer,
            title="Vendor assigned",
            message=f"{vendor.name} will handle {vendor.get_vendor_type_display()} for your installation.",
            payload=payload,
        ),
    ]
    if customer.ddp_id:
        drafts.append(Draft(
            audience="partner",
            partner=customer.ddp,
            customer=customer,
            title=f"{customer.name}: vendor assigned",
            message=f"{vendor.name} was assigned as {assignment.job_role} for {customer.name}.",
            payload=payload,
        ))
    return drafts


def _commission_drafts(commission_id) -> list[Draft]:
    from commissions.models import Commission

    commission = Commission.objects.select_related("partner", "customer").get(pk=commission_id)
    if commission.source == Commission.Source.INSTALLATION and commission.customer_id:
        message = (
            f"You earned {_money(commission.commission_amount)} for the installation "
            f"of {commission.customer.name} ({commission.capacity_kw} kW)."
        )
    else:
        message = f"You earned {_money(commission.commission_amount)}: {commission.notes}"
    return [
        Draft(
            audience="partner",
            partner=commission.partner,
            title="Commission earned",
            message=message,
            payload={
                "commission_id": str(commission.pk),
                "source": commission.source,
                "amount": str(commission.commission_amount),
            },
        ),
    ]


def _incentive_drafts(target_id) -> list[Draft]:
    from commissions.models import IncentiveTarget

    target = IncentiveTarget.objects.select_related("partner").get(pk=target_id)
    return [
        Draft(
            audience="partner",
            partner=target.partner,
            title="Monthly target achieved",
            message=(
                f"Congratulations! You reached your {target.month:02d}/{target.year} target "
                f"and earned a bonus of {_money(target.bonus_amount)}."
            ),
            payload={"target_id": str(target.pk), "month": target.month, "year": target.year},
        ),
    ]


_BUILDERS = {
    EventType.MILESTONE_COMPLETED: _milestone_drafts,
    EventType.VENDOR_ASSIGNED: _vendor_drafts,
    EventType.COMMISSION_EARNED: _commission_drafts,
    EventType.INCENTIVE_ACHIEVED: _incentive_drafts,
}


# ---------------------------------------------------------------------------
# deliver
# ---------------------------------------------------------------------------

def deliver(event_type: str, object_id) -> list[Notification]:
    """Create the notifications for one event and email their recipients."""
    event_type = str(event_type)
    try:
        builder = _BUILDERS[event_type]
    except KeyError:
        raise ValueError(f"Unknown notification event '{event_type}'.") from None

    notifications = []
    for draft in builder(object_id):
        with transaction.atomic():
            notification, created = Notification.objects.get_or_create(
                dedupe_key=f"{event_type}:{object_id}:{draft.audience}",
                defaults={
                    "event_type": event_type,
                    "partner": draft.partner,
                    "customer": draft.customer,
                    "title": draft.title,
                    "message": draft.message,
                    "payload": draft.payload,
                },
            )
        if not created:
            logger.debug("notification %s already delivered", notification.dedupe_key)
        notifications.append(notification)
        _email(notification)
    return notifications


def _email(notification: Notification) -> None:
    if notification.emailed_at is not None:
        return
    address = notification.recipient_email
    if not address:
        return
    try:
        sent = send_branded_email(
            subject=notification.title,
            template_name="emails/journey_event",
            context={"notification": notification},
            recipient_list=[address],
        )
    except Exception as exc:
        logger.warning("notification email failed id=%s: %s", notification.pk, exc)
        return
    if sent:
        Notification.objects.filter(pk=notification.pk).update(emailed_at=timezone.now())
