"""Forward domain events to the notification sink after commit.

Nothing here may break the business transaction: queueing happens in an
``on_commit`` callback, and any failure is logged as a warning.
"""
from __future__ import annotations

import logging

from django.db import transaction
from django.dispatch import receiver

from commissions.signals import commission_earned, incentive_achieved
from journey.signals import milestone_completed, vendor_assigned

from .models import Notification

logger = logging.getLogger("solarcrm")


def _deliver_now(event_type: str, object_id: str) -> None:
    from notifications.services import deliver

    deliver(event_type, object_id)


def queue_event(event_type: str, object_id) -> None:
    event_type = str(event_type)
    object_id = str(object_id)

    def _dispatch() -> None:
        try:
            from notifications.tasks import deliver_event

            deliver_event.delay(event_type=event_type, object_id=object_id)
            return
        except Exception as exc:
            logger.warning("notification async dispatch failed: %s", exc, exc_info=True)

        # Workers unreachable: deliver in-process.
        try:
            _deliver_now(event_type, object_id)
        except Exception as exc:
            logger.warning("notification inline delivery failed: %s", exc, exc_info=True)

    transaction.on_commit(_dispatch)


@receiver(milestone_completed)
def on_milestone_completed(sender, record, **kwargs):
    queue_event(Notification.EventType.MILESTONE_COMPLETED, record.pk)


@receiver(vendor_assigned)
def on_vendor_assigned(sender, assignment, **kwargs):
    queue_event(Notification.EventType.VENDOR_ASSIGNED, assignment.pk)


@receiver(commission_earned)
def on_commission_earned(sender, commission, **kwargs):
    queue_event(Notification.EventType.COMMISSION_EARNED, commission.pk)


@receiver(incentive_achieved)
def on_incentive_achieved(sender, target, **kwargs):
    queue_event(Notification.EventType.INCENTIVE_ACHIEVED, target.pk)
