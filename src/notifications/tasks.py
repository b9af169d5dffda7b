"""Celery tasks for notification delivery."""
from __future__ import annotations

import logging

from celery import shared_task

logger = logging.getLogger("solarcrm")


@shared_task(bind=True, max_retries=3, default_retry_delay=30)
def deliver_event(self, *, event_type: str, object_id: str):
    """Deliver one journey/commission event to the notification sink."""
    try:
        from notifications.services import deliver

        delivered = deliver(event_type, object_id)
        logger.info("delivered %s for %s (%d notification(s))", event_type, object_id, len(delivered))
        return len(delivered)
    except Exception as exc:
        logger.exception("deliver_event failed: %s", exc)
        raise self.retry(exc=exc)
