"""Branded email helper: HTML body with a plain-text fallback."""

from __future__ import annotations

import logging
from typing import Sequence

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

logger = logging.getLogger("solarcrm")


def send_branded_email(
    *,
    subject: str,
    template_name: str,
    context: dict,
    recipient_list: Sequence[str],
    from_email: str | None = None,
    fail_silently: bool = False,
) -> int:
    """Render ``<template_name>.txt`` and ``<template_name>.html`` and send them.

    Blank addresses are dropped. Returns the number of messages sent (0 or 1).
    """
    recipients = [addr for addr in recipient_list if addr]
    if not recipients:
        logger.debug("send_branded_email skipped, no recipients for %r", subject)
        return 0

    sender = from_email or getattr(settings, "DEFAULT_FROM_EMAIL", None)
    context = {"frontend_url": getattr(settings, "FRONTEND_URL", ""), **context}

    text_body = render_to_string(f"{template_name}.txt", context).strip()
    html_body = render_to_string(f"{template_name}.html", context)

    msg = EmailMultiAlternatives(
        subject=subject,
        body=text_body,
        from_email=sender,
        to=recipients,
    )
    msg.attach_alternative(html_body, "text/html")
    return msg.send(fail_silently=fail_silently)
