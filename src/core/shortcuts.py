"""Lookup helpers that raise domain errors instead of ``DoesNotExist``."""
from django.core.exceptions import ValidationError

from core.exceptions import NotFoundError


def get_or_not_found(queryset, label: str, **lookup):
    """``queryset.get(**lookup)`` that raises :class:`NotFoundError`.

    Malformed identifiers (e.g. a non-UUID string) are reported as not found too.
    """
    try:
        return queryset.get(**lookup)
    except (queryset.model.DoesNotExist, ValidationError, ValueError):
        raise NotFoundError(f"{label} not found.", **lookup) from None
