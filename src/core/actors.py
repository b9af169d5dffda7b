"""Audit identity attached to journey mutations."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Actor:
    role: str
    id: str = ""

    @classmethod
    def system(cls) -> "Actor":
        return cls(role="system", id="")

    @classmethod
    def from_user(cls, user) -> "Actor":
        """Build an actor from a Django user (staff → operator, linked partner → partner)."""
        if user is None or not getattr(user, "is_authenticated", False):
            return cls.system()
        partner = getattr(user, "partner_profile", None)
        if partner is not None and not user.is_staff:
            return cls(role=partner.role, id=str(partner.pk))
        return cls(role="operator", id=str(user.pk))
