"""Commission rate tables and incentive defaults.

Rates are read once from ``settings.COMMISSION_RATES`` into an immutable
:class:`CommissionRates` object. Every commission row stores the
``version`` it was computed with so historical amounts stay auditable.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

from django.conf import settings

PARTNER_TYPES = ("ddp", "bdp")


def _role_table(raw) -> Mapping[str, Decimal]:
    missing = set(PARTNER_TYPES) - set(raw)
    if missing:
        raise ValueError(f"Rate table is missing partner types: {sorted(missing)}")
    return MappingProxyType({role: Decimal(str(raw[role])) for role in PARTNER_TYPES})


@dataclass(frozen=True)
class CommissionRates:
    version: str
    dcr_fixed: Mapping[Decimal, Mapping[str, Decimal]]
    dcr_per_kw: Mapping[str, Decimal]
    non_dcr_per_kw: Mapping[str, Decimal]
    inverter_per_unit: Mapping[str, Decimal]

    @classmethod
    def from_dict(cls, raw: dict) -> "CommissionRates":
        return cls(
            version=str(raw.get("version", "")),
            dcr_fixed=MappingProxyType({
                Decimal(str(capacity)).normalize(): _role_table(table)
                for capacity, table in raw["dcr_fixed"].items()
            }),
            dcr_per_kw=_role_table(raw["dcr_per_kw"]),
            non_dcr_per_kw=_role_table(raw["non_dcr_per_kw"]),
            inverter_per_unit=_role_table(raw["inverter_per_unit"]),
        )

    def fixed_dcr_amount(self, capacity_kw: Decimal, partner_type: str) -> Decimal | None:
        table = self.dcr_fixed.get(Decimal(capacity_kw).normalize())
        return None if table is None else table[partner_type]


@dataclass(frozen=True)
class IncentiveDefaults:
    target_installations: int
    target_capacity_kw: Decimal
    bonus_amount: Decimal

    @classmethod
    def from_dict(cls, raw: dict) -> "IncentiveDefaults":
        return cls(
            target_installations=int(raw["target_installations"]),
            target_capacity_kw=Decimal(str(raw["target_capacity_kw"])),
            bonus_amount=Decimal(str(raw["bonus_amount"])),
        )


@lru_cache(maxsize=1)
def get_rates() -> CommissionRates:
    return CommissionRates.from_dict(settings.COMMISSION_RATES)


@lru_cache(maxsize=1)
def get_incentive_defaults() -> IncentiveDefaults:
    return IncentiveDefaults.from_dict(settings.INCENTIVE_DEFAULTS)
