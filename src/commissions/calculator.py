"""Pure commission rules: no database access, no side effects."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .rates import PARTNER_TYPES, CommissionRates, get_rates

PANEL_DCR = "dcr"
PANEL_NON_DCR = "non_dcr"
PANEL_TYPES = (PANEL_DCR, PANEL_NON_DCR)

CENT = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _check_partner_type(partner_type: str) -> None:
    if partner_type not in PARTNER_TYPES:
        raise ValueError(f"Unknown partner type '{partner_type}'.")


def _to_capacity(capacity_kw) -> Decimal:
    try:
        capacity = Decimal(str(capacity_kw))
    except (InvalidOperation, TypeError):
        raise ValueError(f"Invalid capacity '{capacity_kw}'.") from None
    if not capacity.is_finite() or capacity <= 0:
        raise ValueError(f"Capacity must be positive, got '{capacity_kw}'.")
    return capacity


def normalize_capacity(capacity_kw) -> Decimal:
    """Validated capacity rounded to the 0.01 kW the ledger stores."""
    capacity = _to_capacity(capacity_kw).quantize(CENT, rounding=ROUND_HALF_UP)
    if capacity <= 0:
        raise ValueError(f"Capacity must be at least 0.01 kW, got '{capacity_kw}'.")
    return capacity


def compute_installation_commission(
    panel_type: str,
    capacity_kw,
    partner_type: str,
    rates: CommissionRates | None = None,
) -> Decimal:
    """Commission owed to one partner for one completed installation.

    DCR installations use the fixed-amount table when the capacity is one of
    its keys (3 kW, 5 kW by default) and the DCR per-kW rate otherwise.
    Non-DCR installations always use the flat non-DCR per-kW rate.
    """
    rates = rates or get_rates()
    _check_partner_type(partner_type)
    capacity = _to_capacity(capacity_kw)

    if panel_type == PANEL_DCR:
        fixed = rates.fixed_dcr_amount(capacity, partner_type)
        if fixed is not None:
            return _money(fixed)
        return _money(capacity * rates.dcr_per_kw[partner_type])
    if panel_type == PANEL_NON_DCR:
        return _money(capacity * rates.non_dcr_per_kw[partner_type])
    raise ValueError(f"Unknown panel type '{panel_type}'.")


def compute_inverter_commission(partner_type: str, rates: CommissionRates | None = None) -> Decimal:
    """Flat per-unit commission for an inverter sale."""
    rates = rates or get_rates()
    _check_partner_type(partner_type)
    return _money(rates.inverter_per_unit[partner_type])
