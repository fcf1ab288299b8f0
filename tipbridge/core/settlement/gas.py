"""EVM gas price tiers."""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal
from typing import Dict, Optional, Union

from ..models import GasTier


GAS_TIER_MULTIPLIERS: Dict[GasTier, Decimal] = {
    GasTier.FAST: Decimal("1.2"),
    GasTier.INSTANT: Decimal("1.5"),
}


def resolve_gas_price(tier: Union[GasTier, str], base_gas_price: int) -> Optional[int]:
    """Gas price (wei) for ``tier``, or None to let the wallet decide.

    ``fast`` is 1.2x and ``instant`` 1.5x the base price, floored to whole wei.
    """
    tier = GasTier(tier)
    multiplier = GAS_TIER_MULTIPLIERS.get(tier)
    if multiplier is None:
        return None
    return int((Decimal(base_gas_price) * multiplier).to_integral_value(rounding=ROUND_FLOOR))


__all__ = ["GAS_TIER_MULTIPLIERS", "resolve_gas_price"]
