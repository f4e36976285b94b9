"""
Domain: Sale configuration.

A single SaleConfig exists per sale. It is frozen; owner-gated setters replace
it with an updated copy so a rejected change can never leave it half-written.

Defaults mirror the parameters the sale was first deployed with.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

DEFAULT_TREASURY_ID: str = "bd286c2c61fc6633b4866f8ddc31a838cfea24042a6c281f1180cc21ed7fbfae"
DEFAULT_TOKEN_CONTRACT_ID: str = "dojos.near"
DEFAULT_UNIT_PRICE: int = 3_000_000_000_000_000_000
DEFAULT_START_TIME: int = 1647007905
DEFAULT_END_TIME: int = 1647607905
DEFAULT_TOTAL_SALE_CAP: int = 1_000_000


@dataclass(frozen=True, slots=True)
class SaleConfig:
    """
    Sale parameters.

    - owner_id: identity allowed to change configuration
    - treasury_id: identity that receives collected payments
    - token_contract_id: external token service invoked at claim time
    - unit_price: smallest currency units per sale unit
    - start_time / end_time: sale window bounds, epoch seconds
    - total_sale_cap: maximum aggregate units offered
    """

    owner_id: str
    treasury_id: str = DEFAULT_TREASURY_ID
    token_contract_id: str = DEFAULT_TOKEN_CONTRACT_ID
    unit_price: int = DEFAULT_UNIT_PRICE
    start_time: int = DEFAULT_START_TIME
    end_time: int = DEFAULT_END_TIME
    total_sale_cap: int = DEFAULT_TOTAL_SALE_CAP

    def __post_init__(self) -> None:
        if not self.owner_id:
            raise ValueError("owner_id must be a non-empty account id")
        if self.unit_price < 0:
            raise ValueError("unit_price must be >= 0")
        if self.start_time < 0 or self.end_time < 0:
            raise ValueError("window bounds must be >= 0")
        if self.total_sale_cap < 0:
            raise ValueError("total_sale_cap must be >= 0")

    def updated(self, **changes: Any) -> "SaleConfig":
        """Return a copy with the given fields replaced."""

        return replace(self, **changes)
