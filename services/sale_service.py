"""
Sale lifecycle and read-only queries.

Handles:
- Initializing a sale state with default (or overridden) parameters
- Status, window, price and per-account purchase queries

Queries never mutate state and need no authorization.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from domain.ledger import PurchaseLedger
from domain.sale_config import SaleConfig
from domain.state import SaleState
from domain.transfers import TransferOutbox

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SaleStatus:
    """Aggregate sale progress: units sold so far against the cap."""
    current_sale: int
    total_sale_cap: int


@dataclass(frozen=True, slots=True)
class SaleWindow:
    start_time: int
    end_time: int


def initialize_sale(owner_id: str, **overrides: Any) -> SaleState:
    """
    Create a fresh sale state owned by `owner_id`.

    Every other SaleConfig field takes its default unless overridden, and the
    ledger and outbox start empty.

    Example:
        state = initialize_sale("owner.near", unit_price=100, total_sale_cap=1_000)
    """

    config = SaleConfig(owner_id=owner_id, **overrides)
    logger.info(
        "Sale initialized: owner=%s token=%s price=%s window=[%s, %s) cap=%s",
        config.owner_id,
        config.token_contract_id,
        config.unit_price,
        config.start_time,
        config.end_time,
        config.total_sale_cap,
    )
    return SaleState(config=config, ledger=PurchaseLedger.empty(), outbox=TransferOutbox())


def get_status(state: SaleState) -> SaleStatus:
    return SaleStatus(
        current_sale=state.ledger.current_sale,
        total_sale_cap=state.config.total_sale_cap,
    )


def get_purchased(state: SaleState, account_id: str) -> int:
    """Unclaimed units for `account_id` (0 if it never bought or already claimed)."""
    return state.ledger.peek(account_id)


def get_window(state: SaleState) -> SaleWindow:
    return SaleWindow(start_time=state.config.start_time, end_time=state.config.end_time)


def get_unit_price(state: SaleState) -> int:
    return state.config.unit_price


__all__ = [
    "SaleStatus",
    "SaleWindow",
    "initialize_sale",
    "get_status",
    "get_purchased",
    "get_window",
    "get_unit_price",
]
