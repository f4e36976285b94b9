"""
Owner-gated configuration setters.

Each setter checks the caller against the stored owner and replaces the
configuration with an updated copy. No other validation is applied: the owner
may move the window or price at any time.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from domain.context import CallContext
from domain.errors import UnauthorizedError
from domain.sale_config import SaleConfig
from domain.state import SaleState

logger = logging.getLogger(__name__)


def assert_owner(state: SaleState, context: CallContext) -> None:
    if context.caller_id != state.config.owner_id:
        raise UnauthorizedError(context.caller_id)


def assert_transfer_executor(
    state: SaleState, context: CallContext, executor_id: Optional[str] = None
) -> None:
    """
    Only the owner, or the configured transfer executor, may see and resolve
    queued transfers. A false failure report would restore claimed units.
    """
    if context.caller_id in (state.config.owner_id, executor_id):
        return
    raise UnauthorizedError(context.caller_id)


def _update(state: SaleState, context: CallContext, **changes: Any) -> SaleConfig:
    assert_owner(state, context)
    config = state.config.updated(**changes)
    state.commit(config=config)
    logger.info("Sale config updated by %s: %s", context.caller_id, changes)
    return config


def set_token_contract(state: SaleState, context: CallContext, contract_id: str) -> SaleConfig:
    return _update(state, context, token_contract_id=contract_id)


def set_owner(state: SaleState, context: CallContext, owner_id: str) -> SaleConfig:
    return _update(state, context, owner_id=owner_id)


def set_treasury(state: SaleState, context: CallContext, treasury_id: str) -> SaleConfig:
    return _update(state, context, treasury_id=treasury_id)


def set_start_time(state: SaleState, context: CallContext, start_time: int) -> SaleConfig:
    return _update(state, context, start_time=start_time)


def set_end_time(state: SaleState, context: CallContext, end_time: int) -> SaleConfig:
    return _update(state, context, end_time=end_time)


def set_unit_price(state: SaleState, context: CallContext, unit_price: int) -> SaleConfig:
    return _update(state, context, unit_price=unit_price)


__all__ = [
    "assert_owner",
    "assert_transfer_executor",
    "set_token_contract",
    "set_owner",
    "set_treasury",
    "set_start_time",
    "set_end_time",
    "set_unit_price",
]
