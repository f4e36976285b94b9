"""
FastAPI dependencies.

- The process-wide sale settings and state store (built from settings on first use)
- The host clock (block time in nanoseconds)
- The call context: caller identity and attached payment arrive as headers
"""

from __future__ import annotations

import time
from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from domain.context import CallContext
from services.settings import SaleSettings, StateBackend, get_settings
from services.state_store import SaleStateStore


def build_store(settings: SaleSettings) -> SaleStateStore:
    """Create the store for the configured backend, restoring persisted state if any."""

    if settings.state_backend is StateBackend.SUPABASE:
        from repositories.sale_state_repository import load_sale_state, save_sale_state

        return SaleStateStore(state=load_sale_state(), persister=save_sale_state)
    return SaleStateStore()


def get_sale_settings() -> SaleSettings:
    return get_settings()


@lru_cache(maxsize=1)
def get_store() -> SaleStateStore:
    return build_store(get_settings())


def get_block_timestamp_ns() -> int:
    return time.time_ns()


def get_call_context(
    caller_id: str = Header(..., alias="X-Caller-Id", min_length=1),
    attached_deposit: int = Header(0, alias="X-Attached-Deposit"),
    block_timestamp_ns: int = Depends(get_block_timestamp_ns),
) -> CallContext:
    if attached_deposit < 0:
        raise HTTPException(status_code=400, detail="X-Attached-Deposit must be >= 0")
    return CallContext(
        caller_id=caller_id,
        attached_deposit=attached_deposit,
        block_timestamp_ns=block_timestamp_ns,
    )
