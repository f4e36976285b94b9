"""
Admin API Endpoints.

Owner-gated configuration setters. The caller (`X-Caller-Id`) must be the
current owner.
"""

from typing import Callable

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_call_context, get_store
from api.errors import to_http_exception
from api.models import (
    AccountUpdate,
    ErrorResponse,
    PriceUpdate,
    SaleConfigResponse,
    TimestampUpdate,
)
from domain.context import CallContext
from domain.errors import SaleError
from domain.sale_config import SaleConfig
from services import admin_service
from services.state_store import SaleStateStore

router = APIRouter()

_ERRORS = {code: {"model": ErrorResponse} for code in (400, 403, 409)}


def _apply(store: SaleStateStore, setter: Callable[..., SaleConfig], context: CallContext, value) -> SaleConfigResponse:
    try:
        with store.transaction() as state:
            config = setter(state, context, value)
    except SaleError as e:
        raise to_http_exception(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SaleConfigResponse(
        owner_id=config.owner_id,
        treasury_id=config.treasury_id,
        token_contract_id=config.token_contract_id,
        unit_price=config.unit_price,
        start_time=config.start_time,
        end_time=config.end_time,
        total_sale_cap=config.total_sale_cap,
    )


@router.put("/admin/token-contract", response_model=SaleConfigResponse, summary="Set Token Contract", responses=_ERRORS)
def set_token_contract(
    update: AccountUpdate,
    context: CallContext = Depends(get_call_context),
    store: SaleStateStore = Depends(get_store),
):
    return _apply(store, admin_service.set_token_contract, context, update.account_id)


@router.put("/admin/owner", response_model=SaleConfigResponse, summary="Set Owner", responses=_ERRORS)
def set_owner(
    update: AccountUpdate,
    context: CallContext = Depends(get_call_context),
    store: SaleStateStore = Depends(get_store),
):
    return _apply(store, admin_service.set_owner, context, update.account_id)


@router.put("/admin/treasury", response_model=SaleConfigResponse, summary="Set Treasury", responses=_ERRORS)
def set_treasury(
    update: AccountUpdate,
    context: CallContext = Depends(get_call_context),
    store: SaleStateStore = Depends(get_store),
):
    return _apply(store, admin_service.set_treasury, context, update.account_id)


@router.put("/admin/start-time", response_model=SaleConfigResponse, summary="Set Sale Start", responses=_ERRORS)
def set_start_time(
    update: TimestampUpdate,
    context: CallContext = Depends(get_call_context),
    store: SaleStateStore = Depends(get_store),
):
    return _apply(store, admin_service.set_start_time, context, update.timestamp)


@router.put("/admin/end-time", response_model=SaleConfigResponse, summary="Set Sale End", responses=_ERRORS)
def set_end_time(
    update: TimestampUpdate,
    context: CallContext = Depends(get_call_context),
    store: SaleStateStore = Depends(get_store),
):
    return _apply(store, admin_service.set_end_time, context, update.timestamp)


@router.put("/admin/unit-price", response_model=SaleConfigResponse, summary="Set Unit Price", responses=_ERRORS)
def set_unit_price(
    update: PriceUpdate,
    context: CallContext = Depends(get_call_context),
    store: SaleStateStore = Depends(get_store),
):
    return _apply(store, admin_service.set_unit_price, context, update.unit_price)
