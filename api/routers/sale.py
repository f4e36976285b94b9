"""
Sale API Endpoints.

Initialization, read-only queries, purchases and claims.
"""

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_call_context, get_sale_settings, get_store
from api.errors import to_http_exception
from api.models import (
    BuyRequest,
    BuyResponse,
    ClaimResponse,
    ErrorResponse,
    InitializeRequest,
    PriceResponse,
    PurchasedResponse,
    RefundResponse,
    SaleConfigResponse,
    StatusResponse,
    WindowResponse,
)
from domain.context import CallContext
from domain.errors import SaleError
from services import sale_service
from services.claim_service import execute_claim
from services.purchase_service import PurchaseRequest, execute_purchase
from services.settings import SaleSettings
from services.state_store import SaleStateStore

router = APIRouter()

_ERRORS = {code: {"model": ErrorResponse} for code in (400, 402, 403, 404, 409)}


@router.post(
    "/sale/initialize",
    response_model=SaleConfigResponse,
    summary="Initialize Sale",
    description="One-time initialization. Omitted parameters take the sale defaults.",
    responses=_ERRORS,
)
def initialize_sale(request: InitializeRequest, store: SaleStateStore = Depends(get_store)):
    overrides = request.model_dump(exclude_none=True, exclude={"owner_id"})
    try:
        state = store.initialize(request.owner_id, **overrides)
    except SaleError as e:
        raise to_http_exception(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    config = state.config
    return SaleConfigResponse(
        owner_id=config.owner_id,
        treasury_id=config.treasury_id,
        token_contract_id=config.token_contract_id,
        unit_price=config.unit_price,
        start_time=config.start_time,
        end_time=config.end_time,
        total_sale_cap=config.total_sale_cap,
    )


@router.get("/sale/status", response_model=StatusResponse, summary="Sale Status", responses=_ERRORS)
def get_status(store: SaleStateStore = Depends(get_store)):
    try:
        with store.read() as state:
            status = sale_service.get_status(state)
    except SaleError as e:
        raise to_http_exception(e)
    return StatusResponse(current_sale=status.current_sale, total_sale_cap=status.total_sale_cap)


@router.get("/sale/window", response_model=WindowResponse, summary="Sale Window", responses=_ERRORS)
def get_window(store: SaleStateStore = Depends(get_store)):
    try:
        with store.read() as state:
            window = sale_service.get_window(state)
    except SaleError as e:
        raise to_http_exception(e)
    return WindowResponse(start_time=window.start_time, end_time=window.end_time)


@router.get("/sale/price", response_model=PriceResponse, summary="Unit Price", responses=_ERRORS)
def get_unit_price(store: SaleStateStore = Depends(get_store)):
    try:
        with store.read() as state:
            unit_price = sale_service.get_unit_price(state)
    except SaleError as e:
        raise to_http_exception(e)
    return PriceResponse(unit_price=unit_price)


@router.get(
    "/sale/purchases/{account_id}",
    response_model=PurchasedResponse,
    summary="Purchased Units",
    description="Unclaimed units for an account (0 if none).",
    responses=_ERRORS,
)
def get_purchased(account_id: str, store: SaleStateStore = Depends(get_store)):
    try:
        with store.read() as state:
            units = sale_service.get_purchased(state, account_id)
    except SaleError as e:
        raise to_http_exception(e)
    return PurchasedResponse(account_id=account_id, units=units)


@router.post(
    "/sale/buy",
    response_model=BuyResponse,
    summary="Buy Sale Units",
    responses=_ERRORS,
)
def buy(
    request: BuyRequest,
    context: CallContext = Depends(get_call_context),
    store: SaleStateStore = Depends(get_store),
    settings: SaleSettings = Depends(get_sale_settings),
):
    """
    Buy sale units for `account_id`.

    **Headers:**
    - `X-Caller-Id`: paying account
    - `X-Attached-Deposit`: payment in the smallest currency unit

    The payment must cover `token_amount * unit_price`. The refundable
    remainder (net of the storage the purchase consumed) is queued as a
    transfer request when it exceeds the dust threshold.

    **Example request:**
    ```json
    {"account_id": "alice.near", "token_amount": 5}
    ```
    """
    try:
        with store.transaction() as state:
            result = execute_purchase(
                state,
                context,
                PurchaseRequest(account_id=request.account_id, token_amount=request.token_amount),
                settings,
            )
    except SaleError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to execute purchase: {str(e)}"
        )

    refund = None
    if result.refund is not None and result.refund_request_id is not None:
        refund = RefundResponse(
            receiver_id=result.refund.receiver_id,
            amount=result.refund.amount,
            request_id=result.refund_request_id,
        )

    return BuyResponse(
        account_id=result.account_id,
        units_purchased=result.units_purchased,
        total_units=result.total_units,
        current_sale=result.current_sale,
        required_payment=result.required_payment,
        storage_cost=result.storage_cost,
        refund=refund,
    )


@router.post(
    "/sale/claim",
    response_model=ClaimResponse,
    summary="Claim Tokens",
    responses=_ERRORS,
)
def claim(
    context: CallContext = Depends(get_call_context),
    store: SaleStateStore = Depends(get_store),
    settings: SaleSettings = Depends(get_sale_settings),
):
    """
    Claim all purchased units of the caller (`X-Caller-Id`).

    Requires a minimal `X-Attached-Deposit`. The token transfer is queued and
    the call returns immediately; the units are restored if the transfer is
    later reported as failed.
    """
    try:
        with store.transaction() as state:
            result = execute_claim(state, context, settings)
    except SaleError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to execute claim: {str(e)}"
        )

    return ClaimResponse(
        request_id=result.request_id,
        account_id=result.account_id,
        units=result.units,
        token_amount=result.token_amount,
        token_contract_id=result.token_contract_id,
    )
