"""
Transfers API Endpoints.

The transfer executor polls pending requests and reports each outcome back.
Both endpoints are restricted to the sale owner and the configured executor
(`X-Caller-Id`).
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_call_context, get_sale_settings, get_store
from api.errors import to_http_exception
from api.models import (
    ErrorResponse,
    PendingTransfersResponse,
    ResolveTransferRequest,
    ResolveTransferResponse,
    TransferResponse,
)
from domain.context import CallContext
from domain.errors import SaleError
from services.admin_service import assert_transfer_executor
from services.claim_service import resolve_transfer
from services.settings import SaleSettings
from services.state_store import SaleStateStore

router = APIRouter()

_ERRORS = {code: {"model": ErrorResponse} for code in (403, 404, 409)}


@router.get(
    "/transfers/pending",
    response_model=PendingTransfersResponse,
    summary="List Pending Transfers",
    description="Queued refund payments and token transfers awaiting execution, oldest first.",
    responses=_ERRORS,
)
def list_pending_transfers(
    context: CallContext = Depends(get_call_context),
    settings: SaleSettings = Depends(get_sale_settings),
    store: SaleStateStore = Depends(get_store),
):
    try:
        with store.read() as state:
            assert_transfer_executor(state, context, settings.transfer_executor_id)
            pending = state.outbox.pending()
    except SaleError as e:
        raise to_http_exception(e)

    items = [
        TransferResponse(
            request_id=request.request_id,
            kind=request.kind.value,
            receiver_id=request.receiver_id,
            amount=request.amount,
            contract_id=request.contract_id,
            attached_deposit=request.attached_deposit,
            gas=request.gas,
            status=request.status.value,
            created_at=request.created_at,
        )
        for request in pending
    ]
    return PendingTransfersResponse(items=items, total_count=len(items))


@router.post(
    "/transfers/{request_id}/resolve",
    response_model=ResolveTransferResponse,
    summary="Resolve Transfer",
    description="Report the outcome of a queued transfer. A failed token transfer restores the claimed units.",
    responses=_ERRORS,
)
def resolve(
    request_id: str,
    body: ResolveTransferRequest,
    context: CallContext = Depends(get_call_context),
    settings: SaleSettings = Depends(get_sale_settings),
    store: SaleStateStore = Depends(get_store),
):
    try:
        with store.transaction() as state:
            assert_transfer_executor(state, context, settings.transfer_executor_id)
            resolution = resolve_transfer(state, request_id, body.succeeded)
    except SaleError as e:
        raise to_http_exception(e)

    return ResolveTransferResponse(
        request_id=resolution.request_id,
        succeeded=resolution.succeeded,
        account_id=resolution.account_id,
        amount=resolution.amount,
        restored_units=resolution.restored_units,
    )
