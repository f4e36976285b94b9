"""
Purchase service for buying sale units.

Handles:
- Sale window enforcement
- Payment quoting and sufficiency checks
- Sale cap enforcement
- Storage-cost metering of the ledger write
- Refund settlement through the transfer outbox
- All-or-nothing commit of ledger and outbox
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from domain.context import CallContext
from domain.errors import SaleCapExceededError, SaleWindowClosedError
from domain.escrow import Refund, quote_purchase, settle_refund, validate_sufficiency
from domain.state import SaleState
from domain.time_gate import TimeGate
from domain.transfers import TransferKind, TransferRequest
from services.settings import SaleSettings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PurchaseRequest:
    """
    Request to buy `token_amount` sale units on behalf of `account_id`.

    The buyer credited need not be the caller; payment comes from the caller.
    """
    account_id: str
    token_amount: int


@dataclass(frozen=True, slots=True)
class PurchaseResult:
    """
    Result of a successful purchase.

    required_payment: unit price times units
    storage_cost: currency charged for the storage the write consumed
    refund: refund paid out (None when it did not clear the dust threshold)
    refund_request_id: outbox request carrying the refund
    """
    account_id: str
    units_purchased: int
    total_units: int
    current_sale: int
    required_payment: int
    storage_cost: int
    refund: Optional[Refund]
    refund_request_id: Optional[str]


def execute_purchase(
    state: SaleState,
    context: CallContext,
    request: PurchaseRequest,
    settings: Optional[SaleSettings] = None,
) -> PurchaseResult:
    """
    Execute a purchase.

    Process:
    1. Check the sale window at the block time (seconds)
    2. Quote the required payment and check the attached deposit covers it
    3. Check the aggregate sale stays within the cap
    4. Write the ledger entry and meter the storage bytes it added
    5. Compute the refund net of storage cost and enqueue it if above dust
    6. Commit ledger and outbox together

    Any failure raises a SaleError before step 6; the state is untouched.

    Raises:
        SaleWindowClosedError, InvalidQuantityError, InsufficientPaymentError,
        SaleCapExceededError

    Example:
        result = execute_purchase(
            state,
            CallContext(caller_id="alice.near", attached_deposit=1_000, block_timestamp_ns=now_ns),
            PurchaseRequest(account_id="alice.near", token_amount=5),
        )
    """
    settings = settings or get_settings()
    config = state.config
    now = context.now

    # 1. Sale window
    gate = TimeGate.for_config(config, settings.window_mode)
    if not gate.is_sale_open(now):
        raise SaleWindowClosedError(now=now, start_time=config.start_time, end_time=config.end_time)

    # 2. Quote and sufficiency
    required = quote_purchase(request.token_amount, config.unit_price)
    validate_sufficiency(context.attached_deposit, required)

    # 3. Cap
    remaining = config.total_sale_cap - state.ledger.current_sale
    if request.token_amount > remaining:
        raise SaleCapExceededError(requested=request.token_amount, remaining=max(remaining, 0))

    # 4. Ledger write with storage metering
    initial_storage = state.ledger.storage_usage()
    ledger = state.ledger.record_purchase(request.account_id, request.token_amount)
    storage_cost = (ledger.storage_usage() - initial_storage) * settings.storage_byte_price

    # 5. Refund
    refund = settle_refund(
        submitted=context.attached_deposit,
        required=required,
        storage_cost=storage_cost,
        payer_id=context.caller_id,
        treasury_id=config.treasury_id,
        policy=settings.refund_policy,
    )

    outbox = state.outbox
    refund_request_id: Optional[str] = None
    if refund is not None:
        refund_request_id = str(uuid4())
        outbox = outbox.enqueue(
            TransferRequest(
                request_id=refund_request_id,
                kind=TransferKind.NATIVE,
                receiver_id=refund.receiver_id,
                amount=refund.amount,
                created_at=now,
            )
        )
    else:
        logger.info("Refund below dust threshold not issued for %s", request.account_id)

    # 6. Commit
    state.commit(ledger=ledger, outbox=outbox)

    logger.info(
        "Purchase recorded: account=%s units=%s total=%s current_sale=%s storage_cost=%s",
        request.account_id,
        request.token_amount,
        ledger.peek(request.account_id),
        ledger.current_sale,
        storage_cost,
    )

    return PurchaseResult(
        account_id=request.account_id,
        units_purchased=request.token_amount,
        total_units=ledger.peek(request.account_id),
        current_sale=ledger.current_sale,
        required_payment=required,
        storage_cost=storage_cost,
        refund=refund,
        refund_request_id=refund_request_id,
    )


__all__ = [
    "PurchaseRequest",
    "PurchaseResult",
    "execute_purchase",
]
