"""
Claim service for releasing purchased tokens.

A claim takes the caller's whole ledger entry and enqueues one token transfer
to the linked token contract. It completes as soon as the request is queued;
the units are held as a pending claim until the transfer outcome is reported
through `resolve_transfer`:
- success: the units count as claimed
- failure: the units go back to the caller's entry and can be claimed again

current_sale is not decremented by claims.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from domain.context import CallContext
from domain.errors import (
    ClaimWindowClosedError,
    MissingAntiSpamDepositError,
    NothingToClaimError,
)
from domain.ledger import PendingClaim
from domain.state import SaleState
from domain.time_gate import TimeGate
from domain.transfers import TransferKind, TransferRequest
from services.settings import SaleSettings, get_settings

logger = logging.getLogger(__name__)

# Deposit attached to each token transfer call.
TOKEN_TRANSFER_DEPOSIT: int = 1


@dataclass(frozen=True, slots=True)
class ClaimResult:
    """
    Result of a submitted claim.

    request_id identifies both the queued token transfer and the pending claim.
    """
    request_id: str
    account_id: str
    units: int
    token_amount: int
    token_contract_id: str


@dataclass(frozen=True, slots=True)
class TransferResolution:
    request_id: str
    succeeded: bool
    account_id: str
    amount: int
    restored_units: int  # units returned to the account (failed token transfers only)


def execute_claim(
    state: SaleState,
    context: CallContext,
    settings: Optional[SaleSettings] = None,
) -> ClaimResult:
    """
    Submit a claim for the caller's purchased units.

    Process:
    1. Require the minimal anti-spam deposit
    2. Check the claim window at the block time (seconds)
    3. Take the caller's whole entry (fail if none)
    4. Scale units to token decimals and enqueue the token transfer
    5. Hold the units as a pending claim and commit

    Raises:
        MissingAntiSpamDepositError, ClaimWindowClosedError, NothingToClaimError
    """
    settings = settings or get_settings()
    config = state.config
    account_id = context.caller_id
    now = context.now

    # 1. Anti-spam deposit
    if context.attached_deposit < settings.claim_deposit:
        raise MissingAntiSpamDepositError(required=settings.claim_deposit)

    # 2. Claim window
    gate = TimeGate.for_config(config, settings.window_mode)
    if not gate.is_claim_open(now):
        raise ClaimWindowClosedError(now=now, end_time=config.end_time)

    # 3. Take the entry
    ledger, units = state.ledger.take_all(account_id)
    if units == 0:
        raise NothingToClaimError(account_id)

    # 4. Token transfer request
    request_id = str(uuid4())
    token_amount = units * settings.token_scale
    outbox = state.outbox.enqueue(
        TransferRequest(
            request_id=request_id,
            kind=TransferKind.TOKEN,
            receiver_id=account_id,
            amount=token_amount,
            created_at=now,
            contract_id=config.token_contract_id,
            attached_deposit=TOKEN_TRANSFER_DEPOSIT,
            gas=settings.ft_transfer_gas,
        )
    )

    # 5. Pending claim and commit
    ledger = ledger.hold_claim(
        PendingClaim(
            request_id=request_id,
            account_id=account_id,
            units=units,
            token_amount=token_amount,
            requested_at=now,
        )
    )
    state.commit(ledger=ledger, outbox=outbox)

    logger.info(
        "Claim submitted: account=%s units=%s token_amount=%s request=%s",
        account_id,
        units,
        token_amount,
        request_id,
    )

    return ClaimResult(
        request_id=request_id,
        account_id=account_id,
        units=units,
        token_amount=token_amount,
        token_contract_id=config.token_contract_id,
    )


def resolve_transfer(state: SaleState, request_id: str, succeeded: bool) -> TransferResolution:
    """
    Record the outcome of a queued transfer.

    Token transfers settle or release their pending claim. Refund payments
    only change status; a failed refund is logged for manual follow-up.

    Raises:
        UnknownTransferError: request_id is not a pending request
    """
    outbox, request = state.outbox.resolve(request_id, succeeded)
    ledger = state.ledger
    restored_units = 0

    if request.kind is TransferKind.TOKEN:
        if succeeded:
            ledger, claim = ledger.settle_claim(request_id)
            logger.info(
                "Claim settled: account=%s units=%s request=%s",
                claim.account_id,
                claim.units,
                request_id,
            )
        else:
            ledger, claim = ledger.release_claim(request_id)
            restored_units = claim.units
            logger.warning(
                "Token transfer failed, %s units restored to %s (request=%s)",
                claim.units,
                claim.account_id,
                request_id,
            )
    elif not succeeded:
        logger.warning(
            "Refund payment of %s to %s failed (request=%s)",
            request.amount,
            request.receiver_id,
            request_id,
        )

    state.commit(ledger=ledger, outbox=outbox)

    return TransferResolution(
        request_id=request_id,
        succeeded=succeeded,
        account_id=request.receiver_id,
        amount=request.amount,
        restored_units=restored_units,
    )


__all__ = [
    "ClaimResult",
    "TransferResolution",
    "execute_claim",
    "resolve_transfer",
]
