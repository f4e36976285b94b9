"""
Domain: Escrow accounting for purchases.

Given a unit count and the attached payment:
- required = unit_count * unit_price (Python ints; no 128-bit overflow)
- the payment must cover `required`
- refund is computed net of the storage cost the ledger write incurred

Two independent policy choices shape the refund:
- formula GROSS:  refund = submitted - storage_cost
  formula EXCESS: refund = submitted - required - storage_cost
- destination TREASURY or PAYER

GROSS + TREASURY (the defaults) forwards the whole payment, minus storage, to
the treasury. EXCESS + PAYER returns only the change to the buyer.

Refunds at or below the dust threshold are not issued.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import InsufficientPaymentError, InvalidQuantityError

U64_MAX: int = 2**64 - 1
DEFAULT_DUST_THRESHOLD: int = 1


class RefundDestination(str, Enum):
    TREASURY = "treasury"
    PAYER = "payer"


class RefundFormula(str, Enum):
    GROSS = "gross"
    EXCESS = "excess"


@dataclass(frozen=True, slots=True)
class RefundPolicy:
    destination: RefundDestination = RefundDestination.TREASURY
    formula: RefundFormula = RefundFormula.GROSS
    dust_threshold: int = DEFAULT_DUST_THRESHOLD


@dataclass(frozen=True, slots=True)
class Refund:
    """A refund that cleared the dust threshold and must be paid out."""

    receiver_id: str
    amount: int


def quote_purchase(unit_count: int, unit_price: int) -> int:
    """
    Payment required for `unit_count` sale units.

    Raises:
        InvalidQuantityError: unit_count is zero, negative or above 2**64 - 1
    """

    if unit_count <= 0:
        raise InvalidQuantityError("token amount must be at least 1")
    if unit_count > U64_MAX:
        raise InvalidQuantityError("token amount does not fit an unsigned 64-bit counter")
    return unit_count * unit_price


def validate_sufficiency(submitted: int, required: int) -> None:
    if submitted < required:
        raise InsufficientPaymentError(required=required, submitted=submitted)


def compute_refund(
    submitted: int,
    required: int,
    storage_cost: int,
    policy: RefundPolicy = RefundPolicy(),
) -> int:
    """
    Refundable remainder of the attached payment.

    A negative remainder means the deposit does not cover the storage the
    purchase consumed; the purchase is rejected rather than refunding nothing.
    """

    if policy.formula is RefundFormula.EXCESS:
        refund = submitted - required - storage_cost
        owed = required + storage_cost
    else:
        refund = submitted - storage_cost
        owed = storage_cost

    if refund < 0:
        raise InsufficientPaymentError(
            required=owed,
            submitted=submitted,
            reason=f"Attached deposit does not cover storage cost of {storage_cost}",
        )
    return refund


def settle_refund(
    *,
    submitted: int,
    required: int,
    storage_cost: int,
    payer_id: str,
    treasury_id: str,
    policy: RefundPolicy = RefundPolicy(),
) -> Optional[Refund]:
    """
    Decide whether a refund is paid and to whom.

    Returns None when the refund does not exceed the dust threshold.
    """

    amount = compute_refund(submitted, required, storage_cost, policy)
    if amount <= policy.dust_threshold:
        return None

    receiver_id = payer_id if policy.destination is RefundDestination.PAYER else treasury_id
    return Refund(receiver_id=receiver_id, amount=amount)
