"""
Translation of sale errors into HTTP errors.
"""

from __future__ import annotations

from fastapi import HTTPException

from domain.errors import (
    AlreadyInitializedError,
    ClaimWindowClosedError,
    InsufficientPaymentError,
    InvalidQuantityError,
    MissingAntiSpamDepositError,
    NotInitializedError,
    NothingToClaimError,
    SaleCapExceededError,
    SaleError,
    SaleWindowClosedError,
    UnauthorizedError,
    UnknownTransferError,
)

_STATUS_BY_ERROR: dict[type[SaleError], int] = {
    UnauthorizedError: 403,
    SaleWindowClosedError: 409,
    ClaimWindowClosedError: 409,
    InsufficientPaymentError: 402,
    MissingAntiSpamDepositError: 402,
    NothingToClaimError: 404,
    InvalidQuantityError: 400,
    SaleCapExceededError: 409,
    NotInitializedError: 409,
    AlreadyInitializedError: 409,
    UnknownTransferError: 404,
}


def to_http_exception(error: SaleError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_ERROR.get(type(error), 400),
        detail={"error": error.code, "detail": str(error)},
    )
