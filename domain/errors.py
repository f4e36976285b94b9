"""
Domain: Sale error taxonomy.

Every failure aborts the whole operation and leaves the sale state unchanged.
Each error carries a stable `code` so outer layers (HTTP, scripts) can report
the reason without parsing messages.
"""

from __future__ import annotations

from typing import Optional


class SaleError(Exception):
    """Base class for all rejections raised by sale operations."""

    code: str = "SaleError"


class UnauthorizedError(SaleError):
    """Raised when a non-owner calls an owner-gated setter."""

    code = "Unauthorized"

    def __init__(self, caller_id: str):
        self.caller_id = caller_id
        super().__init__("Owner's method")


class SaleWindowClosedError(SaleError):
    """Raised when a purchase arrives outside the sale window."""

    code = "SaleWindowClosed"

    def __init__(self, now: int, start_time: int, end_time: int):
        self.now = now
        self.start_time = start_time
        self.end_time = end_time
        super().__init__(
            f"Sale is not open at {now} (window: {start_time} to {end_time})"
        )


class ClaimWindowClosedError(SaleError):
    """Raised when a claim arrives outside the claim window."""

    code = "ClaimWindowClosed"

    def __init__(self, now: int, end_time: int):
        self.now = now
        self.end_time = end_time
        super().__init__(f"Not claimable at {now} (sale ends at {end_time})")


class InsufficientPaymentError(SaleError):
    """Raised when the attached payment does not cover the purchase (or its storage)."""

    code = "InsufficientPayment"

    def __init__(self, required: int, submitted: int, reason: Optional[str] = None):
        self.required = required
        self.submitted = submitted
        super().__init__(
            reason
            or f"Not enough attached deposit to buy. Required: {required}, Attached: {submitted}"
        )


class NothingToClaimError(SaleError):
    """Raised when the caller has no purchased units to claim."""

    code = "NothingToClaim"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"No claimable tokens for {account_id}")


class MissingAntiSpamDepositError(SaleError):
    """Raised when a claim is submitted without the minimal attached deposit."""

    code = "MissingAntiSpamDeposit"

    def __init__(self, required: int):
        self.required = required
        super().__init__(f"Requires attached deposit of at least {required}")


class InvalidQuantityError(SaleError):
    """Raised when the requested unit count is zero or does not fit an unsigned 64-bit counter."""

    code = "InvalidQuantity"


class SaleCapExceededError(SaleError):
    """Raised when a purchase would push the aggregate sale past the total cap."""

    code = "SaleCapExceeded"

    def __init__(self, requested: int, remaining: int):
        self.requested = requested
        self.remaining = remaining
        super().__init__(
            f"Sale cap exceeded. Requested: {requested}, Remaining: {remaining}"
        )


class NotInitializedError(SaleError):
    """Raised when an operation runs before the sale has been initialized."""

    code = "NotInitialized"

    def __init__(self) -> None:
        super().__init__("Sale has not been initialized")


class AlreadyInitializedError(SaleError):
    """Raised on a second initialize."""

    code = "AlreadyInitialized"

    def __init__(self) -> None:
        super().__init__("Sale is already initialized")


class UnknownTransferError(SaleError):
    """Raised when resolving a transfer request that is not pending."""

    code = "UnknownTransfer"

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__(f"No pending transfer request: {request_id}")


__all__ = [
    "SaleError",
    "UnauthorizedError",
    "SaleWindowClosedError",
    "ClaimWindowClosedError",
    "InsufficientPaymentError",
    "NothingToClaimError",
    "MissingAntiSpamDepositError",
    "InvalidQuantityError",
    "SaleCapExceededError",
    "NotInitializedError",
    "AlreadyInitializedError",
    "UnknownTransferError",
]
