"""
Domain: Outgoing transfer requests.

Refund payments and token transfers are never executed inline. Operations
enqueue a TransferRequest on the outbox and complete; a separate consumer
delivers the request and reports the outcome back (see services.transfer_worker).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple

from .errors import UnknownTransferError


class TransferKind(str, Enum):
    NATIVE = "native"  # currency payment (refunds)
    TOKEN = "token"  # call to the linked token contract


class TransferStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class TransferRequest:
    request_id: str
    kind: TransferKind
    receiver_id: str
    amount: int
    created_at: int
    contract_id: Optional[str] = None  # token transfers only
    attached_deposit: int = 0
    gas: int = 0
    memo: Optional[str] = None
    status: TransferStatus = TransferStatus.PENDING

    def __post_init__(self) -> None:
        if self.amount <= 0:
            raise ValueError("transfer amount must be > 0")
        if self.kind is TransferKind.TOKEN and not self.contract_id:
            raise ValueError("token transfers require contract_id")

    @property
    def is_pending(self) -> bool:
        return self.status is TransferStatus.PENDING


@dataclass(frozen=True, slots=True)
class TransferOutbox:
    """
    Ordered log of transfer requests.

    Resolved requests stay in the log with their final status; only pending
    ones are handed to consumers.
    """

    requests: Tuple[TransferRequest, ...] = ()

    def enqueue(self, request: TransferRequest) -> "TransferOutbox":
        if self.get(request.request_id) is not None:
            raise ValueError(f"Duplicate transfer request: {request.request_id}")
        return TransferOutbox(requests=self.requests + (request,))

    def get(self, request_id: str) -> Optional[TransferRequest]:
        for request in self.requests:
            if request.request_id == request_id:
                return request
        return None

    def pending(self) -> List[TransferRequest]:
        return [r for r in self.requests if r.is_pending]

    def resolve(self, request_id: str, succeeded: bool) -> Tuple["TransferOutbox", TransferRequest]:
        """Mark a pending request completed or failed."""

        request = self.get(request_id)
        if request is None or not request.is_pending:
            raise UnknownTransferError(request_id)

        status = TransferStatus.COMPLETED if succeeded else TransferStatus.FAILED
        resolved = replace(request, status=status)
        return (
            TransferOutbox(
                requests=tuple(resolved if r.request_id == request_id else r for r in self.requests)
            ),
            resolved,
        )
