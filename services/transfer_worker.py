"""
Transfer worker: consumer side of the transfer outbox.

Delivers each pending request through a TransferService and reports the
outcome back with `resolve_transfer`. The worker runs outside purchase and
claim operations; those only enqueue.

`process_pending_transfers` works on a bare SaleState, so the caller must hold
the store transaction. `drain_outbox` does that for a SaleStateStore, which
also persists the resolutions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from domain.state import SaleState
from domain.transfers import TransferKind, TransferRequest
from services.claim_service import resolve_transfer
from services.state_store import SaleStateStore

logger = logging.getLogger(__name__)


class TransferService(Protocol):
    """Host facilities for moving currency and calling the token contract."""

    def send_payment(self, receiver_id: str, amount: int) -> bool:
        ...

    def ft_transfer(
        self,
        contract_id: str,
        receiver_id: str,
        amount: int,
        memo: Optional[str],
        attached_deposit: int,
        gas: int,
    ) -> bool:
        ...


@dataclass(slots=True)
class TransferReport:
    completed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.completed) + len(self.failed)


def _deliver(request: TransferRequest, service: TransferService) -> bool:
    if request.kind is TransferKind.TOKEN:
        return service.ft_transfer(
            request.contract_id or "",
            request.receiver_id,
            request.amount,
            request.memo,
            request.attached_deposit,
            request.gas,
        )
    return service.send_payment(request.receiver_id, request.amount)


def process_pending_transfers(
    state: SaleState,
    service: TransferService,
    limit: Optional[int] = None,
) -> TransferReport:
    """
    Deliver pending transfer requests in the order they were queued.

    The caller must hold the store transaction for `state`; see `drain_outbox`.

    A service exception counts as a failed delivery; it is logged and the
    request is resolved as failed so a token claim is restored.

    Args:
        state: sale state owning the outbox
        service: delivery backend
        limit: maximum number of requests to process (all when None)
    """
    report = TransferReport()
    pending = state.outbox.pending()
    if limit is not None:
        pending = pending[:limit]

    for request in pending:
        try:
            succeeded = bool(_deliver(request, service))
        except Exception:
            logger.exception(
                "Transfer delivery raised for request %s (%s to %s)",
                request.request_id,
                request.kind.value,
                request.receiver_id,
            )
            succeeded = False

        resolve_transfer(state, request.request_id, succeeded)
        if succeeded:
            report.completed.append(request.request_id)
        else:
            report.failed.append(request.request_id)

    logger.info(
        "Transfer worker processed %s requests (%s completed, %s failed)",
        report.processed,
        len(report.completed),
        len(report.failed),
    )
    return report


def drain_outbox(
    store: SaleStateStore,
    service: TransferService,
    limit: Optional[int] = None,
) -> TransferReport:
    """Process pending transfers inside one store transaction and persist the outcome."""
    with store.transaction() as state:
        return process_pending_transfers(state, service, limit)


__all__ = [
    "TransferService",
    "TransferReport",
    "process_pending_transfers",
    "drain_outbox",
]
