"""
Domain: Sale state.

The complete state of one sale: configuration, purchase ledger and transfer
outbox. Each component is immutable; an operation prepares new components and
assigns them through `commit` only once every check has passed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .ledger import PurchaseLedger
from .sale_config import SaleConfig
from .transfers import TransferOutbox


@dataclass(slots=True)
class SaleState:
    config: SaleConfig
    ledger: PurchaseLedger = field(default_factory=PurchaseLedger.empty)
    outbox: TransferOutbox = field(default_factory=TransferOutbox)

    def commit(
        self,
        *,
        config: Optional[SaleConfig] = None,
        ledger: Optional[PurchaseLedger] = None,
        outbox: Optional[TransferOutbox] = None,
    ) -> None:
        if config is not None:
            self.config = config
        if ledger is not None:
            self.ledger = ledger
        if outbox is not None:
            self.outbox = outbox
