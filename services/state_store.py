"""
In-process owner of the sale state.

Operations on one sale must not interleave. The store serializes them with a
re-entrant lock and, when a persister is configured, saves the state after
every operation that completed without raising. An operation whose save fails
is rolled back in memory.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from domain.errors import AlreadyInitializedError, NotInitializedError
from domain.state import SaleState
from services.sale_service import initialize_sale

logger = logging.getLogger(__name__)

Persister = Callable[[SaleState], None]


class SaleStateStore:
    def __init__(
        self,
        state: Optional[SaleState] = None,
        persister: Optional[Persister] = None,
    ) -> None:
        self._state = state
        self._persister = persister
        self._lock = threading.RLock()

    @property
    def is_initialized(self) -> bool:
        return self._state is not None

    def initialize(self, owner_id: str, **overrides: Any) -> SaleState:
        """
        One-time initialization.

        Raises:
            AlreadyInitializedError: the store already holds a sale
        """
        with self._lock:
            if self._state is not None:
                raise AlreadyInitializedError()
            state = initialize_sale(owner_id, **overrides)
            self._save(state)
            self._state = state
            return state

    def teardown(self) -> None:
        """Drop the in-memory sale (persisted data is left as is)."""
        with self._lock:
            self._state = None

    @contextmanager
    def transaction(self) -> Iterator[SaleState]:
        """
        Run one operation against the state under the lock.

        The state is persisted only when the block exits without an exception.
        If the block or the save raises, config, ledger and outbox are put back
        to their values at entry, so a failed operation leaves no trace.
        """
        with self._lock:
            state = self._state
            if state is None:
                raise NotInitializedError()
            config, ledger, outbox = state.config, state.ledger, state.outbox
            try:
                yield state
                self._save(state)
            except Exception:
                state.commit(config=config, ledger=ledger, outbox=outbox)
                raise

    @contextmanager
    def read(self) -> Iterator[SaleState]:
        with self._lock:
            if self._state is None:
                raise NotInitializedError()
            yield self._state

    def _save(self, state: SaleState) -> None:
        if self._persister is not None:
            self._persister(state)
            logger.debug("Sale state persisted")


__all__ = ["SaleStateStore"]
