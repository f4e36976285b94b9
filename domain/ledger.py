"""
Domain: Purchase ledger.

Rules implemented here:
- One entry per account: account_id -> purchased units (unsigned 64-bit).
- An entry is absent until the first purchase and is never stored with 0 units.
- Purchases create or increment entries and increment current_sale.
- Claims take the whole entry. The units move into a pending claim until the
  token transfer is resolved: confirmed units count as claimed, failed ones go
  back to the account.
- current_sale is never decremented by a claim.

Conservation:
    current_sale == sum(entries) + sum(pending units) + claimed_units

This module contains only pure domain entities: no I/O, no frameworks.
Transitions return new instances; prior ledgers are unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Tuple

from .escrow import U64_MAX
from .errors import InvalidQuantityError, UnknownTransferError

# Storage accounting for one persisted entry. The host charges a fixed
# per-record overhead plus the bytes of the serialized key and value.
RECORD_OVERHEAD_BYTES: int = 40
COLLECTION_PREFIX_BYTES: int = 1
KEY_LENGTH_PREFIX_BYTES: int = 4
VALUE_BYTES: int = 8


def entry_storage_bytes(account_id: str) -> int:
    """Bytes a ledger entry for `account_id` occupies in persistent storage."""

    return (
        RECORD_OVERHEAD_BYTES
        + COLLECTION_PREFIX_BYTES
        + KEY_LENGTH_PREFIX_BYTES
        + len(account_id.encode("utf-8"))
        + VALUE_BYTES
    )


@dataclass(frozen=True, slots=True)
class PendingClaim:
    """Units taken from an account whose token transfer has not been resolved."""

    request_id: str
    account_id: str
    units: int
    token_amount: int
    requested_at: int


@dataclass(frozen=True, slots=True)
class PurchaseLedger:
    _entries: Mapping[str, int] = field(default_factory=dict)
    _pending: Mapping[str, PendingClaim] = field(default_factory=dict)
    current_sale: int = 0
    claimed_units: int = 0

    @staticmethod
    def empty() -> "PurchaseLedger":
        return PurchaseLedger(_entries={}, _pending={})

    def peek(self, account_id: str) -> int:
        return self._entries.get(account_id, 0)

    def entries(self) -> Dict[str, int]:
        return dict(self._entries)

    def pending_claims(self) -> List[PendingClaim]:
        return list(self._pending.values())

    def get_pending(self, request_id: str) -> PendingClaim | None:
        return self._pending.get(request_id)

    def storage_usage(self) -> int:
        """Bytes of persistent storage currently held by ledger entries."""

        return sum(entry_storage_bytes(account_id) for account_id in self._entries)

    def is_conserved(self) -> bool:
        outstanding = sum(self._entries.values()) + sum(c.units for c in self._pending.values())
        return self.current_sale == outstanding + self.claimed_units

    def record_purchase(self, account_id: str, units: int) -> "PurchaseLedger":
        """
        Add `units` to the account's entry (creating it if absent).

        The caller validates the purchase first and only then keeps the
        returned ledger, so a rejected purchase never touches this one.
        """

        if units <= 0:
            raise InvalidQuantityError("token amount must be at least 1")

        total = self._entries.get(account_id, 0) + units
        if total > U64_MAX or self.current_sale + units > U64_MAX:
            raise InvalidQuantityError("token amount does not fit an unsigned 64-bit counter")

        updated: Dict[str, int] = dict(self._entries)
        updated[account_id] = total
        return PurchaseLedger(
            _entries=updated,
            _pending=self._pending,
            current_sale=self.current_sale + units,
            claimed_units=self.claimed_units,
        )

    def take_all(self, account_id: str) -> Tuple["PurchaseLedger", int]:
        """
        Remove the account's entry and return its units.

        Returns (self, 0) when no entry exists; callers treat that as a failure.
        """

        units = self._entries.get(account_id)
        if units is None:
            return self, 0

        updated: Dict[str, int] = dict(self._entries)
        del updated[account_id]
        return (
            PurchaseLedger(
                _entries=updated,
                _pending=self._pending,
                current_sale=self.current_sale,
                claimed_units=self.claimed_units,
            ),
            units,
        )

    def hold_claim(self, claim: PendingClaim) -> "PurchaseLedger":
        """Track units already taken from an entry until their transfer resolves."""

        if claim.request_id in self._pending:
            raise ValueError(f"Claim already pending: {claim.request_id}")

        pending: Dict[str, PendingClaim] = dict(self._pending)
        pending[claim.request_id] = claim
        return PurchaseLedger(
            _entries=self._entries,
            _pending=pending,
            current_sale=self.current_sale,
            claimed_units=self.claimed_units,
        )

    def settle_claim(self, request_id: str) -> Tuple["PurchaseLedger", PendingClaim]:
        """The token transfer succeeded: the pending units become claimed."""

        claim = self._pending.get(request_id)
        if claim is None:
            raise UnknownTransferError(request_id)

        pending: Dict[str, PendingClaim] = dict(self._pending)
        del pending[request_id]
        return (
            PurchaseLedger(
                _entries=self._entries,
                _pending=pending,
                current_sale=self.current_sale,
                claimed_units=self.claimed_units + claim.units,
            ),
            claim,
        )

    def release_claim(self, request_id: str) -> Tuple["PurchaseLedger", PendingClaim]:
        """
        The token transfer failed: the pending units return to the account.

        A recreated entry is not metered again. Its storage was charged at
        purchase time and taking the entry refunded none of it, so the restored
        entry occupies bytes the buyer already paid for.
        """

        claim = self._pending.get(request_id)
        if claim is None:
            raise UnknownTransferError(request_id)

        pending: Dict[str, PendingClaim] = dict(self._pending)
        del pending[request_id]
        entries: Dict[str, int] = dict(self._entries)
        entries[claim.account_id] = entries.get(claim.account_id, 0) + claim.units
        return (
            PurchaseLedger(
                _entries=entries,
                _pending=pending,
                current_sale=self.current_sale,
                claimed_units=self.claimed_units,
            ),
            claim,
        )
