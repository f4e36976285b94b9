"""
Sale state repository (persistence).

Snapshots the sale state into Supabase and restores it. It does not enforce
business rules; it only writes and reads rows.

Tables:
- sale_config: single row (id = 1) with configuration and aggregate counters
- purchases: account_id, units
- pending_claims: one row per unresolved token transfer claim
- transfer_requests: the outbox, in queue order (seq)

Amounts that may exceed 64 bits (prices, deposits, token amounts) are stored
as decimal strings.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from domain.ledger import PendingClaim, PurchaseLedger
from domain.sale_config import SaleConfig
from domain.state import SaleState
from domain.transfers import TransferKind, TransferOutbox, TransferRequest, TransferStatus

_CONFIG_TABLE: str = "sale_config"
_PURCHASES_TABLE: str = "purchases"
_PENDING_CLAIMS_TABLE: str = "pending_claims"
_TRANSFERS_TABLE: str = "transfer_requests"

_CONFIG_ROW_ID: int = 1


def _default_client() -> Any:
    from repositories.client import supabase

    return supabase


def _check(response: Any, action: str) -> List[Mapping[str, Any]]:
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to {action}: {error}")
    return getattr(response, "data", None) or []


def _config_to_row(state: SaleState) -> dict[str, Any]:
    config = state.config
    return {
        "id": _CONFIG_ROW_ID,
        "owner_id": config.owner_id,
        "treasury_id": config.treasury_id,
        "token_contract_id": config.token_contract_id,
        "unit_price": str(config.unit_price),
        "start_time": config.start_time,
        "end_time": config.end_time,
        "total_sale_cap": config.total_sale_cap,
        "current_sale": state.ledger.current_sale,
        "claimed_units": state.ledger.claimed_units,
        "updated_at_utc": datetime.now(timezone.utc).isoformat(),
    }


def _row_to_config(row: Mapping[str, Any]) -> SaleConfig:
    return SaleConfig(
        owner_id=str(row["owner_id"]),
        treasury_id=str(row["treasury_id"]),
        token_contract_id=str(row["token_contract_id"]),
        unit_price=int(row["unit_price"]),
        start_time=int(row["start_time"]),
        end_time=int(row["end_time"]),
        total_sale_cap=int(row["total_sale_cap"]),
    )


def _claim_to_row(claim: PendingClaim) -> dict[str, Any]:
    return {
        "request_id": claim.request_id,
        "account_id": claim.account_id,
        "units": claim.units,
        "token_amount": str(claim.token_amount),
        "requested_at": claim.requested_at,
    }


def _row_to_claim(row: Mapping[str, Any]) -> PendingClaim:
    return PendingClaim(
        request_id=str(row["request_id"]),
        account_id=str(row["account_id"]),
        units=int(row["units"]),
        token_amount=int(row["token_amount"]),
        requested_at=int(row["requested_at"]),
    )


def _transfer_to_row(request: TransferRequest, seq: int) -> dict[str, Any]:
    return {
        "request_id": request.request_id,
        "seq": seq,
        "kind": request.kind.value,
        "receiver_id": request.receiver_id,
        "amount": str(request.amount),
        "created_at": request.created_at,
        "contract_id": request.contract_id,
        "attached_deposit": str(request.attached_deposit),
        "gas": request.gas,
        "memo": request.memo,
        "status": request.status.value,
    }


def _row_to_transfer(row: Mapping[str, Any]) -> TransferRequest:
    return TransferRequest(
        request_id=str(row["request_id"]),
        kind=TransferKind(str(row["kind"])),
        receiver_id=str(row["receiver_id"]),
        amount=int(row["amount"]),
        created_at=int(row["created_at"]),
        contract_id=row.get("contract_id"),
        attached_deposit=int(row.get("attached_deposit") or 0),
        gas=int(row.get("gas") or 0),
        memo=row.get("memo"),
        status=TransferStatus(str(row["status"])),
    )


def _sync_rows(client: Any, table: str, key: str, rows: List[Mapping[str, Any]], label: str) -> None:
    """Upsert `rows` by `key`, then delete the rows whose key is no longer present."""

    if rows:
        _check(client.table(table).upsert(rows, on_conflict=key).execute(), f"save {label}")

    stored = _check(client.table(table).select(key).execute(), f"load {label} keys")
    removed = sorted({str(row[key]) for row in stored} - {str(row[key]) for row in rows})
    if removed:
        _check(client.table(table).delete().in_(key, removed).execute(), f"remove stale {label}")


def save_sale_state(state: SaleState, client: Any = None) -> None:
    """
    Write a full snapshot of the sale state.

    Rows are upserted by key and only keys no longer in the state are deleted,
    so a failed write never drops rows that are still live. Transfer requests
    are never deleted: resolved ones keep their history. The config row, which
    carries the aggregate counters, is written last.
    """

    client = client or _default_client()

    transfer_rows = [
        _transfer_to_row(request, seq) for seq, request in enumerate(state.outbox.requests)
    ]
    if transfer_rows:
        _check(
            client.table(_TRANSFERS_TABLE).upsert(transfer_rows, on_conflict="request_id").execute(),
            "save transfer requests",
        )

    _sync_rows(
        client,
        _PENDING_CLAIMS_TABLE,
        "request_id",
        [_claim_to_row(claim) for claim in state.ledger.pending_claims()],
        "pending claims",
    )
    _sync_rows(
        client,
        _PURCHASES_TABLE,
        "account_id",
        [
            {"account_id": account_id, "units": units}
            for account_id, units in state.ledger.entries().items()
        ],
        "purchases",
    )

    _check(
        client.table(_CONFIG_TABLE).upsert(_config_to_row(state)).execute(),
        "save sale config",
    )


def load_sale_state(client: Any = None) -> Optional[SaleState]:
    """
    Restore the sale state.

    Returns:
        SaleState or None if no sale has been initialized
    """

    client = client or _default_client()

    config_rows = _check(
        client.table(_CONFIG_TABLE).select("*").eq("id", _CONFIG_ROW_ID).limit(1).execute(),
        "load sale config",
    )
    if not config_rows:
        return None
    config_row = config_rows[0]

    purchase_rows = _check(
        client.table(_PURCHASES_TABLE).select("*").execute(), "load purchases"
    )
    claim_rows = _check(
        client.table(_PENDING_CLAIMS_TABLE).select("*").execute(), "load pending claims"
    )
    transfer_rows = _check(
        client.table(_TRANSFERS_TABLE).select("*").execute(), "load transfer requests"
    )

    claims = [_row_to_claim(row) for row in claim_rows]
    ledger = PurchaseLedger(
        _entries={str(row["account_id"]): int(row["units"]) for row in purchase_rows},
        _pending={claim.request_id: claim for claim in claims},
        current_sale=int(config_row["current_sale"]),
        claimed_units=int(config_row.get("claimed_units") or 0),
    )
    ordered = sorted(transfer_rows, key=lambda row: int(row["seq"]))
    outbox = TransferOutbox(requests=tuple(_row_to_transfer(row) for row in ordered))

    return SaleState(config=_row_to_config(config_row), ledger=ledger, outbox=outbox)


__all__ = [
    "save_sale_state",
    "load_sale_state",
]
