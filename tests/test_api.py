"""
HTTP API tests.

Each test gets a fresh in-memory store, a controllable block clock and
settings with a storage price of one currency unit per byte.
"""

from __future__ import annotations

from typing import Dict, Iterator

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_block_timestamp_ns, get_sale_settings, get_store
from api.main import app
from conftest import END, OWNER, PRICE, START, TOKEN, TREASURY
from domain.ledger import entry_storage_bytes
from domain.sale_config import DEFAULT_START_TIME, DEFAULT_UNIT_PRICE
from services.settings import SaleSettings
from services.state_store import SaleStateStore


class Clock:
    def __init__(self, seconds: int = START):
        self.seconds = seconds

    def ns(self) -> int:
        return self.seconds * 10**9


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def client(clock: Clock) -> Iterator[TestClient]:
    store = SaleStateStore()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_block_timestamp_ns] = clock.ns
    app.dependency_overrides[get_sale_settings] = lambda: SaleSettings(storage_byte_price=1)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _headers(caller_id: str, deposit: int = 0) -> Dict[str, str]:
    return {"X-Caller-Id": caller_id, "X-Attached-Deposit": str(deposit)}


def _initialize(client: TestClient) -> None:
    response = client.post(
        "/api/v1/sale/initialize",
        json={
            "owner_id": OWNER,
            "treasury_id": TREASURY,
            "token_contract_id": TOKEN,
            "unit_price": PRICE,
            "start_time": START,
            "end_time": END,
            "total_sale_cap": 1_000,
        },
    )
    assert response.status_code == 200, response.text


def _buy(client: TestClient, account: str, units: int, deposit: int):
    return client.post(
        "/api/v1/sale/buy",
        json={"account_id": account, "token_amount": units},
        headers=_headers(account, deposit),
    )


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_queries_before_initialize(client: TestClient) -> None:
    response = client.get("/api/v1/sale/status")

    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "NotInitialized"


def test_initialize_with_defaults(client: TestClient) -> None:
    response = client.post("/api/v1/sale/initialize", json={"owner_id": OWNER})

    assert response.status_code == 200
    body = response.json()
    assert body["owner_id"] == OWNER
    assert body["unit_price"] == DEFAULT_UNIT_PRICE
    assert body["start_time"] == DEFAULT_START_TIME


def test_initialize_is_one_time(client: TestClient) -> None:
    _initialize(client)

    response = client.post("/api/v1/sale/initialize", json={"owner_id": "other.near"})

    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "AlreadyInitialized"


def test_read_queries(client: TestClient) -> None:
    _initialize(client)

    assert client.get("/api/v1/sale/window").json() == {"start_time": START, "end_time": END}
    assert client.get("/api/v1/sale/price").json() == {"unit_price": PRICE}
    assert client.get("/api/v1/sale/status").json() == {"current_sale": 0, "total_sale_cap": 1_000}
    assert client.get("/api/v1/sale/purchases/nobody.near").json() == {
        "account_id": "nobody.near",
        "units": 0,
    }


def test_buy_returns_refund(client: TestClient) -> None:
    """Verify price 100, attach 1000, buy 5: refund of 1000 minus storage to the treasury."""

    _initialize(client)

    response = _buy(client, "alice.near", 5, 1_000)

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["required_payment"] == 500
    assert body["storage_cost"] == entry_storage_bytes("alice.near")
    assert body["refund"]["receiver_id"] == TREASURY
    assert body["refund"]["amount"] == 1_000 - entry_storage_bytes("alice.near")
    assert client.get("/api/v1/sale/purchases/alice.near").json()["units"] == 5


def test_buy_error_statuses(client: TestClient, clock: Clock) -> None:
    _initialize(client)

    insufficient = _buy(client, "alice.near", 5, 499)
    assert insufficient.status_code == 402
    assert insufficient.json()["detail"]["error"] == "InsufficientPayment"

    over_cap = _buy(client, "alice.near", 1_001, 10**6)
    assert over_cap.status_code == 409
    assert over_cap.json()["detail"]["error"] == "SaleCapExceeded"

    clock.seconds = END
    closed = _buy(client, "alice.near", 1, 1_000)
    assert closed.status_code == 409
    assert closed.json()["detail"]["error"] == "SaleWindowClosed"

    assert client.get("/api/v1/sale/status").json()["current_sale"] == 0


def test_call_context_headers_validated(client: TestClient) -> None:
    _initialize(client)

    missing_caller = client.post("/api/v1/sale/buy", json={"account_id": "alice.near", "token_amount": 1})
    assert missing_caller.status_code == 422

    negative = _buy(client, "alice.near", 1, -5)
    assert negative.status_code == 400


def test_buy_claim_resolve_flow(client: TestClient, clock: Clock) -> None:
    """Walk through purchase, refund delivery, claim, failed transfer and re-claim."""

    _initialize(client)
    _buy(client, "alice.near", 3, 1_000)
    _buy(client, "bob.near", 7, 1_000)

    pending = client.get("/api/v1/transfers/pending", headers=_headers(OWNER)).json()
    assert pending["total_count"] == 2
    for item in pending["items"]:
        assert item["kind"] == "native"
        resolved = client.post(
            f"/api/v1/transfers/{item['request_id']}/resolve", json={"succeeded": True}, headers=_headers(OWNER)
        )
        assert resolved.status_code == 200

    early = client.post("/api/v1/sale/claim", headers=_headers("alice.near", 1))
    assert early.status_code == 409
    assert early.json()["detail"]["error"] == "ClaimWindowClosed"

    clock.seconds = END
    no_deposit = client.post("/api/v1/sale/claim", headers=_headers("alice.near", 0))
    assert no_deposit.status_code == 402

    claimed = client.post("/api/v1/sale/claim", headers=_headers("alice.near", 1))
    assert claimed.status_code == 200, claimed.text
    claim_body = claimed.json()
    assert claim_body["units"] == 3
    assert claim_body["token_amount"] == 3 * 10**18
    assert claim_body["token_contract_id"] == TOKEN

    assert client.get("/api/v1/sale/purchases/alice.near").json()["units"] == 0
    assert client.get("/api/v1/sale/status").json()["current_sale"] == 10

    again = client.post("/api/v1/sale/claim", headers=_headers("alice.near", 1))
    assert again.status_code == 404
    assert again.json()["detail"]["error"] == "NothingToClaim"

    token_transfers = client.get("/api/v1/transfers/pending", headers=_headers(OWNER)).json()["items"]
    assert [t["kind"] for t in token_transfers] == ["token"]
    assert token_transfers[0]["contract_id"] == TOKEN

    failed = client.post(
        f"/api/v1/transfers/{claim_body['request_id']}/resolve", json={"succeeded": False}, headers=_headers(OWNER)
    )
    assert failed.status_code == 200
    assert failed.json()["restored_units"] == 3
    assert client.get("/api/v1/sale/purchases/alice.near").json()["units"] == 3

    retry = client.post("/api/v1/sale/claim", headers=_headers("alice.near", 1))
    assert retry.status_code == 200


def test_resolve_unknown_transfer(client: TestClient) -> None:
    _initialize(client)

    response = client.post("/api/v1/transfers/missing/resolve", json={"succeeded": True}, headers=_headers(OWNER))

    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "UnknownTransfer"


def test_admin_endpoints(client: TestClient) -> None:
    _initialize(client)

    denied = client.put("/api/v1/admin/unit-price", json={"unit_price": 1}, headers=_headers("mallory.near"))
    assert denied.status_code == 403
    assert denied.json()["detail"]["detail"] == "Owner's method"
    assert client.get("/api/v1/sale/price").json()["unit_price"] == PRICE

    updated = client.put("/api/v1/admin/unit-price", json={"unit_price": 7}, headers=_headers(OWNER))
    assert updated.status_code == 200
    assert updated.json()["unit_price"] == 7

    moved = client.put("/api/v1/admin/end-time", json={"timestamp": 5_000}, headers=_headers(OWNER))
    assert moved.json()["end_time"] == 5_000

    handover = client.put("/api/v1/admin/owner", json={"account_id": "new.near"}, headers=_headers(OWNER))
    assert handover.json()["owner_id"] == "new.near"

    stale = client.put("/api/v1/admin/treasury", json={"account_id": "x.near"}, headers=_headers(OWNER))
    assert stale.status_code == 403


def _claim_after_sale(client: TestClient, clock: Clock) -> str:
    _initialize(client)
    _buy(client, "alice.near", 3, 1_000)
    clock.seconds = END
    claimed = client.post("/api/v1/sale/claim", headers=_headers("alice.near", 1))
    assert claimed.status_code == 200, claimed.text
    return claimed.json()["request_id"]


@pytest.mark.parametrize("caller", ["alice.near", "mallory.near"])
def test_resolve_rejects_other_callers(client: TestClient, clock: Clock, caller: str) -> None:
    """Verify only the owner or executor can report a transfer failed; the claim stays pending."""

    request_id = _claim_after_sale(client, clock)

    denied = client.post(
        f"/api/v1/transfers/{request_id}/resolve", json={"succeeded": False}, headers=_headers(caller)
    )

    assert denied.status_code == 403
    assert denied.json()["detail"]["error"] == "Unauthorized"
    assert client.get("/api/v1/sale/purchases/alice.near").json()["units"] == 0

    second = client.post("/api/v1/sale/claim", headers=_headers("alice.near", 1))
    assert second.status_code == 404
    assert client.get("/api/v1/transfers/pending", headers=_headers(OWNER)).json()["total_count"] == 2


def test_transfer_endpoints_require_caller(client: TestClient, clock: Clock) -> None:
    request_id = _claim_after_sale(client, clock)

    assert client.get("/api/v1/transfers/pending").status_code == 422
    assert client.get("/api/v1/transfers/pending", headers=_headers("mallory.near")).status_code == 403
    assert client.post(f"/api/v1/transfers/{request_id}/resolve", json={"succeeded": False}).status_code == 422


def test_configured_executor_may_resolve(client: TestClient, clock: Clock) -> None:
    app.dependency_overrides[get_sale_settings] = lambda: SaleSettings(
        storage_byte_price=1, transfer_executor_id="relayer.near"
    )
    request_id = _claim_after_sale(client, clock)

    pending = client.get("/api/v1/transfers/pending", headers=_headers("relayer.near"))
    assert pending.status_code == 200

    settled = client.post(
        f"/api/v1/transfers/{request_id}/resolve", json={"succeeded": True}, headers=_headers("relayer.near")
    )
    assert settled.status_code == 200
    assert settled.json()["restored_units"] == 0
