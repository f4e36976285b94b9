"""
Tests for `services/settings.py` and `services/state_store.py`.
"""

from __future__ import annotations

import pytest

from conftest import OWNER, START, TREASURY, at
from domain.errors import AlreadyInitializedError, NotInitializedError, UnauthorizedError
from domain.escrow import RefundDestination, RefundFormula
from domain.time_gate import WindowMode
from services.admin_service import set_unit_price
from services.purchase_service import PurchaseRequest, execute_purchase
from services.settings import SaleSettings, StateBackend, load_settings
from services.state_store import SaleStateStore


def test_empty_environment_uses_defaults() -> None:
    assert load_settings({}) == SaleSettings()


def test_defaults_match_deployed_sale() -> None:
    settings = SaleSettings()

    assert settings.window_mode is WindowMode.CONVENTIONAL
    assert settings.refund_policy.destination is RefundDestination.TREASURY
    assert settings.refund_policy.formula is RefundFormula.GROSS
    assert settings.refund_policy.dust_threshold == 1
    assert settings.token_scale == 10**18
    assert settings.ft_transfer_gas == 5 * 10**12
    assert settings.state_backend is StateBackend.MEMORY
    assert settings.transfer_executor_id is None


def test_environment_overrides() -> None:
    settings = load_settings(
        {
            "SALE_WINDOW_MODE": "Legacy",
            "SALE_REFUND_DESTINATION": "payer",
            "SALE_REFUND_FORMULA": "excess",
            "SALE_REFUND_DUST_THRESHOLD": "0",
            "SALE_STORAGE_BYTE_PRICE": "1",
            "SALE_TOKEN_DECIMALS": " 6 ",
            "SALE_CLAIM_DEPOSIT": "",
            "SALE_STATE_BACKEND": "supabase",
            "SALE_TRANSFER_EXECUTOR_ID": " relayer.near ",
        }
    )

    assert settings.window_mode is WindowMode.LEGACY
    assert settings.refund_destination is RefundDestination.PAYER
    assert settings.refund_formula is RefundFormula.EXCESS
    assert settings.refund_dust_threshold == 0
    assert settings.storage_byte_price == 1
    assert settings.token_scale == 10**6
    assert settings.claim_deposit == 1
    assert settings.state_backend is StateBackend.SUPABASE
    assert settings.transfer_executor_id == "relayer.near"


@pytest.mark.parametrize(
    "name, value",
    [
        ("SALE_WINDOW_MODE", "sometimes"),
        ("SALE_REFUND_FORMULA", "net"),
        ("SALE_STORAGE_BYTE_PRICE", "cheap"),
        ("SALE_TOKEN_DECIMALS", "-1"),
    ],
)
def test_invalid_values_name_the_variable(name: str, value: str) -> None:
    with pytest.raises(ValueError, match=name):
        load_settings({name: value})


def test_store_requires_initialization() -> None:
    store = SaleStateStore()

    assert store.is_initialized is False
    with pytest.raises(NotInitializedError):
        with store.transaction():
            pass


def test_store_initializes_once() -> None:
    store = SaleStateStore()
    store.initialize(OWNER, start_time=1_000, end_time=2_000)

    with pytest.raises(AlreadyInitializedError):
        store.initialize("someone-else.near")

    with store.read() as state:
        assert state.config.owner_id == OWNER


def test_store_persists_only_successful_transactions() -> None:
    """Verify the persister runs after a clean transaction and not after a rejection."""

    saved = []
    store = SaleStateStore(persister=saved.append)
    store.initialize(OWNER)
    assert len(saved) == 1

    with store.transaction() as state:
        set_unit_price(state, at(START, OWNER), 5)
    assert len(saved) == 2

    with pytest.raises(UnauthorizedError):
        with store.transaction() as state:
            set_unit_price(state, at(START, "mallory.near"), 1)
    assert len(saved) == 2


def test_teardown_allows_reinitialize() -> None:
    store = SaleStateStore()
    store.initialize(OWNER)
    store.teardown()

    assert store.is_initialized is False
    store.initialize(OWNER)
    assert store.is_initialized is True


def test_failed_save_rolls_back_operation() -> None:
    """Verify a purchase whose snapshot cannot be saved leaves no ledger entry or refund behind."""

    class FlakyPersister:
        def __init__(self) -> None:
            self.fail = False

        def __call__(self, state) -> None:
            if self.fail:
                raise RuntimeError("Failed to save purchases: connection reset")

    persister = FlakyPersister()
    store = SaleStateStore(persister=persister)
    store.initialize(OWNER, treasury_id=TREASURY, unit_price=100, start_time=1_000, end_time=2_000)
    persister.fail = True

    with pytest.raises(RuntimeError):
        with store.transaction() as state:
            execute_purchase(
                state,
                at(START, "alice.near", 1_000),
                PurchaseRequest(account_id="alice.near", token_amount=5),
                SaleSettings(storage_byte_price=1),
            )

    with store.read() as state:
        assert state.ledger.peek("alice.near") == 0
        assert state.ledger.current_sale == 0
        assert state.outbox.requests == ()

    persister.fail = False
    with store.transaction() as state:
        set_unit_price(state, at(START, OWNER), 5)
    with store.read() as state:
        assert state.config.unit_price == 5
