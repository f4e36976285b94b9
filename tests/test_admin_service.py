"""
Tests for `services/admin_service.py`.

Covers rules:
- Only the current owner may change configuration.
- A rejected change leaves the configuration unchanged.
- Ownership can be handed over; the old owner loses access.
- Window changes take effect for the next purchase.
"""

from __future__ import annotations

import pytest

from conftest import END, OWNER, START, at
from domain.errors import SaleWindowClosedError, UnauthorizedError
from domain.state import SaleState
from services.admin_service import (
    assert_transfer_executor,
    set_end_time,
    set_owner,
    set_start_time,
    set_token_contract,
    set_treasury,
    set_unit_price,
)
from services.purchase_service import PurchaseRequest, execute_purchase
from services.sale_service import get_unit_price, get_window
from services.settings import SaleSettings


@pytest.mark.parametrize(
    "setter, value, field",
    [
        (set_token_contract, "other-token.near", "token_contract_id"),
        (set_treasury, "vault.near", "treasury_id"),
        (set_start_time, 1_500, "start_time"),
        (set_end_time, 3_000, "end_time"),
        (set_unit_price, 250, "unit_price"),
    ],
)
def test_owner_updates_config(state: SaleState, setter, value, field: str) -> None:
    config = setter(state, at(START, OWNER), value)

    assert getattr(config, field) == value
    assert getattr(state.config, field) == value


@pytest.mark.parametrize(
    "setter, value",
    [
        (set_token_contract, "evil-token.near"),
        (set_owner, "mallory.near"),
        (set_treasury, "mallory.near"),
        (set_start_time, 0),
        (set_end_time, 0),
        (set_unit_price, 0),
    ],
)
def test_non_owner_rejected(state: SaleState, setter, value) -> None:
    """Verify non-owners get Unauthorized and the config object is untouched."""

    config_before = state.config

    with pytest.raises(UnauthorizedError) as exc_info:
        setter(state, at(START, "mallory.near"), value)

    assert str(exc_info.value) == "Owner's method"
    assert exc_info.value.code == "Unauthorized"
    assert state.config is config_before


def test_owner_handover(state: SaleState) -> None:
    set_owner(state, at(START, OWNER), "new-owner.near")

    assert state.config.owner_id == "new-owner.near"
    with pytest.raises(UnauthorizedError):
        set_unit_price(state, at(START, OWNER), 1)

    set_unit_price(state, at(START, "new-owner.near"), 1)
    assert get_unit_price(state) == 1


def test_window_change_applies_to_next_purchase(state: SaleState, settings: SaleSettings) -> None:
    """Verify moving end_time closes the sale for later purchases."""

    set_end_time(state, at(START, OWNER), START + 10)
    assert get_window(state).end_time == START + 10

    with pytest.raises(SaleWindowClosedError):
        execute_purchase(
            state,
            at(START + 10, "alice.near", 1_000),
            PurchaseRequest(account_id="alice.near", token_amount=1),
            settings,
        )


def test_price_change_applies_to_next_purchase(state: SaleState, settings: SaleSettings) -> None:
    set_unit_price(state, at(START, OWNER), 7)

    result = execute_purchase(
        state,
        at(START, "alice.near", 1_000),
        PurchaseRequest(account_id="alice.near", token_amount=3),
        settings,
    )

    assert result.required_payment == 21
    assert get_window(state).end_time == END


def test_transfer_executor_check(state: SaleState) -> None:
    """Verify the owner and the configured executor pass; everyone else is rejected."""

    assert_transfer_executor(state, at(END, OWNER))
    assert_transfer_executor(state, at(END, "relayer.near"), "relayer.near")

    with pytest.raises(UnauthorizedError):
        assert_transfer_executor(state, at(END, "relayer.near"))
    with pytest.raises(UnauthorizedError):
        assert_transfer_executor(state, at(END, "alice.near"), "relayer.near")
