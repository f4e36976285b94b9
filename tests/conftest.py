"""
Pytest configuration.

Adds the project root to the Python path so tests can import domain,
services, repositories and api, and provides a small sale fixture set:
a sale window of [1_000, 2_000) seconds and a unit price of 100.
"""

import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.context import CallContext  # noqa: E402
from domain.state import SaleState  # noqa: E402
from services.sale_service import initialize_sale  # noqa: E402
from services.settings import SaleSettings  # noqa: E402

OWNER = "owner.near"
TREASURY = "treasury.near"
TOKEN = "token.near"
START = 1_000
END = 2_000
PRICE = 100


def at(seconds: int, caller_id: str, attached_deposit: int = 0) -> CallContext:
    """Call context at a whole-second block time."""
    return CallContext(
        caller_id=caller_id,
        attached_deposit=attached_deposit,
        block_timestamp_ns=seconds * 10**9,
    )


@pytest.fixture
def settings() -> SaleSettings:
    # One currency unit per storage byte keeps refund arithmetic readable.
    return SaleSettings(storage_byte_price=1)


@pytest.fixture
def state() -> SaleState:
    return initialize_sale(
        OWNER,
        treasury_id=TREASURY,
        token_contract_id=TOKEN,
        unit_price=PRICE,
        start_time=START,
        end_time=END,
        total_sale_cap=1_000,
    )
