"""
Sale engine settings.

Values are read from the environment (a `.env` file at the project root is
loaded first). Every setting has a default matching the deployed sale, so an
empty environment reproduces its behavior apart from the corrected windows.

Environment variables:
- SALE_WINDOW_MODE: conventional | legacy
- SALE_REFUND_DESTINATION: treasury | payer
- SALE_REFUND_FORMULA: gross | excess
- SALE_REFUND_DUST_THRESHOLD: refunds at or below this are not paid
- SALE_STORAGE_BYTE_PRICE: currency units charged per byte of new storage
- SALE_TOKEN_DECIMALS: token units per sale unit = 10 ** decimals
- SALE_FT_TRANSFER_GAS: gas budget attached to each token transfer
- SALE_CLAIM_DEPOSIT: minimal deposit a claim must attach
- SALE_STATE_BACKEND: memory | supabase
- SALE_TRANSFER_EXECUTOR_ID: account allowed, besides the owner, to report transfer outcomes
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional, Type, TypeVar

from dotenv import load_dotenv

from domain.escrow import DEFAULT_DUST_THRESHOLD, RefundDestination, RefundFormula, RefundPolicy
from domain.time_gate import WindowMode

E = TypeVar("E", bound=Enum)

env_path = Path(__file__).parent.parent / ".env"


class StateBackend(str, Enum):
    MEMORY = "memory"
    SUPABASE = "supabase"


@dataclass(frozen=True, slots=True)
class SaleSettings:
    window_mode: WindowMode = WindowMode.CONVENTIONAL
    refund_destination: RefundDestination = RefundDestination.TREASURY
    refund_formula: RefundFormula = RefundFormula.GROSS
    refund_dust_threshold: int = DEFAULT_DUST_THRESHOLD
    storage_byte_price: int = 10**19
    token_decimals: int = 18
    ft_transfer_gas: int = 5_000_000_000_000
    claim_deposit: int = 1
    state_backend: StateBackend = StateBackend.MEMORY
    transfer_executor_id: Optional[str] = None

    @property
    def refund_policy(self) -> RefundPolicy:
        return RefundPolicy(
            destination=self.refund_destination,
            formula=self.refund_formula,
            dust_threshold=self.refund_dust_threshold,
        )

    @property
    def token_scale(self) -> int:
        """Token-native units per sale unit."""
        return 10**self.token_decimals


def _enum(env: Mapping[str, str], name: str, enum_type: Type[E], default: E) -> E:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return enum_type(raw.strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise ValueError(f"Invalid {name}: {raw!r} (expected one of: {allowed})") from None


def _non_negative_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"Invalid {name}: {raw!r} (expected an integer)") from None
    if value < 0:
        raise ValueError(f"Invalid {name}: {raw!r} (must be >= 0)")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> SaleSettings:
    """
    Build settings from an environment mapping (os.environ by default).

    Raises:
        ValueError: a variable is set to an unparseable value
    """

    if env is None:
        load_dotenv(dotenv_path=env_path)
        env = os.environ

    defaults = SaleSettings()
    return SaleSettings(
        window_mode=_enum(env, "SALE_WINDOW_MODE", WindowMode, defaults.window_mode),
        refund_destination=_enum(
            env, "SALE_REFUND_DESTINATION", RefundDestination, defaults.refund_destination
        ),
        refund_formula=_enum(env, "SALE_REFUND_FORMULA", RefundFormula, defaults.refund_formula),
        refund_dust_threshold=_non_negative_int(
            env, "SALE_REFUND_DUST_THRESHOLD", defaults.refund_dust_threshold
        ),
        storage_byte_price=_non_negative_int(
            env, "SALE_STORAGE_BYTE_PRICE", defaults.storage_byte_price
        ),
        token_decimals=_non_negative_int(env, "SALE_TOKEN_DECIMALS", defaults.token_decimals),
        ft_transfer_gas=_non_negative_int(env, "SALE_FT_TRANSFER_GAS", defaults.ft_transfer_gas),
        claim_deposit=_non_negative_int(env, "SALE_CLAIM_DEPOSIT", defaults.claim_deposit),
        state_backend=_enum(env, "SALE_STATE_BACKEND", StateBackend, defaults.state_backend),
        transfer_executor_id=(env.get("SALE_TRANSFER_EXECUTOR_ID") or "").strip() or None,
    )


@lru_cache(maxsize=1)
def get_settings() -> SaleSettings:
    """Process-wide settings, loaded once."""
    return load_settings()


__all__ = [
    "SaleSettings",
    "StateBackend",
    "load_settings",
    "get_settings",
]
