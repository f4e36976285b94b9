"""
Domain: Sale and claim windows.

Rules implemented here (conventional mode, the default):
- Purchases are accepted while start_time <= now < end_time.
- Claims are accepted once now >= end_time.

Legacy mode reproduces the comparisons the sale was originally deployed with:
- Purchases are accepted while now <= start_time.
- Claims are accepted while now <= end_time.

`now` is always whole epoch seconds; see domain.time.to_seconds.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .sale_config import SaleConfig


class WindowMode(str, Enum):
    CONVENTIONAL = "conventional"
    LEGACY = "legacy"


@dataclass(frozen=True, slots=True)
class TimeGate:
    start_time: int
    end_time: int
    mode: WindowMode = WindowMode.CONVENTIONAL

    @staticmethod
    def for_config(config: SaleConfig, mode: WindowMode = WindowMode.CONVENTIONAL) -> "TimeGate":
        return TimeGate(start_time=config.start_time, end_time=config.end_time, mode=mode)

    def is_sale_open(self, now: int) -> bool:
        if self.mode is WindowMode.LEGACY:
            return now <= self.start_time
        return self.start_time <= now < self.end_time

    def is_claim_open(self, now: int) -> bool:
        if self.mode is WindowMode.LEGACY:
            return now <= self.end_time
        return now >= self.end_time
