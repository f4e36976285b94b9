"""
Domain: Call context supplied by the host for every operation.

The host delivers who is calling, what payment is attached to the call and
the block time in nanoseconds. Services never read ambient clocks or globals.
"""

from __future__ import annotations

from dataclasses import dataclass

from .time import to_seconds


@dataclass(frozen=True, slots=True)
class CallContext:
    caller_id: str
    attached_deposit: int = 0
    block_timestamp_ns: int = 0

    def __post_init__(self) -> None:
        if not self.caller_id:
            raise ValueError("caller_id must be a non-empty account id")
        if self.attached_deposit < 0:
            raise ValueError("attached_deposit must be >= 0")
        if self.block_timestamp_ns < 0:
            raise ValueError("block_timestamp_ns must be >= 0")

    @property
    def now(self) -> int:
        """Block time in whole seconds."""
        return to_seconds(self.block_timestamp_ns)
