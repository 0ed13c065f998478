"""A tiny mark-and-sweep collector over tracked buffers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class _Record:
    block: bytearray
    reachable: bool = False


class GarbageCollector:
    """Tracks allocated buffers and drops those not marked reachable."""

    def __init__(self) -> None:
        self._records: dict[int, _Record] = {}

    def alloc(self, size) -> bytearray:
        """Allocate a zeroed buffer of ``size`` bytes and track it."""
        if size < 0:
            raise ValueError("size must not be negative")
        block = bytearray(size)
        self._records[id(block)] = _Record(block)
        return block

    def mark(self, block) -> None:
        """Mark ``block`` reachable; unknown blocks are ignored."""
        record = self._records.get(id(block))
        if record is not None and record.block is block:
            record.reachable = True

    def collect(self) -> int:
        """Drop unmarked blocks, clear marks on the rest; return the count dropped."""
        survivors = {key: rec for key, rec in self._records.items() if rec.reachable}
        freed = len(self._records) - len(survivors)
        for record in survivors.values():
            record.reachable = False
        self._records = survivors
        return freed

    def cleanup(self) -> None:
        """Forget every tracked block."""
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)