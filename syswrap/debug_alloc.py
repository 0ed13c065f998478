"""Allocation tracking with leak reports."""

from __future__ import annotations

import logging

_log = logging.getLogger(__name__)


class UntrackedBlockError(ValueError):
    """Raised when freeing a block that is not, or no longer, tracked."""


class AllocationTracker:
    """Hands out buffers and remembers which ones were never freed."""

    def __init__(self) -> None:
        self._blocks: dict[int, tuple[bytearray, int]] = {}

    def malloc(self, size) -> bytearray:
        """Allocate and track a zeroed buffer of ``size`` bytes."""
        if size < 0:
            raise ValueError("size must not be negative")
        if size == 0:
            raise ValueError("Zero size allocation request ignored.")
        block = bytearray(size)
        self._blocks[id(block)] = (block, size)
        _log.info("Allocated %d bytes at %#x", size, id(block))
        return block

    def free(self, block) -> None:
        """Stop tracking ``block``."""
        if block is None:
            raise ValueError("Attempt to free a NULL pointer ignored.")
        entry = self._blocks.get(id(block))
        if entry is None or entry[0] is not block:
            raise UntrackedBlockError(
                f"Attempt to free untracked or already freed memory at {id(block):#x}"
            )
        del self._blocks[id(block)]
        _log.info("Freed %d bytes at %#x", entry[1], id(block))

    def leaks(self) -> list[tuple[int, int]]:
        """(address, size) of every live block, newest first."""
        return [(address, size) for address, (_, size) in reversed(self._blocks.items())]

    def report(self) -> str:
        """A human-readable leak report."""
        leaks = self.leaks()
        if not leaks:
            return "No memory leaks detected."
        lines = ["Memory leaks detected:"]
        lines.extend(f"  Leak: {size} bytes at {address:#x}" for address, size in leaks)
        return "\n".join(lines)