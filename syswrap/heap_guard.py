"""Heap size accounting with a checksum integrity check."""

from __future__ import annotations

import threading
from pathlib import Path

DEFAULT_LOG = "heap_corruption_log.txt"
_SIZE_MASK = (1 << 64) - 1
_CHECKSUM_MASK = 0xFFFFFFFF


class HeapCorruptionError(RuntimeError):
    """Raised when the stored checksum no longer matches the heap size."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Heap corruption detected! Expected checksum: {expected}, but got: {actual}"
        )
        self.expected = expected
        self.actual = actual


class HeapGuard:
    """Allocates buffers while keeping a checksummed running heap size."""

    def __init__(self, log_path=DEFAULT_LOG) -> None:
        self.log_path = Path(log_path)
        self._lock = threading.Lock()
        self._size = 0
        self._checksum = 0

    def checksum(self) -> int:
        """The checksum the current heap size should have."""
        return (0 ^ self._size) & _CHECKSUM_MASK

    def validate(self) -> int:
        """Check the stored checksum; log and raise on mismatch."""
        expected = self.checksum()
        if expected != self._checksum:
            error = HeapCorruptionError(expected, self._checksum)
            try:
                with self.log_path.open("a", encoding="utf-8") as log:
                    log.write(f"{error}\n")
            except OSError:
                pass
            raise error
        return expected

    @staticmethod
    def _check_size(size) -> None:
        if size < 0:
            raise ValueError("size must not be negative")

    def _grow(self, amount: int) -> None:
        with self._lock:
            self._size = (self._size + amount) & _SIZE_MASK
            self._checksum = self.checksum()

    def _shrink(self, amount: int) -> None:
        with self._lock:
            self._size = (self._size - amount) & _SIZE_MASK

    def malloc(self, size) -> bytearray:
        """Allocate ``size`` bytes."""
        self._check_size(size)
        block = bytearray(size)
        self._grow(size)
        self.validate()
        return block

    def calloc(self, count, size) -> bytearray:
        """Allocate ``count`` elements of ``size`` bytes each."""
        self._check_size(count)
        self._check_size(size)
        block = bytearray(count * size)
        self._grow(count * size)
        self.validate()
        return block

    def realloc(self, block, size) -> bytearray:
        """Resize ``block`` into a new buffer, keeping its leading bytes."""
        self._check_size(size)
        new_block = bytearray(size)
        if block is not None:
            self._shrink(len(block))
            keep = min(len(block), size)
            new_block[:keep] = block[:keep]
        self._grow(size)
        self.validate()
        return new_block

    def free(self, block) -> None:
        """Account for releasing ``block``."""
        if block is not None:
            self._shrink(len(block))
        with self._lock:
            self._checksum = self.checksum()
        self.validate()