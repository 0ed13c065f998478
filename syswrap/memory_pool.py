"""A fixed-size block allocator carved out of one buffer."""

from __future__ import annotations

import sys


class PoolExhaustedError(RuntimeError):
    """Raised when every block of the pool is in use."""


class MemoryPool:
    """Hands out equal-sized blocks of one preallocated buffer."""

    def __init__(self, block_size, capacity) -> None:
        if block_size < 0 or capacity < 0:
            raise ValueError("block size and capacity must not be negative")
        self.block_size = block_size
        self.capacity = capacity
        self._buffer = bytearray(block_size * capacity)
        self._view = memoryview(self._buffer)
        self._blocks = [
            self._view[i * block_size:(i + 1) * block_size] for i in range(capacity)
        ]
        self._free = list(self._blocks)
        self._in_use: dict[int, memoryview] = {}
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("pool is closed")

    def alloc(self) -> memoryview:
        """Take the most recently freed block, or the last unused one."""
        self._check_open()
        if not self._free:
            raise PoolExhaustedError("no free blocks left in the pool")
        block = self._free.pop()
        self._in_use[id(block)] = block
        return block

    def free(self, block) -> None:
        """Return ``block`` to the pool."""
        self._check_open()
        if self._in_use.get(id(block)) is not block:
            raise ValueError("block is not allocated from this pool")
        del self._in_use[id(block)]
        self._free.append(block)

    def available(self) -> int:
        """Number of blocks that can still be allocated."""
        return len(self._free)

    def close(self) -> None:
        """Release the buffer; blocks handed out become unusable."""
        if self._closed:
            return
        for block in self._blocks:
            block.release()
        self._view.release()
        self._blocks.clear()
        self._free.clear()
        self._in_use.clear()
        self._closed = True

    def __enter__(self) -> MemoryPool:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def main(argv=None) -> int:
    """Allocate two blocks, clear them and give them back."""
    with MemoryPool(64, 100) as pool:
        first = pool.alloc()
        second = pool.alloc()
        first[:] = bytes(pool.block_size)
        second[:] = bytes(pool.block_size)
        pool.free(first)
        pool.free(second)
    return 0


if __name__ == "__main__":
    sys.exit(main())