"""Memory mappings that are tracked and unmapped safely."""

from __future__ import annotations

import errno
import logging
import mmap
from dataclasses import dataclass

_log = logging.getLogger(__name__)

_MAP_ERRORS = {
    errno.EINVAL: "Invalid argument (check addr, length, offset, or flags)",
    errno.EACCES: "Permission denied (check file permissions or protections)",
    errno.ENOMEM: "Out of memory (check system resources)",
    errno.EBADF: "Invalid file descriptor",
    errno.ENODEV: "Mapping not supported for this file",
    errno.ENXIO: "No such device or address (check offset and file size)",
    errno.EOVERFLOW: "Offset or length exceeds file size or addressable range",
}

_UNMAP_ERRORS = {
    errno.EINVAL: "Invalid address or size.",
    errno.ENOMEM: "Address is outside the address space of the process.",
}


class MappingError(Exception):
    """Raised when mapping or unmapping memory fails."""


@dataclass
class _Chunk:
    mapping: mmap.mmap
    size: int
    in_use: bool = True


class MappingTracker:
    """Creates memory mappings and keeps a record of them."""

    def __init__(self) -> None:
        self._chunks: dict[int, _Chunk] = {}

    def map(self, length, fileno=-1, offset=0) -> mmap.mmap:
        """Map ``length`` bytes, anonymously or of the file behind ``fileno``."""
        if length <= 0:
            raise MappingError(f"mmap failed: {_MAP_ERRORS[errno.EINVAL]}")
        try:
            if fileno == -1:
                mapping = mmap.mmap(-1, length)
            else:
                mapping = mmap.mmap(fileno, length, access=mmap.ACCESS_WRITE, offset=offset)
        except OSError as exc:
            detail = _MAP_ERRORS.get(exc.errno, exc.strerror or str(exc))
            raise MappingError(f"mmap failed: {detail}") from exc
        except ValueError as exc:
            raise MappingError(f"mmap failed: {exc}") from exc
        self._chunks[id(mapping)] = _Chunk(mapping, length)
        _log.info("Memory mapped at %#x (size: %d bytes)", id(mapping), length)
        return mapping

    def unmap(self, address) -> None:
        """Unmap a mapping made by this tracker."""
        if address is None:
            raise MappingError("safe_munmap: NULL address provided.")
        chunk = self._chunks.get(id(address))
        if chunk is None or chunk.mapping is not address:
            raise MappingError(
                f"safe_munmap: Address {id(address):#x} not found in allocation list."
            )
        if not chunk.in_use:
            raise MappingError(f"safe_munmap: Address {id(address):#x} is already unmapped.")
        try:
            address.close()
        except BufferError as exc:
            raise MappingError(f"munmap failed: {exc}") from exc
        except OSError as exc:
            detail = _UNMAP_ERRORS.get(exc.errno, f"Unknown error (errno: {exc.errno}).")
            raise MappingError(f"munmap failed: {detail}") from exc
        chunk.in_use = False
        _log.info("Memory unmapped at %#x (size: %d bytes)", id(address), chunk.size)

    def _live(self) -> list[_Chunk]:
        return [chunk for chunk in reversed(self._chunks.values()) if chunk.in_use]

    def usage(self) -> int:
        """Total bytes currently mapped."""
        return sum(chunk.size for chunk in self._live())

    def report(self) -> str:
        """Every live mapping, newest first, and the total."""
        lines = [
            f"Chunk address: {id(chunk.mapping):#x}, Size allocated: {chunk.size}"
            for chunk in self._live()
        ]
        lines.append(f"Total memory allocated: {self.usage()} bytes")
        return "\n".join(lines)