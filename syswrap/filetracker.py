"""Open and close files while keeping track of the descriptors in use."""

from __future__ import annotations

import contextlib
import os
import sys


class UntrackedDescriptorError(LookupError):
    """Raised when closing a descriptor the tracker does not know about."""

    def __init__(self, fd: int) -> None:
        super().__init__(f"File descriptor not found in the file manager : {fd}.")
        self.fd = fd


class FileTracker:
    """Keeps a record of every descriptor opened through it."""

    def __init__(self) -> None:
        self._fds: list[int] = []

    def open(self, path, flags, mode=0o777) -> int:
        """Open ``path`` with ``os.open`` and remember the descriptor."""
        fd = os.open(path, flags, mode)
        self._fds.append(fd)
        return fd

    def close(self, fd: int) -> None:
        """Forget ``fd`` and close it.

        Raises UntrackedDescriptorError when ``fd`` was not opened here,
        and OSError when the close itself fails.
        """
        try:
            self._fds.remove(fd)
        except ValueError:
            raise UntrackedDescriptorError(fd) from None
        os.close(fd)

    def close_all(self) -> None:
        """Close every tracked descriptor and empty the record."""
        for fd in self._fds:
            with contextlib.suppress(OSError):
                os.close(fd)
        self._fds.clear()

    def __contains__(self, fd: object) -> bool:
        return fd in self._fds

    def __len__(self) -> int:
        return len(self._fds)

    def __enter__(self) -> FileTracker:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close_all()


def main(argv=None) -> int:
    """Open two files, close one, try an unknown descriptor, close the rest."""
    args = sys.argv[1:] if argv is None else list(argv)
    directory = args[0] if args else "."
    flags = os.O_CREAT | os.O_WRONLY
    with FileTracker() as tracker:
        try:
            tracker.open(os.path.join(directory, "file1.txt"), flags, 0o644)
            second = tracker.open(os.path.join(directory, "file2.txt"), flags, 0o644)
        except OSError as exc:
            print(f"open failed: {exc}", file=sys.stderr)
            return 1
        try:
            tracker.close(second)
        except OSError as exc:
            print(f"close failed: {exc}", file=sys.stderr)
        try:
            tracker.close(100)
        except UntrackedDescriptorError as exc:
            print(exc, file=sys.stderr)
        except OSError as exc:
            print(f"close failed: {exc}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())