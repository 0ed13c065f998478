"""Wait for every child of a process, as listed under /proc."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path

PROC_CHILDREN_PATH = "/proc/{pid}/task/{pid}/children"

_log = logging.getLogger(__name__)


def _describe(child: int, status: int) -> str:
    if os.WIFEXITED(status):
        return f"Child PID {child} exited with status {os.WEXITSTATUS(status)}"
    if os.WIFSIGNALED(status):
        return f"Child PID {child} terminated by signal {os.WTERMSIG(status)}"
    return f"Child PID {child} ended unexpectedly"


def list_children(pid) -> list[int]:
    """PIDs of the children of ``pid``'s main thread.

    Raises OSError when the children file cannot be read.
    """
    return [int(token) for token in Path(PROC_CHILDREN_PATH.format(pid=pid)).read_text().split()]


def wait_for_children(pid) -> dict[int, int]:
    """Block on each child of ``pid``; map every reaped child to its wait status.

    Children that cannot be waited on are logged and skipped.
    """
    children = list_children(pid)
    _log.info("Child processes of PID %d: %s", pid, children)
    reaped: dict[int, int] = {}
    for child in children:
        _log.info("Waiting on child PID %d...", child)
        try:
            reaped[child] = os.waitpid(child, 0)[1]
        except OSError as exc:
            _log.warning("waitpid failed for child PID %d: %s", child, exc)
        else:
            _log.info("%s", _describe(child, reaped[child]))
    return reaped


def main(argv=None) -> int:
    """Fork two workers, then wait on every child of this process."""
    parser = argparse.ArgumentParser(
        prog="wait-children", description="Wait for all children of this process."
    )
    parser.add_argument("--work", type=float, default=2.0, help="seconds each child works")
    parser.add_argument("--settle", type=float, default=1.0, help="seconds before waiting")
    args = parser.parse_args(argv)

    sys.stdout.flush()
    sys.stderr.flush()
    for _ in range(2):
        try:
            worker = os.fork()
        except OSError as exc:
            print(f"fork failed: {exc}", file=sys.stderr)
            return 1
        if worker == 0:
            try:
                time.sleep(args.work)
            finally:
                os._exit(0)

    time.sleep(args.settle)
    parent = os.getpid()
    try:
        reaped = wait_for_children(parent)
    except OSError as exc:
        print(f"Failed to open children file: {exc}", file=sys.stderr)
        return 1
    lines = [f"Child processes of PID {parent}:"]
    lines.extend(_describe(child, status) for child, status in reaped.items())
    print("\n".join(lines))
    return 0


if __name__ == "__main__":
    sys.exit(main())