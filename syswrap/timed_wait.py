"""Wait for a child process, killing it once a timeout expires."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
import time
from dataclasses import dataclass

DEFAULT_TIMEOUT = 15.0
DEFAULT_POLL_INTERVAL = 0.1

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class WaitResult:
    """Outcome of waiting on a child: its pid, raw wait status and whether it was killed."""

    pid: int
    status: int
    timed_out: bool = False

    @property
    def exited(self) -> bool:
        return os.WIFEXITED(self.status)

    @property
    def exit_status(self) -> int | None:
        return os.WEXITSTATUS(self.status) if self.exited else None

    @property
    def signaled(self) -> bool:
        return os.WIFSIGNALED(self.status)

    @property
    def term_signal(self) -> int | None:
        return os.WTERMSIG(self.status) if self.signaled else None


def _outcome(pid: int, result: WaitResult) -> str | None:
    if result.timed_out:
        return f"Child process {pid} killed due to timeout"
    if result.exited:
        return f"Child process {pid} exited with status {result.exit_status}"
    if result.signaled:
        return f"Child process {pid} was terminated by signal {result.term_signal}"
    return None


def wait_with_timeout(
    pid, options=0, timeout=DEFAULT_TIMEOUT, poll_interval=DEFAULT_POLL_INTERVAL
) -> WaitResult:
    """Poll ``pid`` until it changes state; SIGKILL it once ``timeout`` seconds pass.

    Raises OSError (ChildProcessError for an unknown child) when waiting or
    killing fails, and TimeoutError when the timeout passes for a pid that
    names no single process.
    """
    deadline = time.monotonic() + timeout
    while True:
        ret_pid, status = os.waitpid(pid, options | os.WNOHANG)
        if ret_pid > 0:
            result = WaitResult(ret_pid, status)
            break
        if time.monotonic() >= deadline:
            _log.warning("Timeout reached while waiting for process %d", pid)
            if pid <= 0:
                raise TimeoutError(f"Timeout reached while waiting for process {pid}")
            os.kill(pid, signal.SIGKILL)
            ret_pid, status = os.waitpid(pid, 0)
            result = WaitResult(ret_pid, status, timed_out=True)
            break
        time.sleep(poll_interval)

    message = _outcome(pid, result)
    if message:
        _log.info("%s", message)
    return result


def main(argv=None) -> int:
    """Fork a worker and wait for it with a timeout."""
    parser = argparse.ArgumentParser(
        prog="timed-wait", description="Wait for a child process with a timeout."
    )
    parser.add_argument("--work", type=float, default=5.0, help="seconds the child works")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT)
    args = parser.parse_args(argv)

    for stream in (sys.stdout, sys.stderr):
        stream.flush()
    try:
        pid = os.fork()
    except OSError as exc:
        print(f"fork failed: {exc}", file=sys.stderr)
        return 1
    if pid == 0:
        try:
            print(f"Child process {os.getpid()} started, simulating work...", flush=True)
            time.sleep(args.work)
            print(f"Child process {os.getpid()} finished work.", flush=True)
        finally:
            os._exit(0)

    print(f"Parent waiting for child process {pid} to complete.")
    try:
        result = wait_with_timeout(pid, timeout=args.timeout)
    except OSError as exc:
        print(f"custom_waitpid: waitpid failed: {exc}", file=sys.stderr)
        print(f"Parent: Timeout or error occurred while waiting for child process {pid}")
        return 0

    if result.timed_out:
        print(f"Timeout reached while waiting for process {pid}")
    message = _outcome(pid, result)
    if message:
        print(message)
    print(f"Parent: Successfully waited for child process {pid}")
    return 0


if __name__ == "__main__":
    sys.exit(main())