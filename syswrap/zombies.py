"""Send signals or wait on children, then clean up any zombie processes."""

from __future__ import annotations

import argparse
import contextlib
import os
import signal
import sys
import time
from typing import Callable, NoReturn

DEFAULT_LOG_PATH = "/var/log/zombie_logger.log"


def _file_logger(path) -> Callable[[str], None]:
    def write(message: str) -> None:
        with contextlib.suppress(OSError), open(path, "a", encoding="utf-8") as log_file:
            log_file.write(f"{message}\n")

    return write


def describe_status(pid, status) -> str:
    """A sentence describing the wait ``status`` of process ``pid``."""
    if os.WIFEXITED(status):
        return f"Process {pid} terminated normally with exit code {os.WEXITSTATUS(status)}."
    if os.WIFSIGNALED(status):
        return f"Process {pid} terminated by signal {os.WTERMSIG(status)}."
    if os.WIFSTOPPED(status):
        return f"Process {pid} stopped by signal {os.WSTOPSIG(status)}."
    return f"Process {pid} changed state (status {status})."


def _cleanup_message(pid: int, status: int) -> str:
    if os.WIFEXITED(status):
        return (
            f"Cleaned up zombie process {pid}, terminated normally "
            f"with exit code {os.WEXITSTATUS(status)}."
        )
    if os.WIFSIGNALED(status):
        return f"Cleaned up zombie process {pid}, terminated by signal {os.WTERMSIG(status)}."
    return f"Cleaned up zombie process {pid}."


def reap_zombies() -> list[tuple[int, int]]:
    """Reap every child that has already terminated; return (pid, status) pairs."""
    reaped = []
    while True:
        try:
            pid, status = os.waitpid(-1, os.WNOHANG)
        except ChildProcessError:
            break
        if pid <= 0:
            break
        reaped.append((pid, status))
    return reaped


def _cleanup(log: Callable[[str], None]) -> list[tuple[int, int]]:
    reaped = reap_zombies()
    for pid, status in reaped:
        log(_cleanup_message(pid, status))
    return reaped


def kill_and_reap(pid, sig, log=None) -> list[tuple[int, int]]:
    """Send ``sig`` to ``pid``, log the outcome, then reap zombies.

    Returns the reaped (pid, status) pairs; re-raises the OSError of a
    failed kill after reaping. ``log`` defaults to printing.
    """
    log = print if log is None else log
    try:
        os.kill(pid, sig)
    except OSError as exc:
        log(f"Failed to send signal {int(sig)} to process {pid}. Error: {exc.strerror}")
        _cleanup(log)
        raise
    log(f"Signal {int(sig)} sent to process {pid} successfully.")
    return _cleanup(log)


def waitpid_and_reap(pid, options=0, log=None) -> tuple[int, int]:
    """Wait on ``pid``, log the result, then reap any other zombies.

    Returns what ``os.waitpid`` returned; re-raises its OSError after
    reaping. ``log`` defaults to appending to the zombie log file.
    """
    log = _file_logger(DEFAULT_LOG_PATH) if log is None else log
    try:
        result, status = os.waitpid(pid, options)
    except OSError as exc:
        log(f"waitpid failed for PID {pid}. Error: {exc.strerror}")
        _cleanup(log)
        raise
    if result > 0:
        log(describe_status(result, status))
    else:
        log(f"No child process state change detected for PID {pid}.")
    _cleanup(log)
    return result, status


def _child(work: float) -> NoReturn:
    try:
        print(f"Child process (PID: {os.getpid()}) is running...", flush=True)
        time.sleep(work)
        print(f"Child process (PID: {os.getpid()}) exiting...", flush=True)
    finally:
        os._exit(0)


def _run_waitpid(child: int, log) -> int:
    print(f"Parent process (PID: {os.getpid()}) is waiting for zombie process...")
    time.sleep(_run_waitpid.delay)
    try:
        result, status = waitpid_and_reap(child, os.WNOHANG, log)
    except OSError as exc:
        print(f"Error waiting for process: {exc}", file=sys.stderr)
        return 1
    if result == 0:
        print(f"Zombie process detected (PID: {child}).")
    else:
        print(f"Zombie process (PID: {result}) reaped.")
        if os.WIFEXITED(status):
            print(f"Process exited with status {os.WEXITSTATUS(status)}.")
        elif os.WIFSIGNALED(status):
            print(f"Process terminated by signal {os.WTERMSIG(status)}.")
    print(f"Parent process (PID: {os.getpid()}) cleanup complete.")
    return 0


def _run_kill(child: int, log) -> int:
    print(
        f"Parent process (PID: {os.getpid()}) is waiting for the child process "
        "to become a zombie..."
    )
    time.sleep(_run_kill.delay)
    sig = signal.SIGTERM
    print(f"Sending signal {int(sig)} to child process (PID: {child}) using the kill wrapper...")
    try:
        kill_and_reap(child, sig, log)
    except OSError as exc:
        print(f"Failed to send signal: {exc}", file=sys.stderr)
        return 1
    print(f"Signal {int(sig)} sent to child process (PID: {child}) successfully.")
    return 0


def main(argv=None) -> int:
    """Create a zombie child, then clear it with waitpid or kill."""
    parser = argparse.ArgumentParser(
        prog="zombie-logger", description="Create a zombie child and clean it up."
    )
    parser.add_argument("mode", nargs="?", choices=("waitpid", "kill"), default="waitpid")
    parser.add_argument("--work", type=float, default=2.0, help="seconds the child works")
    parser.add_argument("--delay", type=float, default=3.0, help="seconds before cleaning up")
    parser.add_argument("--log", help="file to append log messages to")
    args = parser.parse_args(argv)

    if args.log:
        log = _file_logger(args.log)
    elif args.mode == "kill":
        log = print
    else:
        log = _file_logger(DEFAULT_LOG_PATH)

    sys.stdout.flush()
    sys.stderr.flush()
    try:
        child = os.fork()
    except OSError as exc:
        print(f"Failed to fork process: {exc}", file=sys.stderr)
        return 1
    if child == 0:
        _child(args.work)

    runner = _run_kill if args.mode == "kill" else _run_waitpid
    runner.delay = args.delay
    return runner(child, log)


if __name__ == "__main__":
    sys.exit(main())