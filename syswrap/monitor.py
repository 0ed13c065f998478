"""Run a program and report its timing and resource usage."""

from __future__ import annotations

import contextlib
import os
import sys
import time
from dataclasses import dataclass
from typing import NoReturn

DEFAULT_PROGRAM = "/bin/ls"
DEFAULT_ARGS = ("ls", "-l", "/tmp")


@dataclass(frozen=True)
class ExecutionReport:
    """Timing, resource usage and exit status of one monitored run."""

    pid: int
    status: int
    start: float
    end: float
    user_time: float
    system_time: float
    max_rss: int
    voluntary_switches: int
    involuntary_switches: int

    @property
    def elapsed(self) -> float:
        return self.end - self.start

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


def _exec_child(program: str, argv: list[str]) -> NoReturn:
    try:
        os.execvp(program, argv)
    except OSError as exc:
        with contextlib.suppress(OSError):
            os.write(2, f"exec failed: {exc.strerror}\n".encode())
    finally:
        os._exit(1)


def run_monitored(program, args) -> ExecutionReport:
    """Run ``program`` with argument vector ``args`` in a child and measure it.

    A program that cannot be executed shows up as a child exit status of 1.
    """
    argv = [os.fspath(arg) for arg in args]
    if not argv:
        raise ValueError("argument list must not be empty")
    sys.stdout.flush()
    sys.stderr.flush()
    pid = os.fork()
    if pid == 0:
        _exec_child(os.fspath(program), argv)
    start = time.time()
    _, status, usage = os.wait4(pid, 0)
    end = time.time()
    return ExecutionReport(
        pid=pid,
        status=status,
        start=start,
        end=end,
        user_time=usage.ru_utime,
        system_time=usage.ru_stime,
        max_rss=usage.ru_maxrss,
        voluntary_switches=usage.ru_nvcsw,
        involuntary_switches=usage.ru_nivcsw,
    )


def format_report(report) -> str:
    """Render ``report`` as the execution report text."""
    if report.exited:
        outcome = f"Process exited with status {report.exit_status}"
    elif report.signaled:
        outcome = f"Process was killed by signal {report.term_signal}"
    else:
        outcome = "Process exited abnormally."
    return "\n".join(
        [
            "Process Execution Report:",
            "--------------------------",
            f"Start time: {report.start:.6f}",
            f"End time: {report.end:.6f}",
            f"Elapsed time: {report.elapsed:.6f} seconds",
            f"User CPU time: {report.user_time:.6f}s",
            f"System CPU time: {report.system_time:.6f}s",
            f"Maximum resident set size (memory): {report.max_rss} KB",
            f"Voluntary context switches: {report.voluntary_switches}",
            f"Involuntary context switches: {report.involuntary_switches}",
            outcome,
        ]
    )


def main(argv=None) -> int:
    """Run the given command (``ls -l /tmp`` by default) and print its report."""
    args = sys.argv[1:] if argv is None else list(argv)
    if args:
        program, command = args[0], args
    else:
        program, command = DEFAULT_PROGRAM, list(DEFAULT_ARGS)
    try:
        report = run_monitored(program, command)
    except OSError as exc:
        print(f"fork failed: {exc}", file=sys.stderr)
        return 1
    print(format_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())