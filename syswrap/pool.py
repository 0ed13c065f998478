"""A pool of forked worker processes that run named tasks sent over pipes."""

from __future__ import annotations

import contextlib
import os
import signal
import struct
import sys
import time
from dataclasses import dataclass
from typing import Callable, NoReturn

MAX_WORKERS = 5
MAX_TASKS = 100
NAME_SIZE = 256

_RECORD = struct.Struct(f"={NAME_SIZE}si")


def compute_square(n) -> int:
    """Print and return the square of ``n``."""
    result = n * n
    print(f"Task performed by process {os.getpid()}\n : Square of {n} is {result}")
    return result


def print_message(n) -> None:
    """Print the task data ``n``."""
    print(f"Task performed by process {os.getpid()}\n : Task data is {n}")


HANDLERS: dict[str, Callable[[int], object]] = {
    "compute_square": compute_square,
    "print_message": print_message,
}


@dataclass(frozen=True)
class Task:
    """A named function and the integer argument it is called with."""

    name: str
    arg: int


@dataclass
class _Worker:
    pid: int
    read_fd: int
    write_fd: int


def _pack(task: Task) -> bytes:
    name = task.name.encode("utf-8")[: NAME_SIZE - 1]
    try:
        return _RECORD.pack(name, task.arg)
    except struct.error as exc:
        raise ValueError(f"task argument out of range: {task.arg}") from exc


def _unpack(data: bytes) -> Task:
    raw_name, arg = _RECORD.unpack(data)
    name = raw_name.split(b"\0", 1)[0].decode("utf-8", errors="replace")
    return Task(name, arg)


def _read_exact(fd: int, size: int) -> bytes | None:
    data = bytearray()
    while len(data) < size:
        chunk = os.read(fd, size - len(data))
        if not chunk:
            return None
        data += chunk
    return bytes(data)


def _write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        written = os.write(fd, view)
        view = view[written:]


def _run_task(task: Task) -> None:
    handler = HANDLERS.get(task.name)
    if handler is None:
        print(f"Unknown task: {task.name}", file=sys.stderr)
    else:
        handler(task.arg)
    sys.stdout.flush()
    sys.stderr.flush()


def _close_quietly(*fds: int) -> None:
    for fd in fds:
        with contextlib.suppress(OSError):
            os.close(fd)


class ProcessPool:
    """Forked workers that receive tasks round-robin over pipes.

    A worker that has died is started again before it is handed a task.
    """

    grace_period = 1.0

    def __init__(self, size=MAX_WORKERS, max_tasks=MAX_TASKS) -> None:
        if size < 1:
            raise ValueError("pool needs at least one worker")
        if max_tasks < 0:
            raise ValueError("max_tasks must not be negative")
        self.size = size
        self.max_tasks = max_tasks
        self._workers: list[_Worker | None] = []
        self._tasks: list[Task] = []
        self._next = 0
        self._running = False

    @property
    def pids(self) -> list[int]:
        """PIDs of the current workers, by worker index."""
        return [worker.pid for worker in self._workers if worker is not None]

    @property
    def submitted(self) -> tuple[Task, ...]:
        """Every task accepted so far, in order."""
        return tuple(self._tasks)

    def _child(self, task_fd: int, inherited: list[int]) -> NoReturn:
        status = 0
        try:
            _close_quietly(*inherited)
            while (data := _read_exact(task_fd, _RECORD.size)) is not None:
                _run_task(_unpack(data))
        except BaseException:
            status = 1
        finally:
            with contextlib.suppress(Exception):
                sys.stdout.flush()
                sys.stderr.flush()
            os._exit(status)

    def _spawn(self) -> _Worker:
        task_r, task_w = os.pipe()
        result_r, result_w = os.pipe()
        inherited = [task_w, result_r]
        for worker in self._workers:
            if worker is not None:
                inherited.extend((worker.read_fd, worker.write_fd))
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            pid = os.fork()
        except OSError:
            _close_quietly(task_r, task_w, result_r, result_w)
            raise
        if pid == 0:
            self._child(task_r, inherited)
        _close_quietly(task_r, result_w)
        return _Worker(pid, result_r, task_w)

    def start(self) -> None:
        """Fork the workers."""
        if self._running:
            raise RuntimeError("pool is already running")
        self._workers = []
        self._tasks = []
        self._next = 0
        self._running = True
        try:
            for _ in range(self.size):
                self._workers.append(self._spawn())
        except OSError:
            self.shutdown()
            raise

    def _restart(self, index: int) -> _Worker:
        old = self._workers[index]
        if old is not None:
            _close_quietly(old.read_fd, old.write_fd)
        self._workers[index] = None
        worker = self._spawn()
        self._workers[index] = worker
        return worker

    def _ensure_alive(self, index: int) -> _Worker:
        worker = self._workers[index]
        if worker is None:
            return self._restart(index)
        try:
            done, _ = os.waitpid(worker.pid, os.WNOHANG)
        except ChildProcessError:
            done = worker.pid
        if done == 0:
            return worker
        return self._restart(index)

    def add_task(self, name, arg) -> int:
        """Queue a task and send it to the next worker; return that worker's index.

        Raises RuntimeError when the pool is not running, OverflowError when
        the task queue is full and ValueError when ``arg`` does not fit.
        """
        if not self._running:
            raise RuntimeError("pool is not running")
        if len(self._tasks) >= self.max_tasks:
            raise OverflowError("Task queue full")
        task = Task(str(name), int(arg))
        record = _pack(task)
        self._tasks.append(task)
        index = self._next
        worker = self._ensure_alive(index)
        try:
            _write_all(worker.write_fd, record)
        except BrokenPipeError:
            worker = self._restart(index)
            _write_all(worker.write_fd, record)
        self._next = (index + 1) % self.size
        return index

    def shutdown(self) -> None:
        """Close the pipes, let workers finish, and terminate any that linger."""
        if not self._running:
            return
        workers = [worker for worker in self._workers if worker is not None]
        for worker in workers:
            _close_quietly(worker.write_fd, worker.read_fd)
        pending = {worker.pid for worker in workers}
        deadline = time.monotonic() + self.grace_period
        while pending and time.monotonic() < deadline:
            for pid in list(pending):
                try:
                    done, _ = os.waitpid(pid, os.WNOHANG)
                except ChildProcessError:
                    done = pid
                if done:
                    pending.discard(pid)
            if pending:
                time.sleep(0.01)
        for pid in pending:
            with contextlib.suppress(ProcessLookupError):
                os.kill(pid, signal.SIGTERM)
            with contextlib.suppress(ChildProcessError):
                os.waitpid(pid, 0)
        self._workers = []
        self._running = False

    def __enter__(self) -> ProcessPool:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()


def main(argv=None) -> int:
    """Start a pool, hand it a few tasks and shut it down."""
    try:
        with ProcessPool(MAX_WORKERS, MAX_TASKS) as pool:
            for _ in range(2):
                pool.add_task("compute_square", 3)
                pool.add_task("compute_square", 5)
                pool.add_task("print_message", 42)
                pool.add_task("print_message", 7)
    except OSError as exc:
        print(f"Pool failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())