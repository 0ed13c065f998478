# syswrap

Small, inspectable wrappers around operating-system resources: file
descriptors, memory blocks, memory mappings and child processes. Each wrapper
keeps a record of what it handed out, so that it can report leaks, catch
misuse and clean up after itself. The process tools rely on POSIX calls such as
`fork`, `waitpid` and `kill`, and some read from `/proc`, so they are meant for
Linux.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Memory and file tools

### File descriptors: `syswrap.filetracker`

`FileTracker` opens files with `os.open` and remembers every descriptor it
returned. Closing a descriptor it never opened raises
`UntrackedDescriptorError`. `close_all()` closes everything still open, and
leaving a `with FileTracker() as tracker:` block does the same.

```python
import os
from syswrap.filetracker import FileTracker

tracker = FileTracker()
fd = tracker.open("file1.txt", os.O_CREAT | os.O_WRONLY, 0o644)
assert fd in tracker
tracker.close(fd)
tracker.close_all()
```

```
syswrap-file-tracker [DIRECTORY]
```

opens `file1.txt` and `file2.txt` in the directory (the current one by
default), closes one, tries to close an unknown descriptor and closes the rest.

### Fixed-size block pool: `syswrap.memory_pool`

`MemoryPool(block_size, capacity)` carves one buffer into equal blocks.
`alloc()` hands out a block as a `memoryview`, `free(block)` returns it,
`available()` tells how many are left, and `alloc()` on an empty pool raises
`PoolExhaustedError`. `close()` releases the buffer; the pool also works as a
context manager.

```python
from syswrap.memory_pool import MemoryPool

pool = MemoryPool(64, 100)
block = pool.alloc()
pool.free(block)
pool.close()
```

`syswrap-memory-pool` allocates, clears and frees two blocks.

### Mark-and-sweep collector: `syswrap.garbage`

`GarbageCollector.alloc(size)` returns a new block. Blocks marked with
`mark(block)` survive the next `collect()`; the others are dropped, and
`collect()` returns how many were. Marks are cleared by each collection.
`cleanup()` drops everything.

### Leak detection: `syswrap.debug_alloc`

`AllocationTracker.malloc(size)` and `free(block)` record each allocation.
A size of zero raises `ValueError`; freeing a block that is not tracked raises
`UntrackedBlockError`. `leaks()` lists the address and size of what is still
allocated, newest first, and `report()` describes it in text.

### Heap accounting: `syswrap.heap_guard`

`HeapGuard(log_path)` counts the bytes handed out through `malloc`, `calloc`,
`realloc` and `free` and keeps a checksum over that count. `validate()`
compares the stored checksum with the computed one; a mismatch is appended to
the log file and raises `HeapCorruptionError`.

### Memory mappings: `syswrap.mapping`

`MappingTracker.map(length, fileno, offset)` creates a mapping, anonymous when
`fileno` is `-1` (the default), and records it; `unmap(address)` releases it.
Unmapping an unknown or already released mapping raises `MappingError`, as
does a failed map. `usage()` and `report()` sum up what is still mapped.

## Process tools

### Waiting with a timeout: `syswrap.timed_wait`

`wait_with_timeout(pid, options, timeout, poll_interval)` polls a child
without blocking. If the child has not finished when the timeout (15 seconds
by default) runs out, it is killed with `SIGKILL` and reaped. The outcome
comes back as a `WaitResult`.

```
syswrap-timed-wait [--work SECONDS] [--timeout SECONDS]
```

starts a child that works for a few seconds and waits for it.

### Monitored execution: `syswrap.monitor`

`run_monitored(program, args)` runs a program in a child process and returns
an `ExecutionReport` with the start and end times, elapsed time, CPU times,
peak memory, context switches and exit status. `format_report(report)` turns
it into readable text.

```
syswrap-monitor [PROGRAM [ARG ...]]
```

runs the given command, or `ls -l /tmp` when none is given, and prints the
report.

### Waiting for every child: `syswrap.children`

`list_children(pid)` reads the child process IDs of a process from `/proc`.
`wait_for_children(pid)` waits for each of them in turn and returns the wait
status of each one reaped.

```
syswrap-children [--work SECONDS] [--settle SECONDS]
```

### Zombie reaping: `syswrap.zombies`

`describe_status(pid, status)` turns a wait status into a sentence.
`reap_zombies()` collects every child that has already exited.
`kill_and_reap(pid, sig, log)` sends a signal and then reaps; and
`waitpid_and_reap(pid, options, log)` waits for one process and then reaps any
others. Both pass each message to the `log` callable they are given;
`kill_and_reap` prints by default and `waitpid_and_reap` appends to
`/var/log/zombie_logger.log` by default.

```
syswrap-zombies [waitpid|kill] [--work SECONDS] [--delay SECONDS] [--log FILE]
```

### Worker pool: `syswrap.pool`

`ProcessPool(size, max_tasks)` forks a fixed number of workers connected by
pipes. After `start()`, `add_task(name, arg)` queues a `Task` naming one of
the known functions (`compute_square` or `print_message`) and hands it to the
next worker in turn, restarting that worker first if it has died. Adding
beyond `max_tasks` raises `OverflowError`. `shutdown()` closes the pipes,
gives the workers a moment to finish and terminates any that remain.

```
syswrap-pool
```

## What is not included

The package does not change process priorities: there is no tool for setting
the CPU nice value or the I/O scheduling class of a child process.