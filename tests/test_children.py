import contextlib
import os
import signal
import subprocess
import sys

import pytest

from syswrap.children import list_children, main, wait_for_children

_WORKER_SCRIPT = "import sys, time; time.sleep(float(sys.argv[1])); sys.exit(int(sys.argv[2]))"


def _spawn_worker(code=0, delay=0.0):
    """Start a child interpreter that sleeps, then exits with the given code."""
    proc = subprocess.Popen([sys.executable, "-c", _WORKER_SCRIPT, str(delay), str(code)])
    return proc.pid


@pytest.fixture(autouse=True)
def _drain_zombies():
    yield
    with contextlib.suppress(ChildProcessError):
        while os.waitpid(-1, os.WNOHANG)[0]:
            pass


def test_list_children_includes_spawned():
    workers = [_spawn_worker(0, 30), _spawn_worker(0, 30)]
    try:
        assert set(workers) <= set(list_children(os.getpid()))
    finally:
        for pid in workers:
            os.kill(pid, signal.SIGKILL)
            os.waitpid(pid, 0)


def test_list_children_of_missing_process():
    pid = _spawn_worker()
    os.waitpid(pid, 0)
    with pytest.raises(FileNotFoundError):
        list_children(pid)


def test_wait_for_children_reaps_all():
    first = _spawn_worker(0, 0.1)
    second = _spawn_worker(4, 0.1)
    result = wait_for_children(os.getpid())
    assert [os.WEXITSTATUS(result[pid]) for pid in (first, second)] == [0, 4]
    assert not {first, second} & set(list_children(os.getpid()))


def test_wait_for_children_reports_signals():
    pid = _spawn_worker(0, 30)
    os.kill(pid, signal.SIGTERM)
    status = wait_for_children(os.getpid())[pid]
    assert os.WIFSIGNALED(status)
    assert os.WTERMSIG(status) == signal.SIGTERM


def test_main_waits_for_both(capsys):
    assert main(["--work", "0.05", "--settle", "0.2"]) == 0
    out = capsys.readouterr().out
    assert out.startswith(f"Child processes of PID {os.getpid()}:")
    assert out.count("exited with status 0") >= 2