import os
import signal

import pytest

from syswrap.pool import (
    NAME_SIZE,
    ProcessPool,
    Task,
    compute_square,
    main,
    print_message,
)


@pytest.mark.parametrize(("n", "expected"), [(3, 9), (5, 25)])
def test_compute_square(capsys, n, expected):
    assert compute_square(n) == expected
    out = capsys.readouterr().out
    assert f"Square of {n} is {expected}" in out
    assert f"Task performed by process {os.getpid()}" in out


def test_print_message(capsys):
    print_message(42)
    assert "Task data is 42" in capsys.readouterr().out


def test_add_task_before_start_raises():
    pool = ProcessPool(2, 10)
    with pytest.raises(RuntimeError):
        pool.add_task("compute_square", 3)


def test_invalid_size_raises():
    with pytest.raises(ValueError):
        ProcessPool(0, 10)


def test_round_robin_assignment():
    with ProcessPool(3, 10) as pool:
        indexes = [pool.add_task("print_message", n) for n in range(7)]
    assert indexes == [0, 1, 2, 0, 1, 2, 0]


def test_queue_full_raises():
    with ProcessPool(2, 3) as pool:
        for n in range(3):
            pool.add_task("print_message", n)
        with pytest.raises(OverflowError):
            pool.add_task("print_message", 99)
        assert len(pool.submitted) == 3


def test_argument_out_of_range_is_rejected():
    with ProcessPool(1, 5) as pool:
        with pytest.raises(ValueError):
            pool.add_task("compute_square", 1 << 40)
        assert pool.submitted == ()


def test_submitted_records_tasks():
    with ProcessPool(2, 5) as pool:
        pool.add_task("compute_square", 3)
        pool.add_task("print_message", 7)
        assert pool.submitted == (Task("compute_square", 3), Task("print_message", 7))


def test_workers_run_tasks(capfd):
    with ProcessPool(2, 10) as pool:
        workers = set(pool.pids)
        pool.add_task("compute_square", 3)
        pool.add_task("print_message", 42)
    out = capfd.readouterr().out
    assert "Square of 3 is 9" in out
    assert "Task data is 42" in out
    assert f"Task performed by process {os.getpid()}" not in out
    assert len(workers) == 2


def test_unknown_task_is_reported(capfd):
    with ProcessPool(1, 5) as pool:
        pool.add_task("bogus", 1)
    assert "Unknown task: bogus" in capfd.readouterr().err


def test_long_name_is_truncated(capfd):
    with ProcessPool(1, 5) as pool:
        pool.add_task("x" * 300, 1)
    err = capfd.readouterr().err
    assert "Unknown task: " + "x" * (NAME_SIZE - 1) in err
    assert "x" * NAME_SIZE not in err


def test_shutdown_reaps_workers():
    pool = ProcessPool(3, 5)
    pool.start()
    pids = pool.pids
    assert len(pids) == 3
    pool.shutdown()
    assert pool.pids == []
    for pid in pids:
        with pytest.raises(ChildProcessError):
            os.waitpid(pid, os.WNOHANG)


def test_dead_worker_is_restarted(capfd):
    with ProcessPool(2, 5) as pool:
        old = pool.pids[0]
        os.kill(old, signal.SIGKILL)
        os.waitpid(old, 0)
        assert pool.add_task("print_message", 7) == 0
        new = pool.pids[0]
        assert new != old
        assert len(pool.pids) == 2
    assert "Task data is 7" in capfd.readouterr().out


def test_main_runs_all_tasks(capfd):
    assert main([]) == 0
    out = capfd.readouterr().out
    assert out.count("Square of 3 is 9") == 2
    assert out.count("Task data is 42") == 2
    assert out.count("Task data is 7") == 2