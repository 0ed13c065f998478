import os

import pytest

from syswrap.filetracker import FileTracker, UntrackedDescriptorError, main

FLAGS = os.O_CREAT | os.O_WRONLY


@pytest.fixture
def tracker():
    with FileTracker() as files:
        yield files


@pytest.fixture
def open_file(tracker, tmp_path):
    def _open(name="a.txt"):
        return tracker.open(tmp_path / name, FLAGS, 0o644)

    return _open


def _assert_closed(fd):
    with pytest.raises(OSError):
        os.fstat(fd)


def test_open_tracks_descriptor(tracker, open_file, tmp_path):
    fd = open_file()
    assert fd in tracker
    assert len(tracker) == 1
    assert (tmp_path / "a.txt").exists()


def test_close_untracks_descriptor(tracker, open_file):
    fd = open_file()
    tracker.close(fd)
    assert fd not in tracker
    assert len(tracker) == 0
    _assert_closed(fd)


def test_close_twice_raises(tracker, open_file):
    fd = open_file()
    tracker.close(fd)
    with pytest.raises(UntrackedDescriptorError) as info:
        tracker.close(fd)
    assert info.value.fd == fd


def test_close_unknown_descriptor_message(tracker):
    with pytest.raises(UntrackedDescriptorError) as info:
        tracker.close(100)
    assert str(info.value) == "File descriptor not found in the file manager : 100."


@pytest.mark.parametrize("count", [3, 12])
def test_close_all_after_many_opens(tracker, open_file, count):
    fds = [open_file(f"f{n}.txt") for n in range(count)]
    assert len(tracker) == count
    assert all(fd in tracker for fd in fds)
    tracker.close_all()
    assert len(tracker) == 0
    for fd in fds:
        _assert_closed(fd)


def test_failed_open_raises_and_tracks_nothing(tracker, tmp_path):
    with pytest.raises(FileNotFoundError):
        tracker.open(tmp_path / "missing" / "x.txt", os.O_RDONLY, 0)
    assert len(tracker) == 0


def test_close_failure_still_untracks(tracker, open_file):
    fd = open_file()
    os.close(fd)
    with pytest.raises(OSError):
        tracker.close(fd)
    assert fd not in tracker


def test_main_creates_files_and_reports_unknown(tmp_path, capsys):
    assert main([str(tmp_path)]) == 0
    assert {"file1.txt", "file2.txt"} <= {p.name for p in tmp_path.iterdir()}
    err = capsys.readouterr().err
    assert "File descriptor not found in the file manager : 100." in err