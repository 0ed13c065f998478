import pytest

from syswrap.garbage import GarbageCollector


@pytest.fixture
def gc():
    return GarbageCollector()


def test_alloc_returns_zeroed_buffer(gc):
    assert gc.alloc(16) == bytearray(16)
    assert len(gc) == 1


@pytest.mark.parametrize("count", [1, 2, 5])
def test_collect_drops_unmarked(gc, count):
    for _ in range(count):
        gc.alloc(4)
    assert gc.collect() == count
    assert len(gc) == 0


def test_marked_block_survives_one_collection(gc):
    kept = gc.alloc(4)
    gc.alloc(4)
    gc.mark(kept)
    assert (gc.collect(), len(gc)) == (1, 1)
    assert (gc.collect(), len(gc)) == (1, 0)


def test_mark_uses_identity_not_content(gc):
    first = gc.alloc(4)
    gc.alloc(4)
    for _ in range(2):
        gc.mark(first)
        gc.collect()
    assert len(gc) == 1


def test_mark_unknown_block_is_ignored(gc):
    gc.alloc(4)
    gc.mark(bytearray(4))
    assert gc.collect() == 1
    assert len(gc) == 0


def test_cleanup_forgets_everything(gc):
    gc.mark(gc.alloc(4))
    gc.cleanup()
    assert len(gc) == 0
    assert gc.collect() == 0


def test_negative_size_rejected(gc):
    with pytest.raises(ValueError):
        gc.alloc(-1)
    assert len(gc) == 0