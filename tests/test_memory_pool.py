import pytest

from syswrap.memory_pool import MemoryPool, PoolExhaustedError, main


@pytest.fixture(params=[(64, 100), (8, 3)], ids=["64x100", "8x3"])
def pool(request):
    with MemoryPool(*request.param) as mp:
        yield mp


def _drain(mp):
    return [mp.alloc() for _ in range(mp.capacity)]


def test_block_has_block_size(pool):
    assert len(pool.alloc()) == pool.block_size


def test_alloc_reduces_available(pool):
    pool.alloc()
    pool.alloc()
    assert pool.available() == pool.capacity - 2


def test_exhaustion_raises(pool):
    _drain(pool)
    assert pool.available() == 0
    with pytest.raises(PoolExhaustedError):
        pool.alloc()


def test_free_restores_available(pool):
    for block in _drain(pool):
        pool.free(block)
    assert pool.available() == pool.capacity


def test_last_freed_block_is_reused_first(pool):
    pool.alloc()
    block = pool.alloc()
    pool.free(block)
    assert pool.alloc() is block


def test_blocks_do_not_overlap(pool):
    first, *rest = _drain(pool)
    filled = b"\xff" * pool.block_size
    first[:] = filled
    assert bytes(first) == filled
    assert all(bytes(other) == bytes(pool.block_size) for other in rest)


def test_free_foreign_block_raises(pool):
    with MemoryPool(pool.block_size, pool.capacity) as other:
        foreign = other.alloc()
        with pytest.raises(ValueError):
            pool.free(foreign)
    assert pool.available() == pool.capacity


def test_double_free_raises(pool):
    block = pool.alloc()
    pool.free(block)
    with pytest.raises(ValueError):
        pool.free(block)
    assert pool.available() == pool.capacity


def test_closed_pool_rejects_use():
    mp = MemoryPool(8, 2)
    block = mp.alloc()
    mp.close()
    with pytest.raises(ValueError):
        mp.alloc()
    with pytest.raises(ValueError):
        block[0]


def test_negative_sizes_rejected():
    with pytest.raises(ValueError):
        MemoryPool(-1, 4)


def test_main_returns_zero():
    assert main([]) == 0