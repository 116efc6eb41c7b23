import pytest

from fvmem.block import DEFAULT_BLOCK_SIZE, AllocStats, MemBlock
from fvmem.header import HEADER_SIZE

BLOCK = 1024


@pytest.fixture
def block():
    b = MemBlock()
    assert b.init(0, BLOCK) is True
    return b


def test_init_with_default_block_size():
    b = MemBlock()
    assert b.init(0, DEFAULT_BLOCK_SIZE) is True
    assert b.size == 64 * 1024 * 1024
    assert b.max_free_size == 64 * 1024 * 1024


def test_new_block_is_not_in_use():
    b = MemBlock()
    assert b.in_use() is False
    assert b.is_free() is False
    assert b.place(100) is None


def test_init_sets_up_buffer(block):
    assert block.in_use() is True
    assert block.size == BLOCK
    assert block.max_free_size == BLOCK
    # freshly created buffer is not yet one free chunk
    assert block.is_free() is False


def test_init_fails_when_too_small():
    b = MemBlock()
    assert b.init(0, HEADER_SIZE - 1) is False
    assert b.in_use() is False


def test_first_place_starts_after_header(block):
    address = block.place(100)
    assert address == block.start + HEADER_SIZE
    assert block.maintenance_needed is True


def test_consecutive_places_are_adjacent(block):
    first = block.place(100)
    second = block.place(100)
    assert second - first == 100


def test_placed_chunk_header(block):
    address = block.place(100)
    hdr = block.header_at(address)
    assert hdr.size == 100
    assert hdr.use_count() == 1
    assert hdr.is_valid()


def test_allocations_cover_whole_block(block):
    block.place(100)
    block.place(200)
    allocs = block.allocations()
    assert sum(a.size for a in allocs) == BLOCK
    assert [a.use_count for a in allocs] == [1, 1, 0]
    assert allocs[0] == AllocStats(block.start, 1, 100)


def test_place_too_large_returns_none(block):
    assert block.place(BLOCK) is None


def test_place_rejects_non_positive(block):
    with pytest.raises(ValueError):
        block.place(0)


def test_maintenance_merges_free_chunks(block):
    a = block.place(100)
    b = block.place(100)
    block.header_at(a).reset_use_count()
    block.header_at(b).reset_use_count()
    block.maintenance()
    assert block.is_free() is True
    assert block.allocations() == [AllocStats(block.start, 0, BLOCK)]
    assert block.max_free_size == BLOCK


def test_maintenance_keeps_used_chunks(block):
    a = block.place(100)
    b = block.place(100)
    block.header_at(a).reset_use_count()
    block.maintenance()
    allocs = block.allocations()
    assert [a.use_count for a in allocs] == [0, 1, 0]
    assert sum(x.size for x in allocs) == BLOCK
    assert block.header_at(b).use_count() == 1
    assert block.max_free_size == BLOCK - 200


def test_freed_chunk_is_reused(block):
    a = block.place(100)
    block.place(100)
    block.header_at(a).reset_use_count()
    block.maintenance()
    assert block.place(100) == a


def test_maintenance_on_fresh_block_changes_nothing(block):
    block.maintenance()
    assert block.max_free_size == BLOCK
    assert block.place(100) == block.start + HEADER_SIZE


def test_contains_is_strict(block):
    assert block.contains(block.start) is False
    assert block.contains(block.start + 1) is True
    assert block.contains(block.start + BLOCK - 1) is True
    assert block.contains(block.start + BLOCK) is False


def test_blocks_with_different_indexes_do_not_overlap():
    a, b = MemBlock(), MemBlock()
    a.init(0, BLOCK)
    b.init(1, BLOCK)
    addr = a.place(100)
    assert a.contains(addr) is True
    assert b.contains(addr) is False


def test_header_at_unknown_address_raises(block):
    address = block.place(100)
    with pytest.raises(ValueError):
        block.header_at(address + 1)


def test_release_drops_buffer(block):
    address = block.place(100)
    block.release()
    assert block.in_use() is False
    assert block.contains(address) is False
    assert block.allocations() == []
    with pytest.raises(ValueError):
        block.header_at(address)


def test_ptr_deleted_flags_maintenance():
    b = MemBlock()
    b.init(3, BLOCK)
    assert b.maintenance_needed is False
    b.ptr_deleted()
    assert b.maintenance_needed is True
    assert b.index == 3