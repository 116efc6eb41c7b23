"""A pool of memory blocks with a process-wide default instance."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from fvmem.block import DEFAULT_BLOCK_SIZE, AllocStats, MemBlock
from fvmem.header import HEADER_SIZE, AllocHeader

BLOCK_COUNT = 256
"""Number of block slots a pool owns."""

DEFAULT_MAX_GB = 16


@dataclass
class MemStats:
    """Summary of one block slot of a pool."""

    pool_id: int
    pool_size: int = 0
    pool_start: int = 0
    max_free_size: int = 0
    allocations: list[AllocStats] = field(default_factory=list)


class MemPool:
    """A fixed set of memory blocks that are created and released on demand."""

    def __init__(self, max_gb: int = DEFAULT_MAX_GB) -> None:
        self.blocks = [MemBlock() for _ in range(BLOCK_COUNT)]
        self.initialized = False
        self.block_budget = 0
        self.init(max_gb)

    def init(self, max_gb: int) -> None:
        """Compute the block budget and make sure a free block exists."""
        self.block_budget = max_gb * 1024 * 1024 * 1024 // DEFAULT_BLOCK_SIZE
        self.maintenance()
        self.initialized = True

    def place(self, size: int) -> int | None:
        """Reserve ``size`` bytes (header included); return an address or None."""
        for block in self.blocks:
            address = block.place(size)
            if address is not None:
                return address

        if size > DEFAULT_BLOCK_SIZE:
            block_size = DEFAULT_BLOCK_SIZE
            while block_size < size:
                block_size *= 2
            for index, block in enumerate(self.blocks):
                if not block.in_use():
                    if not block.init(index, block_size):
                        block.init(index, size)
                    return block.place(size)

        for index, block in enumerate(self.blocks):
            if not block.in_use():
                block.init(index)
                address = block.place(size)
                if address is not None:
                    return address
        return None

    def allocate(self, size: int) -> int:
        """Reserve room for ``size`` bytes of data; raise MemoryError if full."""
        if size < 0:
            raise ValueError("size must not be negative")
        address = self.place(max(size, 1) + HEADER_SIZE)
        if address is None:
            raise MemoryError(f"cannot place {size} bytes in the pool")
        return address

    def free(self, address: int) -> None:
        """Mark the chunk at ``address`` as unused."""
        header = self.header_for(address)
        if header.is_valid():
            header.reset_use_count()

    def header_for(self, address: int) -> AllocHeader:
        """Return the header of the chunk whose data starts at ``address``."""
        for block in self.blocks:
            if block.contains(address):
                return block.header_at(address)
        raise ValueError(f"address {address:#x} is not inside the pool")

    def maintenance(self) -> None:
        """Merge free chunks, keep one free block and release the others."""
        free_found = False
        for block in self.blocks:
            block.maintenance()
            if block.is_free():
                if not free_found:
                    free_found = True
                    continue
                block.release()

        if not free_found:
            for index, block in enumerate(self.blocks):
                if not block.in_use():
                    block.init(index)
                    break

    def maintenance_for(self, address: int) -> None:
        """Run maintenance only on the block holding ``address``."""
        for block in self.blocks:
            if block.contains(address):
                block.maintenance()

    def stats(self) -> list[MemStats]:
        """Return one entry per block slot; unused slots are all zero."""
        result = []
        for index, block in enumerate(self.blocks):
            if block.in_use():
                result.append(
                    MemStats(
                        pool_id=index,
                        pool_size=block.size,
                        pool_start=block.start,
                        max_free_size=block.max_free_size,
                        allocations=block.allocations(),
                    )
                )
            else:
                result.append(MemStats(pool_id=index))
        return result


_instance: MemPool | None = None
_instance_lock = threading.Lock()


def get_instance() -> MemPool:
    """Return the shared pool, creating it on first use."""
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = MemPool()
        return _instance