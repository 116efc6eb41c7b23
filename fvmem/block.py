"""A single memory block that hands out chunks from a simulated buffer."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from fvmem.header import HEADER_SIZE, AllocHeader

DEFAULT_BLOCK_SIZE = 64 * 1024 * 1024
"""Size of a block when no other size is asked for."""

_ADDRESS_STRIDE = 1 << 40

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllocStats:
    """One chunk of a block: header address, references and size."""

    address: int
    use_count: int
    size: int


class MemBlock:
    """A contiguous region split into header-prefixed chunks.

    Addresses are plain integers: a block with index ``i`` starts at a fixed
    base derived from ``i``, and every chunk is located by its offset.
    """

    def __init__(self) -> None:
        self.index = 0
        self.size = 0
        self.start = 0
        self.max_free_size = 0
        self.maintenance_needed = False
        self._headers: dict[int, AllocHeader] | None = None
        self._last_insert: int | None = None
        self._lock = threading.Lock()

    def init(self, index: int, block_size: int = DEFAULT_BLOCK_SIZE) -> bool:
        """Set up the buffer; return False if it cannot hold a header."""
        with self._lock:
            self.index = index
            self.size = block_size
            if block_size < HEADER_SIZE:
                self._headers = None
                return False
            self.start = (index + 1) * _ADDRESS_STRIDE
            self.max_free_size = block_size
            first = AllocHeader(0)
            first.inc_use_count()
            self._headers = {0: first}
            self._last_insert = 0
            return True

    def release(self) -> None:
        """Drop the buffer so the block is no longer in use."""
        _log.info("---- Memory releasing (block %d) ----", self.index)
        with self._lock:
            self._headers = None
            self._last_insert = None

    def in_use(self) -> bool:
        """Return True while the block owns a buffer."""
        return self._headers is not None

    def is_free(self) -> bool:
        """Return True if the whole buffer is one unused chunk."""
        if self._headers is None:
            return False
        return self._headers[0].size == self.size

    def place(self, size: int) -> int | None:
        """Reserve a chunk of ``size`` bytes, header included.

        Return the address just after the chunk's header, or None if the
        block has no room, has no buffer, or is busy with maintenance.
        """
        if size < 1:
            raise ValueError("size must be positive")
        if not self._lock.acquire(blocking=False):
            return None
        try:
            headers = self._headers
            if headers is None or size > self.max_free_size - HEADER_SIZE:
                return None
            offset = self._last_insert if self._last_insert is not None else 0
            while offset < self.size:
                hdr = headers[offset]
                if offset == 0 and hdr.use_count() == 1 and hdr.size == 0:
                    hdr.reset_use_count()
                    hdr.size = self.size
                if hdr.use_count() == 0 and hdr.size >= size:
                    available = hdr.size - size
                    if available < HEADER_SIZE:
                        self._last_insert = None
                        size = hdr.size
                    else:
                        next_offset = offset + size
                        headers[next_offset] = AllocHeader(available)
                        if hdr.size == self.max_free_size:
                            self.max_free_size = available
                        self._last_insert = next_offset
                    hdr.inc_use_count()
                    hdr.size = size
                    self.maintenance_needed = True
                    return self.start + offset + HEADER_SIZE
                if hdr.size == 0:
                    break
                offset += hdr.size
            return None
        finally:
            self._lock.release()

    def ptr_deleted(self) -> None:
        """Note that a chunk was given back and maintenance is due."""
        with self._lock:
            self.maintenance_needed = True

    def contains(self, address: int) -> bool:
        """Return True if ``address`` lies strictly inside the buffer."""
        if self._headers is None:
            return False
        return self.start < address < self.start + self.size

    def header_at(self, address: int) -> AllocHeader:
        """Return the header of the chunk whose data starts at ``address``."""
        if self._headers is None:
            raise ValueError("block has no buffer")
        offset = address - HEADER_SIZE - self.start
        try:
            return self._headers[offset]
        except KeyError:
            raise ValueError(f"no chunk starts at address {address:#x}") from None

    def maintenance(self) -> None:
        """Merge runs of unused chunks and recompute the largest free chunk."""
        with self._lock:
            headers = self._headers
            if headers is None:
                return
            self._last_insert = None
            max_free = 0
            offset = 0
            while offset < self.size:
                hdr = headers[offset]
                if offset == 0 and hdr.use_count() == 1 and hdr.size == 0:
                    return
                if hdr.use_count() != 0:
                    if hdr.size == 0:
                        break
                    offset += hdr.size
                    continue
                if self._last_insert is None:
                    self._last_insert = offset
                free_size = hdr.size
                run_start = offset
                offset += hdr.size
                absorbed: list[int] = []
                while offset < self.size:
                    following = headers[offset]
                    if following.use_count() != 0:
                        break
                    free_size += following.size
                    absorbed.append(offset)
                    if following.size == 0:
                        return
                    offset += following.size
                hdr.size = free_size
                for dead in absorbed:
                    del headers[dead]
                if free_size == 0:
                    if run_start == offset:
                        break
                    continue
                max_free = max(max_free, free_size)
            self.max_free_size = max_free

    def allocations(self) -> list[AllocStats]:
        """Return every chunk of the buffer in address order."""
        with self._lock:
            headers = self._headers
            if headers is None:
                return []
            result = []
            offset = 0
            while offset < self.size:
                hdr = headers[offset]
                result.append(
                    AllocStats(self.start + offset, hdr.use_count(), hdr.size)
                )
                if hdr.size == 0:
                    break
                offset += hdr.size
            return result