"""Allocation header that precedes every chunk handed out by a memory block."""

from __future__ import annotations

import threading

HEADER_SIZE = 64
"""Bytes taken by one header in front of each chunk."""

MAX_USE_COUNT = 255
"""Largest use count a header may reach."""

HEADER_TAG = b"allhead0"


class AllocHeader:
    """Size and reference count of one chunk inside a memory block.

    ``size`` is the size of the whole chunk, header included.
    """

    def __init__(self, size: int) -> None:
        self.size = size
        self.tag = HEADER_TAG
        self._use_count = 0
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"AllocHeader(size={self.size}, use_count={self._use_count})"

    def inc_use_count(self) -> None:
        """Add one reference; raise OverflowError past MAX_USE_COUNT."""
        with self._lock:
            if self._use_count >= MAX_USE_COUNT:
                raise OverflowError(
                    f"use count cannot be greater than {MAX_USE_COUNT}"
                )
            self._use_count += 1

    def dec_use_count(self) -> None:
        """Drop one reference; raise ValueError if none are left."""
        with self._lock:
            if self._use_count == 0:
                raise ValueError("use count is already zero")
            self._use_count -= 1

    def reset_use_count(self) -> None:
        """Mark the chunk as unused."""
        with self._lock:
            self._use_count = 0

    def use_count(self) -> int:
        """Return the current number of references."""
        with self._lock:
            return self._use_count

    def is_valid(self) -> bool:
        """Return True if the header carries the expected tag."""
        return self.tag[:1] == b"a"