"""Reference-counted handle whose count lives in the pool chunk header."""

from __future__ import annotations

import sys
from typing import Any, Callable, Generic, TypeVar

from fvmem.header import AllocHeader
from fvmem.pool import MemPool

T = TypeVar("T")


class SharedPtr(Generic[T]):
    """Shared handle to a value stored in a pool chunk.

    The chunk's header holds the reference count; a new handle takes over
    the count set by the allocation, and copies add to it.
    """

    def __init__(self, pool: MemPool, address: int | None, value: T | None) -> None:
        self.pool = pool
        self.address = address
        self._value = value
        self._header: AllocHeader | None = (
            pool.header_for(address) if address is not None else None
        )

    def __enter__(self) -> SharedPtr[T]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    def copy(self) -> SharedPtr[T]:
        """Return another handle to the same chunk, adding a reference."""
        other: SharedPtr[T] = SharedPtr(self.pool, None, self._value)
        other.address = self.address
        other._header = self._header
        if other._header is not None:
            other._header.inc_use_count()
        return other

    def use_count(self) -> int:
        """Return the number of references held on the chunk."""
        return self._header.use_count() if self._header is not None else 0

    def get(self) -> T | None:
        """Return the stored value."""
        return self._value

    def assign(self, other: SharedPtr[T]) -> None:
        """Point this handle at the chunk of ``other``."""
        if self.address == other.address:
            return
        if self.address is not None and self._header is not None:
            self._header.dec_use_count()
        self.address = other.address
        self._header = other._header
        self._value = other._value
        if self.address is not None and self._header is not None:
            self._header.inc_use_count()

    def release(self) -> None:
        """Drop this handle's reference; later calls do nothing."""
        if self._header is not None:
            header = self._header
            self._header = None
            self.address = None
            self._value = None
            header.dec_use_count()


def make_ptr(pool: MemPool, factory: Callable[..., T], *args: Any) -> SharedPtr[T]:
    """Build a value with ``factory(*args)`` in a new pool chunk."""
    value = factory(*args)
    address = pool.allocate(sys.getsizeof(value))
    return SharedPtr(pool, address, value)