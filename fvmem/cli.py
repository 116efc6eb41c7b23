"""Benchmark of allocating, freeing and refilling chunks in a pool."""

from __future__ import annotations

import argparse
import random
import time
from dataclasses import dataclass
from typing import Sequence

from fvmem.pool import DEFAULT_MAX_GB, MemPool
from fvmem.ptr import SharedPtr, make_ptr


@dataclass
class TestPayload:
    """Small fixed-size object used to fill the pool."""

    __test__ = False
    SIZE = 16

    value: int
    tag: int = 1234


@dataclass
class BenchmarkResult:
    """Timings in milliseconds and counts of one benchmark run."""

    fill_ms: float
    maintenance_after_fill_ms: float
    delete_ms: float
    maintenance_after_delete_ms: float
    refill_ms: float
    maintenance_after_refill_ms: float
    delete_all_ms: float
    total_ms: float
    final_maintenance_ms: float
    allocated: int
    deleted: int
    refilled: int


def _ms(start: float, end: float) -> float:
    return (end - start) * 1000.0


def run_benchmark(
    pool: MemPool, count: int, delete_fraction: float = 0.25, seed: int | None = None
) -> BenchmarkResult:
    """Fill ``count`` slots, free random ones, refill them and free all."""
    if count < 1:
        raise ValueError("count must be positive")
    if not 0.0 <= delete_fraction <= 1.0:
        raise ValueError("delete_fraction must lie between 0 and 1")
    rng = random.Random(seed)
    points = [
        int(rng.random() * (count - 1)) for _ in range(int(count * delete_fraction))
    ]
    pool.maintenance()

    t0 = time.perf_counter()
    slots: list[int | None] = [
        pool.allocate(TestPayload.SIZE) for _ in range(count)
    ]
    t1 = time.perf_counter()
    pool.maintenance()
    t2 = time.perf_counter()
    deleted = 0
    for point in points:
        address = slots[point]
        if address is not None:
            pool.free(address)
            slots[point] = None
            deleted += 1
    t3 = time.perf_counter()
    pool.maintenance()
    t4 = time.perf_counter()
    refilled = 0
    for position, address in enumerate(slots):
        if address is None:
            slots[position] = pool.allocate(TestPayload.SIZE)
            refilled += 1
    t5 = time.perf_counter()
    pool.maintenance()
    t6 = time.perf_counter()
    for address in slots:
        if address is not None:
            pool.free(address)
    slots.clear()
    t7 = time.perf_counter()
    pool.maintenance()
    t8 = time.perf_counter()

    return BenchmarkResult(
        fill_ms=_ms(t0, t1),
        maintenance_after_fill_ms=_ms(t1, t2),
        delete_ms=_ms(t2, t3),
        maintenance_after_delete_ms=_ms(t3, t4),
        refill_ms=_ms(t4, t5),
        maintenance_after_refill_ms=_ms(t5, t6),
        delete_all_ms=_ms(t6, t7),
        total_ms=_ms(t0, t7),
        final_maintenance_ms=_ms(t7, t8),
        allocated=count,
        deleted=deleted,
        refilled=refilled,
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the benchmark and print its timings."""
    parser = argparse.ArgumentParser(prog="fvmem", description=__doc__)
    parser.add_argument("--count", type=int, default=4096)
    parser.add_argument("--delete-fraction", type=float, default=0.25)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--max-gb", type=int, default=DEFAULT_MAX_GB)
    args = parser.parse_args(argv)

    print("FV memory pool benchmark")
    pool = MemPool(args.max_gb)
    result = run_benchmark(pool, args.count, args.delete_fraction, args.seed)
    print("=== RawPointers Result:")
    print(f" - Filling Table: {result.fill_ms:.0f}")
    print(f" - MemPool maintenance: {result.maintenance_after_fill_ms:.0f}")
    print(f" - Deleting Random Points: {result.delete_ms:.0f}")
    print(f" - MemPool maintenance: {result.maintenance_after_delete_ms:.0f}")
    print(f" - Filling random points: {result.refill_ms:.0f}")
    print(f" - MemPool maintenance: {result.maintenance_after_refill_ms:.0f}")
    print(f" - Delete All: {result.delete_all_ms:.0f}")
    print(f" - Total Raw Pointer Time: {result.total_ms:.0f}")
    print(f" - Mempool Maintenance: {result.final_maintenance_ms:.0f}")

    single = pool.allocate(TestPayload.SIZE)
    pool.place(1000)
    pool.place(1000)
    pool.free(single)

    with make_ptr(pool, TestPayload, 1):
        pass
    with SharedPtr(pool, pool.allocate(TestPayload.SIZE), TestPayload(23)):
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())