# fvmem

`fvmem` models a block-based memory pool. A pool owns 256 block slots. Each
block in use covers a fixed range of integer addresses (64 MiB by default).
Every chunk in a block starts with an allocation header, which records the
chunk's size (header included) and its use count. A chunk that is freed
gets a use count of zero. A later maintenance pass joins neighbouring free
chunks and works out the largest free chunk again. Blocks that are wholly
free are released, except one, which the pool keeps ready as a spare.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Usage

```python
from fvmem.cli import TestPayload
from fvmem.pool import MemPool
from fvmem.ptr import make_ptr

pool = MemPool(1)

address = pool.allocate(64)          # data address inside a block
header = pool.header_for(address)    # the AllocHeader in front of it
print(header.use_count())            # 1

pool.free(address)                   # use count goes back to zero
pool.maintenance()                   # join free chunks, keep one spare block

for stats in pool.stats():           # one MemStats per block slot
    if stats.pool_size:
        print(stats.pool_id, stats.max_free_size, len(stats.allocations))

ptr = make_ptr(pool, TestPayload, 1)
copy = ptr.copy()
print(copy.use_count())              # 2
copy.release()
ptr.release()
```

`MemPool.allocate(size)` adds room for the header. If the pool has no
space, it raises `MemoryError`. `MemPool.place(size)` takes a size that
already includes the header. If it cannot place the chunk, it returns
`None`. `get_instance()` in `fvmem.pool` returns one pool that the whole
process shares, and creates it the first time it is called.

`SharedPtr` also works as a context manager. When the `with` block ends,
it releases its reference.

### Modules

- `fvmem.header`: `AllocHeader`, the size and use-count record kept in
  front of every chunk. It is thread-safe. It raises `OverflowError` when
  the count would go past 255, and `ValueError` when a count of zero is
  decremented.
- `fvmem.block`: `MemBlock`, one address range split into chunks that each
  start with a header, and `AllocStats`, which describes one chunk.
- `fvmem.pool`: `MemPool`, `MemStats` and `get_instance()`.
- `fvmem.ptr`: `SharedPtr` and `make_ptr`. These are reference-counted
  handles whose count lives in the chunk header.
- `fvmem.cli`: the benchmark, with `run_benchmark`, `BenchmarkResult` and
  `TestPayload`.

## Benchmark

The `fvmem` command works through these steps:

1. It fills a table with small allocations.
2. It frees entries at random.
3. It fills the gaps again.
4. It frees everything.

Between the steps it runs pool maintenance. It prints the time each phase
took, in milliseconds:

```
fvmem
fvmem --count 100000 --delete-fraction 0.5 --seed 1 --max-gb 4
```

The options are:

- `--count`: the number of table slots. The default is 4096.
- `--delete-fraction`: the share of random free operations, relative to
  `--count`. The default is 0.25.
- `--seed`: the random seed.
- `--max-gb`: the pool budget in GiB. The default is 16.

## What it does not do

Blocks and chunks are bookkeeping only. No bytes are reserved or stored,
and addresses are plain integers. The pool does not replace or hook
Python's own memory allocation. Values held by a `SharedPtr` live as
ordinary Python objects, next to the chunk that is booked for them.