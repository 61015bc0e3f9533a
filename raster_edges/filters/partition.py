#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Row partitioning for parallel raster filters.

The row range of a raster is split into contiguous blocks, one per worker.
Every row belongs to exactly one block, so a pool that emits one result per
row of its blocks emits exactly `rows` results.
"""
from typing import List, NamedTuple

from raster_edges.core.exceptions import ConfigurationError


class RowBlock(NamedTuple):
    """Half-open range of row indices ``[start, end)`` handled by one worker."""
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start

    def rows(self) -> range:
        return range(self.start, self.end)


def partition_rows(rows: int, worker_count: int) -> List[RowBlock]:
    """
    Split ``[0, rows)`` into contiguous blocks for `worker_count` workers.

    Each block holds ``rows // worker_count`` rows except the last, which
    extends to `rows` and absorbs the remainder. Empty blocks are dropped, so
    fewer rows than workers gives a single block.

    Parameters
    ----------
    rows : int
        Number of rows in the raster.
    worker_count : int
        Size of the worker pool, at least 1.

    Returns
    -------
    list of RowBlock
        Disjoint blocks in increasing order covering every row exactly once.
    """
    if worker_count < 1:
        raise ConfigurationError(f"Worker count must be at least 1, got {worker_count}")
    if rows < 0:
        raise ValueError(f"Row count must be non-negative, got {rows}")

    block_size = rows // worker_count
    blocks = []
    for i in range(worker_count):
        start = i * block_size
        end = rows if i == worker_count - 1 else start + block_size
        if end > start:
            blocks.append(RowBlock(start, end))
    return blocks
