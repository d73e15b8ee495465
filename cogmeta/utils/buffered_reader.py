#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ******************************************************************************
# Project: COG Metadata Reader (cogmeta)
# Author: Eric Robeck <robeckgeo@gmail.com>
#
# Copyright (c) 2025, Eric Robeck
# Licensed under the MIT License
# ******************************************************************************

"""
Buffered Range Reader.

Wraps a range source with a cache of previously fetched bytes and an adaptive
minimum fetch size. Directory parsing issues many small reads close to each
other (2-byte counts, 12-byte entries, 4-byte offsets); padding each request
up to a growing minimum size turns most of them into cache hits.

Fetch policy:
    - A request fully covered by cached bytes is served without I/O.
    - Otherwise exactly one fetch of max(length, m) bytes is issued at the
      requested offset, and m becomes min(m * g, M) for the next fetch.
    - Bytes beyond the requested window are kept for later reads.

A reader belongs to a single parse and must not be shared between
concurrently running parses.

Classes:
    BufferedRangeReader: The caching reader.
"""
import bisect
import logging
from typing import List, Optional, Tuple

from cogmeta.utils.config_loader import config
from cogmeta.utils.range_source import RangeSource

logger = logging.getLogger(__name__)


class BufferedRangeReader:
    """
    Random-access reader over a RangeSource with a growing fetch window.

    Args:
        source: The range source to read from.
        initial_fetch_size: Minimum size of the first fetch (m).
        growth_factor: Multiplier applied to m after each fetch (g).
        max_fetch_size: Upper bound for m (M). Requests larger than M are
            still fetched in full.

    Example:
        >>> reader = BufferedRangeReader(source, initial_fetch_size=100, growth_factor=2, max_fetch_size=1000)
        >>> header = await reader.get_range(0, 8)   # fetches bytes [0, 100)
        >>> count = await reader.get_range(8, 2)    # served from cache
    """

    def __init__(self, source: RangeSource, initial_fetch_size: Optional[int] = None,
                 growth_factor: Optional[int] = None, max_fetch_size: Optional[int] = None):
        self.source = source
        self.min_fetch_size: int = initial_fetch_size if initial_fetch_size is not None else config.get("reader.initial_fetch_size", 4096)
        self.growth_factor: int = growth_factor if growth_factor is not None else config.get("reader.growth_factor", 2)
        self.max_fetch_size: int = max_fetch_size if max_fetch_size is not None else config.get("reader.max_fetch_size", 4 * 1024 * 1024)

        if self.min_fetch_size < 1:
            raise ValueError(f"initial_fetch_size must be positive, got {self.min_fetch_size}")
        if self.growth_factor < 1:
            raise ValueError(f"growth_factor must be at least 1, got {self.growth_factor}")
        if self.max_fetch_size < self.min_fetch_size:
            raise ValueError(
                f"max_fetch_size ({self.max_fetch_size}) must not be smaller than initial_fetch_size ({self.min_fetch_size})"
            )

        # Disjoint, non-adjacent segments sorted by start offset
        self._starts: List[int] = []
        self._segments: List[bytes] = []

        self.fetch_sizes: List[int] = []
        self.cache_hits = 0

    @property
    def fetch_count(self) -> int:
        return len(self.fetch_sizes)

    @property
    def cached_bytes(self) -> int:
        return sum(len(s) for s in self._segments)

    def cached_ranges(self) -> List[Tuple[int, int]]:
        """Return the cached `(start, end)` windows in offset order."""
        return [(start, start + len(seg)) for start, seg in zip(self._starts, self._segments)]

    def _lookup(self, offset: int, length: int) -> Optional[bytes]:
        """Return the requested bytes if a single cached segment covers them."""
        i = bisect.bisect_right(self._starts, offset) - 1
        if i < 0:
            return None
        start = self._starts[i]
        segment = self._segments[i]
        if offset + length <= start + len(segment):
            return segment[offset - start:offset - start + length]
        return None

    def _store(self, offset: int, data: bytes):
        """Insert fetched bytes, merging with every overlapping or adjacent segment."""
        if not data:
            return
        end = offset + len(data)
        lo = bisect.bisect_left(self._starts, offset)
        # The previous segment may reach into (or touch) the new one
        if lo > 0 and self._starts[lo - 1] + len(self._segments[lo - 1]) >= offset:
            lo -= 1
        hi = lo
        while hi < len(self._starts) and self._starts[hi] <= end:
            hi += 1

        if lo == hi:
            self._starts.insert(lo, offset)
            self._segments.insert(lo, bytes(data))
            return

        merged_start = min(offset, self._starts[lo])
        last_end = self._starts[hi - 1] + len(self._segments[hi - 1])
        merged_end = max(end, last_end)
        buffer = bytearray(merged_end - merged_start)
        for start, segment in zip(self._starts[lo:hi], self._segments[lo:hi]):
            buffer[start - merged_start:start - merged_start + len(segment)] = segment
        # Freshly fetched bytes take precedence
        buffer[offset - merged_start:end - merged_start] = data

        self._starts[lo:hi] = [merged_start]
        self._segments[lo:hi] = [bytes(buffer)]

    async def get_range(self, offset: int, length: int) -> bytes:
        """
        Return exactly `length` bytes starting at `offset`.

        Raises:
            ValueError: If offset or length is negative.
            TransportError: Propagated unchanged from the range source.
        """
        if offset < 0 or length < 0:
            raise ValueError(f"Invalid range: offset={offset}, length={length}")
        if length == 0:
            return b''

        cached = self._lookup(offset, length)
        if cached is not None:
            self.cache_hits += 1
            logger.debug(f"Cache hit: {length} bytes at offset {offset}")
            return cached

        fetch_size = max(length, self.min_fetch_size)
        logger.debug(f"Cache miss: fetching {fetch_size} bytes at offset {offset} (requested {length})")
        data = await self.source.fetch(offset, fetch_size, min_length=length)
        self.fetch_sizes.append(fetch_size)
        self.min_fetch_size = min(self.min_fetch_size * self.growth_factor, self.max_fetch_size)

        self._store(offset, data)
        return bytes(data[:length])
