"""
Log-frequency geometry shared by both visualisations.

Bin 0 is the DC bin and has no place on a log axis, so it is folded into
bin 1 everywhere below.
"""

import math
from typing import NamedTuple

import numpy as np


class FrequencyBucket(NamedTuple):
    """A contiguous range of bins, ``start`` inclusive, ``end`` exclusive."""

    start: int
    end: int


def _log_breakpoint(t, bin_count):
    # exp(ln(1) + (ln(n) - ln(1)) * t), nudged so exact powers do not floor one short
    value = math.exp(math.log(1) + (math.log(bin_count) - math.log(1)) * t)
    return max(1, math.floor(value + 1e-9))


def bucketize(bin_count, bucket_count):
    """
    Partition the bins into ``bucket_count`` log-spaced buckets.

    Buckets tile: each starts where the previous one ended. When rounding
    collapses two breakpoints the bucket is widened to one bin, and every
    end is capped so later buckets still get at least one bin.
    """
    if bin_count < 1 or bucket_count < 1:
        raise ValueError(
            f"bin_count and bucket_count must be positive, got {bin_count}, {bucket_count}"
        )

    # Too few bins above DC to give every bucket one: let bin 0 in.
    first = 1 if bin_count - 1 >= bucket_count else 0

    buckets = []
    start = first
    for i in range(bucket_count):
        if start >= bin_count:
            buckets.append(FrequencyBucket(bin_count, bin_count))
            continue

        remaining = bucket_count - 1 - i
        end = max(start + 1, _log_breakpoint((i + 1) / bucket_count, bin_count))
        end = min(end, max(start + 1, bin_count - remaining), bin_count)
        if remaining == 0:
            end = bin_count

        buckets.append(FrequencyBucket(start, end))
        start = end

    return buckets


def bar_width(width, bucket_count, gap=1):
    """Uniform bar width for laying ``bucket_count`` bars across ``width`` pixels."""
    if bucket_count < 1:
        return max(1, width)
    return max(1, (width - (bucket_count - 1) * gap) // bucket_count)


def _round_half_up(x):
    return math.floor(x + 0.5)


def bin_to_position(bin_index, bin_count, height):
    """
    Map a bin to a pixel row: high bins near row 0, low bins near the bottom.
    """
    if height <= 1:
        return 0
    idx = 1 if bin_index == 0 else bin_index
    if bin_count <= 1 or idx < 1:
        t = 0.0
    else:
        t = math.log(idx) / math.log(bin_count)
    y = _round_half_up((1 - t) * (height - 1))
    return min(height - 1, max(0, y))


def bin_positions(bin_count, height):
    """
    Rows for every bin at once, same mapping as ``bin_to_position``.
    """
    if height <= 1 or bin_count <= 1:
        return np.full(max(bin_count, 0), max(height - 1, 0), dtype=np.int32)

    idx = np.arange(bin_count, dtype=np.float64)
    idx[0] = 1.0
    t = np.log(idx) / np.log(bin_count)
    rows = np.floor((1 - t) * (height - 1) + 0.5)
    return np.clip(rows, 0, height - 1).astype(np.int32)
