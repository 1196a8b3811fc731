# template_tracker/history.py
from __future__ import annotations

"""
Rolling per-bucket hit counter.

ActivityHistogram keeps `capacity = window / bucket_seconds` integer buckets
in a ring addressed by `floor(time / bucket_seconds) mod capacity`. The ring
always holds the `capacity` buckets ending at the bucket of `last_write_time`;
any address outside that span reads as zero.

A hit that lands several buckets after the previous write is spread evenly
over every bucket entered since then (see partition()). When the gap exceeds
the window only the newest `capacity` shares are kept.

Time is in seconds (as returned by time.time()).
"""

import time as _time
from typing import Optional, Sequence

import numpy as np

from .constants import BUCKET_SECONDS, HISTORY_WINDOW
from .core_types import Buckets
from .utils import warn


def partition(total: int, parts: int, keep: Optional[int] = None) -> Buckets:
    """
    Split `total` into `parts` near-equal integers.
    The first `total % parts` parts get one extra; the sum is exactly `total`.

    With `keep`, only the last `keep` parts are built and returned.
    """
    if parts <= 0:
        raise ValueError("parts must be positive")
    quotient, remainder = divmod(int(total), parts)
    count = parts if keep is None else max(0, min(parts, keep))
    skipped = parts - count
    out = np.full(count, quotient, dtype=np.int64)
    out[: max(0, remainder - skipped)] += 1
    return out


class ActivityHistogram:
    """Fixed-capacity ring of time buckets. Single writer; not thread-safe."""

    def __init__(
        self,
        window: float = HISTORY_WINDOW,
        bucket_seconds: float = BUCKET_SECONDS,
        now: Optional[float] = None,
    ):
        capacity = int(window // bucket_seconds)
        if capacity < 1:
            raise ValueError("window must hold at least one bucket")
        self.bucket_seconds = float(bucket_seconds)
        self.capacity = capacity
        self.last_write_time = _time.time() if now is None else float(now)
        self._data: Buckets = np.zeros(capacity, dtype=np.int64)
        self._recorded = False

    @property
    def window(self) -> float:
        return self.capacity * self.bucket_seconds

    def address(self, t: float) -> int:
        """Absolute bucket address of time t."""
        return int(t // self.bucket_seconds)

    def _live(self, addresses: np.ndarray) -> np.ndarray:
        last = self.address(self.last_write_time)
        return (addresses > last - self.capacity) & (addresses <= last)

    def hit(self, delta: int, time: Optional[float] = None) -> None:
        """Record `delta` hits at `time` (default now)."""
        now = _time.time() if time is None else float(time)
        last = self.address(self.last_write_time)
        current = self.address(now)
        self._recorded = True

        if current <= last:
            # Same bucket, or a late write that is still inside the window.
            if current > last - self.capacity:
                self._data[current % self.capacity] += int(delta)
            if now > self.last_write_time:
                self.last_write_time = now
            return

        shares = partition(delta, current - last, keep=self.capacity)
        first = current - shares.size + 1
        slots = np.arange(first, current + 1) % self.capacity
        self._data[slots] = shares
        self.last_write_time = now

    def get(self, time: Optional[float] = None) -> int:
        """Bucket value at `time` (default now); zero outside the window."""
        t = _time.time() if time is None else float(time)
        address = self.address(t)
        last = self.address(self.last_write_time)
        if not last - self.capacity < address <= last:
            return 0
        return int(self._data[address % self.capacity])

    def range(self, start: float, end: Optional[float] = None) -> Buckets:
        """
        Ordered bucket values for the trailing span ending at `end`.

        Covers the buckets after the one holding `start` up to and including
        the one holding `end`, so `end - start` seconds map to that many
        buckets. Spans longer than the window are clipped with a warning.
        """
        stop = _time.time() if end is None else float(end)
        first = self.address(start)
        last = self.address(stop)
        if last - first > self.capacity:
            warn(
                f"requested {last - first} buckets of history, only {self.capacity} kept"
            )
            first = last - self.capacity
        if last <= first:
            return np.zeros(0, dtype=np.int64)

        addresses = np.arange(first + 1, last + 1)
        values = self._data[addresses % self.capacity]
        return np.where(self._live(addresses), values, 0).astype(np.int64)

    def recent_hits(self, period: float, now: Optional[float] = None) -> int:
        """Sum of hits over the trailing `period` seconds."""
        t = _time.time() if now is None else float(now)
        return int(self.range(t - period, t).sum())

    def backfill(self, data: Sequence[int] | np.ndarray, data_time: float) -> None:
        """
        Replace the raw ring and anchor it at `data_time`.
        Only valid before the first hit().
        """
        if self._recorded:
            raise RuntimeError("backfill must precede any hit on the histogram")
        arr = np.asarray(data)
        if arr.shape != (self.capacity,):
            raise ValueError(
                f"expected {self.capacity} buckets, got shape {arr.shape}"
            )
        if arr.size and not np.issubdtype(arr.dtype, np.integer):
            raise ValueError("bucket values must be integers")
        self._data[:] = arr.astype(np.int64)
        self.last_write_time = float(data_time)

    def copy_data(self) -> Buckets:
        return self._data.copy()

    @property
    def total(self) -> int:
        """Hits currently retained in the window."""
        return int(self._data.sum())


__all__ = ["partition", "ActivityHistogram"]
