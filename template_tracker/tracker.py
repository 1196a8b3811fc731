# template_tracker/tracker.py
from __future__ import annotations

"""
Progress tracker.

Combines a placed template, a live comparator, and three activity histograms:
  positive : a cell became correct
  negative : a cell stopped being correct
  neutral  : a cell changed between two incorrect colours

`progress` is always read live from the comparator. `last_progress` is the
historian's running count; it stays in step only while every relevant pixel
event reaches sync(), and a sync() without changes reconciles it.

Snapshot format (JSON-serialisable):
  {"positive": [int], "neutral": [int], "negative": [int],
   "timestamp": float, "progress": int}
"""

import math
import time as _time
from typing import Any, Dict, Mapping, Optional

from .canvas import CanvasState
from .comparator import LiveCanvasComparator
from .core_types import Activity, PixelChange, TRANSPARENT
from .design import Template
from .eta import Eta, estimate_eta
from .history import ActivityHistogram
from .utils import warn

HISTOGRAM_KEYS = ("positive", "neutral", "negative")


class ProgressTracker:
    def __init__(
        self,
        template: Template,
        canvas: CanvasState,
        started: Optional[float] = None,
        now: Optional[float] = None,
    ):
        now = _time.time() if now is None else float(now)
        self.template = template
        self.comparator = LiveCanvasComparator(template, canvas)
        self.started = now if started is None else float(started)
        self.positive = ActivityHistogram(now=now)
        self.neutral = ActivityHistogram(now=now)
        self.negative = ActivityHistogram(now=now)
        self.last_progress = self.comparator.progress

    # Live state

    @property
    def size(self) -> int:
        return self.template.design.size

    @property
    def progress(self) -> int:
        return self.comparator.progress

    @property
    def placeable_size(self) -> int:
        return self.comparator.placeable_size

    @property
    def complete(self) -> bool:
        return self.progress == self.size

    # Recording

    def sync(
        self,
        changes: Optional[Mapping[int, PixelChange]] = None,
        now: Optional[float] = None,
    ) -> Activity:
        """
        Record activity and refresh cached comparisons.

        With `changes` (design index -> (color, old_color)) each event is
        classified against the design. Without, progress is recomputed from
        the canvas and the delta from `last_progress` is recorded.

        The canvas must already reflect the changes. Returns what was recorded.
        """
        now = _time.time() if now is None else float(now)
        self.comparator.invalidate()

        if changes is None:
            progress = self.comparator.progress
            delta = progress - self.last_progress
            activity = Activity(
                positive=max(delta, 0), neutral=abs(delta), negative=max(-delta, 0)
            )
            self.last_progress = progress
        else:
            activity = self._classify(changes)
            self.last_progress += activity.positive - activity.negative

        self.positive.hit(activity.positive, now)
        self.neutral.hit(activity.neutral, now)
        self.negative.hit(activity.negative, now)
        return activity

    def _classify(self, changes: Mapping[int, PixelChange]) -> Activity:
        design = self.template.design.data
        positive = neutral = negative = 0
        for index, (color, old_color) in changes.items():
            target = int(design[index])
            if target == TRANSPARENT or color == old_color:
                continue
            if target == old_color:
                negative += 1
            elif target == color:
                positive += 1
            else:
                neutral += 1
        return Activity(positive, neutral, negative)

    # Queries

    def recent_activity(self, interval: float, now: Optional[float] = None) -> Activity:
        now = _time.time() if now is None else float(now)
        return Activity(
            positive=self.positive.recent_hits(interval, now),
            neutral=self.neutral.recent_hits(interval, now),
            negative=self.negative.recent_hits(interval, now),
        )

    def eta(self, now: Optional[float] = None) -> Eta:
        return estimate_eta(self, now)

    # Persistence

    def snapshot(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            key: getattr(self, key).copy_data().tolist() for key in HISTOGRAM_KEYS
        }
        data["timestamp"] = self.positive.last_write_time
        data["progress"] = int(self.last_progress)
        return data

    @classmethod
    def from_snapshot(
        cls,
        template: Template,
        canvas: CanvasState,
        started: Optional[float],
        data: Any,
        now: Optional[float] = None,
    ) -> "ProgressTracker":
        """
        Restore a tracker, then reconcile it against the current canvas.

        Each histogram is restored independently; a missing or corrupt one
        starts at zero, as do all three when the snapshot time lies ahead
        of `now`. A missing `progress` is re-read from the canvas.
        """
        now = _time.time() if now is None else float(now)
        tracker = cls(template, canvas, started=started, now=now)
        if not isinstance(data, dict):
            warn("activity snapshot is not an object; starting fresh")
            tracker.sync(now=now)
            return tracker

        timestamp = data.get("timestamp")
        if not isinstance(timestamp, (int, float)) or isinstance(timestamp, bool):
            timestamp = now
        if not math.isfinite(timestamp) or timestamp > now:
            # The ring anchor must not lie ahead of now.
            warn(f"activity snapshot time {timestamp!r} is not usable; starting at zero")
        else:
            for key in HISTOGRAM_KEYS:
                try:
                    getattr(tracker, key).backfill(data[key], timestamp)
                except (KeyError, TypeError, ValueError) as e:
                    warn(f"{key} activity not restored ({e}); starting at zero")

        progress = data.get("progress")
        if isinstance(progress, int) and not isinstance(progress, bool):
            tracker.last_progress = progress
        tracker.sync(now=now)
        return tracker


__all__ = ["HISTOGRAM_KEYS", "ProgressTracker"]
