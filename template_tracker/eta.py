# template_tracker/eta.py
from __future__ import annotations

"""
Completion-time estimate from recent net activity.

For every sampling window shorter than the tracking time (plus the tracking
time itself) the net rate (positive - negative) / window is held constant:
  rate >= 0 -> time until the remaining cells are done   (Completing)
  rate <  0 -> time until the current progress is undone (Regressing)

The chosen window is the one whose estimate is closest to its own length,
scored as max(|estimate|, window) / min(|estimate|, window).
"""

import math
import time as _time
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

from .constants import ETA_WINDOWS

if TYPE_CHECKING:
    from .tracker import ProgressTracker


@dataclass(frozen=True)
class Completing:
    """Seconds until the template is finished."""

    duration: float


@dataclass(frozen=True)
class Regressing:
    """Seconds until the template is fully undone."""

    duration: float


@dataclass(frozen=True)
class Unknown:
    pass


Eta = Union[Completing, Regressing, Unknown]


@dataclass(frozen=True)
class WindowEstimate:
    window: float
    estimate: float  # signed; negative while regressing
    ratio: float


def candidate_windows(
    elapsed: float, windows: Sequence[float] = ETA_WINDOWS
) -> List[float]:
    """Windows shorter than `elapsed`, then `elapsed` itself when positive."""
    out = [w for w in windows if w < elapsed]
    if elapsed > 0:
        out.append(float(elapsed))
    return out


def window_estimate(
    tracker: "ProgressTracker", window: float, now: float
) -> WindowEstimate:
    activity = tracker.recent_activity(window, now)
    rate = activity.net / window
    progress = tracker.progress

    if rate > 0:
        estimate = (tracker.size - progress) / rate
    elif rate < 0:
        estimate = progress / rate
    else:
        estimate = math.inf

    magnitude = abs(estimate)
    low, high = min(magnitude, window), max(magnitude, window)
    ratio = high / low if low > 0 else math.inf
    return WindowEstimate(window=window, estimate=estimate, ratio=ratio)


def estimate_eta(
    tracker: "ProgressTracker",
    now: Optional[float] = None,
    windows: Sequence[float] = ETA_WINDOWS,
) -> Eta:
    if tracker.complete:
        return Completing(0.0)

    now = _time.time() if now is None else float(now)
    candidates = candidate_windows(now - tracker.started, windows)
    if not candidates:
        return Unknown()

    estimates = [window_estimate(tracker, window, now) for window in candidates]
    # Ties go to the longer window.
    best = min(estimates, key=lambda e: (e.ratio, -e.window))
    if not math.isfinite(best.ratio):
        return Unknown()
    if best.estimate < 0:
        return Regressing(-best.estimate)
    return Completing(best.estimate)


__all__ = [
    "Completing",
    "Regressing",
    "Unknown",
    "Eta",
    "WindowEstimate",
    "candidate_windows",
    "window_estimate",
    "estimate_eta",
]
