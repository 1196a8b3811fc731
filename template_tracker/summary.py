# template_tracker/summary.py
from __future__ import annotations

"""
Plain-text progress summary for one tracker.

Example:
  63.5% done
  127 of 200 pixels
  ⚠ 3 pixels out of bounds

  ⏫ 12 pixels/minute
  🔼 40 pixels/hour
  🔼 73 pixels/day
  Done in ~4 minutes
  started tracking 2 hours ago
  [10,4] should be Red
"""

import time as _time
from typing import List, Optional

from .constants import DAY, FAST_RATE, SUMMARY_MAX_EXAMPLES, SUMMARY_RATE_WINDOWS
from .core_types import Palette
from .eta import Completing, Eta, Regressing
from .tracker import ProgressTracker
from .utils import format_percentage, human_time


def describe_eta(eta: Eta) -> str:
    if isinstance(eta, Completing):
        return f"Done in ~{human_time(eta.duration)}"
    if isinstance(eta, Regressing):
        return f"Gone in ~{human_time(eta.duration)}"
    return "ETA unknown"


def rate_marker(net: int, window: float) -> str:
    fast = abs(net) / window > FAST_RATE
    if net > 0:
        return "⏫" if fast else "🔼"
    if net < 0:
        return "⏬" if fast else "🔽"
    return "⏹"


def format_summary(
    tracker: ProgressTracker,
    palette: Palette,
    now: Optional[float] = None,
    max_examples: int = SUMMARY_MAX_EXAMPLES,
) -> str:
    now = _time.time() if now is None else float(now)
    size = tracker.size
    if size == 0:
        return "⚠ Template is empty"

    progress = tracker.progress
    lines: List[str] = [
        f"{format_percentage(progress / size)} done",
        f"{progress} of {size} pixels",
    ]
    unplaceable = tracker.comparator.unplaceable_size
    if unplaceable > 0:
        lines.append(f"⚠ {unplaceable} pixels out of bounds")

    if tracker.complete:
        return "\n".join(lines)

    lines.append("")
    for label, window in SUMMARY_RATE_WINDOWS:
        net = tracker.recent_activity(window, now).net
        lines.append(f"{rate_marker(net, window)} {net} pixels/{label}")
    lines.append(describe_eta(tracker.eta(now)))

    tracked_for = now - tracker.started
    if tracked_for < DAY:
        lines.append(f"started tracking {human_time(tracked_for)} ago")

    examples = tracker.comparator.incorrect_pixels(max_examples + 1)
    template = tracker.template
    for x, y in examples[:max_examples]:
        lines.append(f"[{x},{y}] should be {palette.name_of(template.at(x, y))}")
    if len(examples) > max_examples:
        lines.append("...")
    return "\n".join(lines)


__all__ = ["describe_eta", "rate_marker", "format_summary"]
