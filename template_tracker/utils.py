# template_tracker/utils.py
from __future__ import annotations

"""
Shared utilities for template_tracker.

Includes duration wording for summaries, key/value status lines, colour usage
reporting for index buffers, and the print-based log helpers.
"""

import math
import sys
from typing import Any, Iterable, List, Optional, TextIO, Tuple

import numpy as np

from .core_types import IndexBuffer, Palette, TRANSPARENT, rgb_to_hex


#  Time formatting

# (threshold in the current unit, divisor to the next unit, next unit name)
_TIME_STEPS: Tuple[Tuple[float, float, str], ...] = (
    (120.0, 60.0, "minute"),
    (180.0, 60.0, "hour"),
    (48.0, 24.0, "day"),
)


def human_time(seconds: float) -> str:
    """Rounded duration in the largest sensible unit: '90 seconds', '2 days'."""
    if not math.isfinite(seconds):
        return "forever"
    value, unit = float(seconds), "second"
    for threshold, divisor, next_unit in _TIME_STEPS:
        if value < threshold:
            break
        value, unit = value / divisor, next_unit
    n = int(round(value))
    return f"{n} {unit}{'' if n == 1 else 's'}"


def format_elapsed(seconds: float) -> str:
    """Short timing for debug lines: '12.5ms', '3.210s', '2m 4.0s'."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f}ms"
    if seconds < 60.0:
        return f"{seconds:.3f}s"
    minutes, rest = divmod(seconds, 60.0)
    return f"{int(minutes)}m {rest:.1f}s"


def format_percentage(fraction: float, decimals: int = 2) -> str:
    """Format a 0..1 fraction as a percentage with trailing zeros dropped."""
    text = f"{fraction * 100.0:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text}%"


# Status lines


def _display(value: Any) -> str:
    if isinstance(value, bool):
        return "on" if value else "off"
    if isinstance(value, (int, np.integer)):
        return f"{int(value):,}"
    if isinstance(value, float):
        return f"{value:.3f}".rstrip("0").rstrip(".")
    return str(value)


def status_line(pairs: Iterable[Tuple[str, Any]], sep: str = "  ") -> str:
    """'Name: value' blocks; bools read on/off, ints get thousands separators."""
    return sep.join(f"{name}: {_display(value)}" for name, value in pairs)


def colour_usage_report(
    data: IndexBuffer, palette: Palette
) -> List[Tuple[str, str, int]]:
    """
    Count non-transparent cells per palette index.

    Returns a list of (hex, name, count) sorted by count descending.
    """
    visible = data[data != TRANSPARENT]
    if visible.size == 0:
        return []
    counts = np.bincount(visible, minlength=len(palette))
    used = np.flatnonzero(counts)
    order = used[np.argsort(-counts[used], kind="stable")]
    return [
        (
            rgb_to_hex(palette[i].rgb) if i < len(palette) else "#??????",
            palette.name_of(i) if i < len(palette) else "?",
            int(counts[i]),
        )
        for i in order.tolist()
    ]


#  Logging


def enable_line_buffered_stdout() -> None:
    """Flush stdout per line when the stream supports it."""
    reconfig = getattr(sys.stdout, "reconfigure", None)
    if not callable(reconfig):
        return
    try:
        reconfig(line_buffering=True)
    except (OSError, ValueError):
        return


def _emit(message: str, prefix: str = "", stream: Optional[TextIO] = None) -> None:
    print(f"{prefix}{message}", file=stream or sys.stdout, flush=True)


def log(message: str) -> None:
    _emit(message)


def debug_log(message: str) -> None:
    _emit(message, "[debug] ")


def warn(message: str) -> None:
    _emit(message, "[warn] ")


def error(message: str) -> None:
    """Error line, to stderr."""
    _emit(message, "[error] ", sys.stderr)


def log_status(section: str, pairs: Iterable[Tuple[str, Any]], debug: bool) -> None:
    """
    One '[section] Name: value ...' line, e.g.:
      [decode] Loaded: 400x200  Scale: 4  Marker: off
    Goes through debug_log() when debug is set, else log().
    """
    (debug_log if debug else log)(f"[{section}] {status_line(pairs)}")


def log_banner(title: str) -> None:
    _emit(f"\n=== {title} ===")


__all__ = [
    "human_time",
    "format_elapsed",
    "format_percentage",
    "status_line",
    "colour_usage_report",
    "enable_line_buffered_stdout",
    "log",
    "debug_log",
    "warn",
    "error",
    "log_status",
    "log_banner",
]
