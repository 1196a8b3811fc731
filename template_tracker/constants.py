# template_tracker/constants.py
"""
Tunables used across the project.

- Time units (seconds) and the activity history window
- ETA sampling windows
- Decode scheduling and the scale-marker convention
- Canvas placeability encoding
- Summary formatting
"""
from __future__ import annotations

from typing import Tuple

# ==========
# Time units
# ==========
SECOND: float = 1.0
MINUTE: float = 60.0 * SECOND
HOUR: float = 60.0 * MINUTE
DAY: float = 24.0 * HOUR

# ================
# Activity history
# ================
BUCKET_SECONDS: float = MINUTE
HISTORY_WINDOW: float = 7.0 * DAY
HISTORY_BUCKETS: int = int(HISTORY_WINDOW // BUCKET_SECONDS)  # 10080

# ===
# ETA
# ===
ETA_WINDOWS: Tuple[float, ...] = (
    MINUTE,
    15.0 * MINUTE,
    HOUR,
    4.0 * HOUR,
    12.0 * HOUR,
    DAY,
    2.0 * DAY,
    4.0 * DAY,
    7.0 * DAY,
)

# ======
# Decode
# ======
# Cells voted on between cooperative yields in async decoding.
DECODE_YIELD_CELLS: int = 1000
# A leading sub-pixel below this alpha may be an authoring-tool scale marker.
SCALE_MARKER_ALPHA: int = 64

# ======
# Canvas
# ======
# Placemap value for positions users may set; anything else is blocked.
PLACEABLE: int = 0

# =======
# Summary
# =======
SUMMARY_MAX_EXAMPLES: int = 4
# Net pixels per second above which a rate is shown as fast (4 px/min).
FAST_RATE: float = 4.0 / MINUTE
SUMMARY_RATE_WINDOWS: Tuple[Tuple[str, float], ...] = (
    ("minute", MINUTE),
    ("hour", HOUR),
    ("day", DAY),
)

__all__ = [
    "SECOND",
    "MINUTE",
    "HOUR",
    "DAY",
    "BUCKET_SECONDS",
    "HISTORY_WINDOW",
    "HISTORY_BUCKETS",
    "ETA_WINDOWS",
    "DECODE_YIELD_CELLS",
    "SCALE_MARKER_ALPHA",
    "PLACEABLE",
    "SUMMARY_MAX_EXAMPLES",
    "FAST_RATE",
    "SUMMARY_RATE_WINDOWS",
]
