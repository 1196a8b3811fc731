# template_tracker/canvas.py
from __future__ import annotations

"""
Live canvas and placeability buffers.

Both buffers are (H, W) uint8 arrays in palette-index space and are owned by
whoever feeds pixel events. Crops may reach outside the canvas; those cells
read as TRANSPARENT (canvas) or blocked (placemap).
"""

from typing import Optional

import numpy as np

from .constants import PLACEABLE
from .core_types import IndexBuffer, PixelEvent, TRANSPARENT

# Placemap fill for positions outside the canvas.
BLOCKED: int = 255


def crop_buffer(
    buffer: np.ndarray, x: int, y: int, width: int, height: int, fill: int
) -> IndexBuffer:
    """
    Copy the [x, x+width) x [y, y+height) window of a 2D buffer.

    Returns:
      uint8 [width * height], row-major; cells outside `buffer` hold `fill`.
    """
    out = np.full((height, width), fill, dtype=np.uint8)
    buf_h, buf_w = buffer.shape[:2]

    src_x0, src_y0 = max(x, 0), max(y, 0)
    src_x1, src_y1 = min(x + width, buf_w), min(y + height, buf_h)
    if src_x0 < src_x1 and src_y0 < src_y1:
        out[src_y0 - y : src_y1 - y, src_x0 - x : src_x1 - x] = buffer[
            src_y0:src_y1, src_x0:src_x1
        ]
    return out.reshape(-1)


class CanvasState:
    """
    Canvas colours plus placemap.

    `placemap` defaults to all-placeable when not supplied.
    """

    def __init__(self, canvas: np.ndarray, placemap: Optional[np.ndarray] = None):
        canvas = np.asarray(canvas, dtype=np.uint8)
        if canvas.ndim != 2:
            raise ValueError("canvas must be a 2D index buffer")
        if placemap is None:
            placemap = np.full(canvas.shape, PLACEABLE, dtype=np.uint8)
        placemap = np.asarray(placemap, dtype=np.uint8)
        if placemap.shape != canvas.shape:
            raise ValueError(
                f"placemap shape {placemap.shape} does not match canvas {canvas.shape}"
            )
        self.canvas = canvas
        self.placemap = placemap

    @classmethod
    def blank(cls, width: int, height: int, colour: int = TRANSPARENT) -> "CanvasState":
        return cls(np.full((height, width), colour, dtype=np.uint8))

    @property
    def width(self) -> int:
        return int(self.canvas.shape[1])

    @property
    def height(self) -> int:
        return int(self.canvas.shape[0])

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> int:
        return int(self.canvas[y, x]) if self.in_bounds(x, y) else TRANSPARENT

    def crop(self, x: int, y: int, width: int, height: int) -> IndexBuffer:
        return crop_buffer(self.canvas, x, y, width, height, TRANSPARENT)

    def placeable_crop(self, x: int, y: int, width: int, height: int) -> IndexBuffer:
        return crop_buffer(self.placemap, x, y, width, height, BLOCKED)

    def apply(self, event: PixelEvent) -> bool:
        """Write an event's colour; False when it falls outside the canvas."""
        if not self.in_bounds(event.x, event.y):
            return False
        self.canvas[event.y, event.x] = event.color
        return True

    def replace(self, canvas: np.ndarray) -> None:
        """Swap in a full canvas (e.g. after a resync or reset)."""
        canvas = np.asarray(canvas, dtype=np.uint8)
        if canvas.shape != self.canvas.shape:
            raise ValueError(
                f"canvas shape {canvas.shape} does not match {self.canvas.shape}"
            )
        self.canvas = canvas


__all__ = ["BLOCKED", "crop_buffer", "CanvasState"]
