# template_tracker/comparator.py
from __future__ import annotations

"""
Live canvas comparator.

Measures agreement between a placed design and the current canvas. The
difference list is cached and must be invalidated whenever the canvas may
have changed; the placeable count is taken once at construction.
"""

from typing import List, Optional, Tuple

import numpy as np

from .canvas import CanvasState
from .constants import PLACEABLE
from .core_types import IndexBuffer, TRANSPARENT
from .design import Template


class LiveCanvasComparator:
    def __init__(self, template: Template, canvas: CanvasState):
        self.template = template
        self.canvas = canvas
        self._differences: Optional[np.ndarray] = None

        design = template.design.data
        placemap = canvas.placeable_crop(
            template.x, template.y, template.width, template.height
        )
        self.placeable_size = int(
            np.count_nonzero((design != TRANSPARENT) & (placemap == PLACEABLE))
        )

    @property
    def size(self) -> int:
        return self.template.design.size

    @property
    def unplaceable_size(self) -> int:
        return self.size - self.placeable_size

    def shadow(self) -> IndexBuffer:
        """Canvas cropped to the template's bounding box."""
        t = self.template
        return self.canvas.crop(t.x, t.y, t.width, t.height)

    def invalidate(self) -> None:
        self._differences = None

    def differences(self) -> np.ndarray:
        """Design indices where a non-transparent cell disagrees with the canvas."""
        if self._differences is None:
            design = self.template.design.data
            wrong = (design != TRANSPARENT) & (design != self.shadow())
            self._differences = np.flatnonzero(wrong)
        return self._differences

    @property
    def progress(self) -> int:
        return self.size - int(self.differences().size)

    def incorrect_pixels(self, limit: Optional[int] = None) -> List[Tuple[int, int]]:
        """Global (x, y) of incorrect cells in row-major order."""
        diffs = self.differences()
        if limit is not None:
            diffs = diffs[: max(0, limit)]
        t = self.template
        return [(t.x + int(i) % t.width, t.y + int(i) // t.width) for i in diffs]


__all__ = ["LiveCanvasComparator"]
