# template_tracker/design.py
from __future__ import annotations

"""
Template designs and placed templates.

A TemplateDesign is the placement-independent indexed target image. Designs
are immutable; `size` and `hash` are computed once. Two designs are equal iff
their hashes match, so the hash doubles as the file name and dedup key.

A Template pairs a design with an integer canvas offset.
"""

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .core_types import (
    IndexBuffer,
    MalformedTemplate,
    Palette,
    Placement,
    TRANSPARENT,
    U8Image,
    as_index_buffer,
)
from .image_io import load_image_rgba, save_indexed_png
from .quantize import block_scale, quantize, quantize_async


class TemplateDesign:
    """Immutable indexed image with cached size and content hash."""

    __slots__ = ("_width", "_height", "_data", "_size", "_hash")

    def __init__(self, width: int, height: int, data: Sequence[int] | np.ndarray):
        buffer = as_index_buffer(data)
        if width < 0 or height < 0 or width * height != buffer.size:
            raise MalformedTemplate(
                f"design {width}x{height} needs {width * height} cells, got {buffer.size}"
            )
        buffer.setflags(write=False)
        self._width = int(width)
        self._height = int(height)
        self._data = buffer
        self._size = int(np.count_nonzero(buffer != TRANSPARENT))
        self._hash = hashlib.sha256(buffer.tobytes()).hexdigest()

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def data(self) -> IndexBuffer:
        """Read-only row-major index buffer."""
        return self._data

    @property
    def size(self) -> int:
        """Number of non-transparent cells."""
        return self._size

    @property
    def hash(self) -> str:
        """sha-256 hex digest of the index buffer."""
        return self._hash

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TemplateDesign):
            return NotImplemented
        return self._hash == other._hash

    def __hash__(self) -> int:
        return hash(self._hash)

    def __repr__(self) -> str:
        return f"TemplateDesign({self._width}x{self._height}, size={self._size}, hash={self._hash[:12]})"

    # Construction

    @classmethod
    def from_rgba(
        cls,
        rgba: U8Image,
        palette: Palette,
        logical_width: Optional[int] = None,
        *,
        skip_scale_marker: bool = False,
    ) -> "TemplateDesign":
        """Quantize an RGBA image, optionally drawn at a block scale."""
        scale = block_scale(rgba.shape[1], rgba.shape[0], logical_width)
        cells = quantize(rgba, palette, scale, skip_scale_marker=skip_scale_marker)
        return cls(cells.shape[1], cells.shape[0], cells.reshape(-1))

    @classmethod
    async def from_rgba_async(
        cls,
        rgba: U8Image,
        palette: Palette,
        logical_width: Optional[int] = None,
        *,
        skip_scale_marker: bool = False,
    ) -> "TemplateDesign":
        scale = block_scale(rgba.shape[1], rgba.shape[0], logical_width)
        cells = await quantize_async(
            rgba, palette, scale, skip_scale_marker=skip_scale_marker
        )
        return cls(cells.shape[1], cells.shape[0], cells.reshape(-1))

    @classmethod
    def load(cls, path: Path, palette: Palette) -> "TemplateDesign":
        """Load a saved design by re-quantizing it at scale 1."""
        return cls.from_rgba(load_image_rgba(path), palette)

    # Output

    def to_rgba(self, palette: Palette) -> U8Image:
        """Render to RGBA; transparent and unknown indices get alpha 0."""
        out = np.zeros((self._height * self._width, 4), dtype=np.uint8)
        known = self._data < len(palette)
        if np.any(known):
            out[known, :3] = palette.rgb_array()[self._data[known]]
            out[known, 3] = 255
        return out.reshape(self._height, self._width, 4)

    def save(self, directory: Path, palette: Palette) -> Path:
        """Write `<hash>.png` (indexed colour) into directory and return its path."""
        path = Path(directory) / f"{self._hash}.png"
        save_indexed_png(
            path,
            self._data.reshape(self._height, self._width),
            palette.rgb_array(),
            transparent_index=TRANSPARENT,
        )
        return path


@dataclass(frozen=True)
class Template:
    """A design placed on the canvas."""

    design: TemplateDesign
    placement: Placement = Placement()

    @property
    def x(self) -> int:
        return self.placement.x

    @property
    def y(self) -> int:
        return self.placement.y

    @property
    def width(self) -> int:
        return self.design.width

    @property
    def height(self) -> int:
        return self.design.height

    def bounds(self, x: int, y: int) -> bool:
        """True when global (x, y) lies inside the template's bounding box."""
        return (
            self.x <= x < self.x + self.width and self.y <= y < self.y + self.height
        )

    def local_index(self, x: int, y: int) -> Optional[int]:
        """Row-major design index of global (x, y), or None when outside."""
        if not self.bounds(x, y):
            return None
        return (x - self.x) + (y - self.y) * self.width

    def at(self, x: int, y: int) -> int:
        """Design palette index at global (x, y); TRANSPARENT outside."""
        index = self.local_index(x, y)
        return TRANSPARENT if index is None else int(self.design.data[index])


__all__ = ["TemplateDesign", "Template"]
