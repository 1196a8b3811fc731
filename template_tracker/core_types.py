# template_tracker/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight helpers.
"""

from dataclasses import dataclass, field
from typing import Dict, NamedTuple, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBTuple = Tuple[int, int, int]
HexStr = str

U8Image = NDArray[np.uint8]  # (H, W, 4) RGBA
IndexBuffer = NDArray[np.uint8]  # (N,) palette indices, row-major
Buckets = NDArray[np.int64]  # (N,) histogram buckets

# Reserved palette index for "no colour" cells.
TRANSPARENT: int = 255


class MalformedTemplate(ValueError):
    """Source image or index buffer cannot form a design."""


# Value objects


@dataclass(frozen=True)
class PaletteColour:
    """Palette entry: display name and exact sRGB value."""

    name: str
    rgb: RGBTuple


@dataclass(frozen=True)
class Palette:
    """Ordered palette; position in `colours` is the palette index."""

    colours: Tuple[PaletteColour, ...]
    _lookup: Dict[int, int] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if len(self.colours) >= TRANSPARENT:
            raise ValueError(f"palette holds at most {TRANSPARENT} colours")
        for i, colour in enumerate(self.colours):
            # First entry wins when two share an RGB value.
            self._lookup.setdefault(pack_rgb(colour.rgb), i)

    def __len__(self) -> int:
        return len(self.colours)

    def __getitem__(self, index: int) -> PaletteColour:
        return self.colours[index]

    def index_of(self, rgb: RGBTuple) -> Optional[int]:
        return self._lookup.get(pack_rgb(rgb))

    def name_of(self, index: int) -> str:
        if index == TRANSPARENT or not 0 <= index < len(self.colours):
            return "transparent"
        return self.colours[index].name

    def rgb_array(self) -> NDArray[np.uint8]:
        """(P, 3) uint8 array of palette colours."""
        return np.array([c.rgb for c in self.colours], dtype=np.uint8).reshape(-1, 3)

    def packed_keys(self) -> Tuple[NDArray[np.uint32], NDArray[np.uint8]]:
        """
        Sorted packed-RGB keys and the palette index for each key.
        Used for vectorised exact-match lookups.
        """
        items = sorted(self._lookup.items())
        keys = np.array([k for k, _ in items], dtype=np.uint32)
        values = np.array([v for _, v in items], dtype=np.uint8)
        return keys, values


@dataclass(frozen=True)
class Placement:
    """Integer offset of a design on the shared canvas."""

    x: int = 0
    y: int = 0


class PixelChange(NamedTuple):
    """New and previous colour of one template-local cell."""

    color: int
    old_color: int


class PixelEvent(NamedTuple):
    """Canvas pixel change in global coordinates."""

    x: int
    y: int
    color: int
    old_color: int


class Activity(NamedTuple):
    """Summed recent activity of a tracker."""

    positive: int
    neutral: int
    negative: int

    @property
    def net(self) -> int:
        return self.positive - self.negative


# Small helpers


def pack_rgb(rgb: Sequence[int]) -> int:
    """Pack an RGB triple into a 24-bit integer."""
    return (int(rgb[0]) << 16) | (int(rgb[1]) << 8) | int(rgb[2])


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb' or '#rrggbb' (case-insensitive) into an RGB tuple."""
    s = hex_str.strip().lower()
    if not s.startswith("#"):
        raise ValueError("hex must start with '#'")
    if len(s) == 4:
        r, g, b = s[1], s[2], s[3]
        s = f"#{r}{r}{g}{g}{b}{b}"
    if len(s) != 7:
        raise ValueError("hex must be '#rrggbb' or '#rgb'")
    return (int(s[1:3], 16), int(s[3:5], 16), int(s[5:7], 16))


def assert_u8_rgba(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,4) image and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 4:
        raise TypeError("expected uint8 (H,W,4) image")
    return image  # type: ignore[return-value]


def as_index_buffer(data: Sequence[int] | np.ndarray) -> IndexBuffer:
    """Coerce a flat sequence of palette indices to a uint8 buffer."""
    arr = np.asarray(data)
    if arr.ndim != 1:
        arr = arr.reshape(-1)
    if arr.size and (arr.min() < 0 or arr.max() > 255):
        raise ValueError("palette indices must be in 0..255")
    return arr.astype(np.uint8, copy=True)


__all__ = [
    # aliases / types
    "RGBTuple",
    "HexStr",
    "U8Image",
    "IndexBuffer",
    "Buckets",
    "TRANSPARENT",
    "MalformedTemplate",
    # value objects
    "PaletteColour",
    "Palette",
    "Placement",
    "PixelChange",
    "PixelEvent",
    "Activity",
    # helpers
    "pack_rgb",
    "rgb_to_hex",
    "hex_to_rgb",
    "assert_u8_rgba",
    "as_index_buffer",
]
