# template_tracker/image_io.py
from __future__ import annotations

"""
Image I/O helpers: RGBA loading with exact colours, indexed PNG writing.

No colour management is applied on load; template colours must survive
byte-for-byte so they can be matched against the palette exactly.
"""

from pathlib import Path

import numpy as np
from PIL import Image, ImageOps


def load_image_rgba(path: Path) -> np.ndarray:
    """Load any Pillow-readable image as uint8 (H, W, 4) RGBA."""
    with Image.open(path) as im0:
        im = ImageOps.exif_transpose(im0)
        rgba = im.convert("RGBA")
    return np.array(rgba, dtype=np.uint8)


def save_indexed_png(
    path: Path,
    indices: np.ndarray,
    palette_rgb: np.ndarray,
    transparent_index: int,
) -> Path:
    """
    Save a (H, W) index array as a palette-mapped PNG.

    palette_rgb rows become palette entries 0..P-1; `transparent_index` is
    written fully transparent. Unused slots are padded with black.
    """
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    lut = np.zeros((256, 3), dtype=np.uint8)
    lut[: palette_rgb.shape[0]] = palette_rgb
    im = Image.frombytes(
        "P",
        (int(indices.shape[1]), int(indices.shape[0])),
        np.ascontiguousarray(indices, dtype=np.uint8).tobytes(),
    )
    im.putpalette(lut.reshape(-1).tolist())
    path.parent.mkdir(parents=True, exist_ok=True)
    im.save(path, format="PNG", transparency=int(transparent_index))
    return path


__all__ = ["load_image_rgba", "save_indexed_png"]
