from __future__ import annotations

import numpy as np

from template_tracker.core_types import Palette, PaletteColour, TRANSPARENT

# Minute-aligned reference time.
T0 = 60.0 * 28_333_333

RED, BLUE, GREEN = 0, 1, 2

PALETTE = Palette(
    (
        PaletteColour("Red", (255, 0, 0)),
        PaletteColour("Blue", (0, 0, 255)),
        PaletteColour("Green", (0, 255, 0)),
    )
)


def indices_to_rgba(indices: np.ndarray, palette: Palette = PALETTE) -> np.ndarray:
    """Paint a 2D index array as RGBA; TRANSPARENT cells get alpha 0."""
    h, w = indices.shape
    out = np.zeros((h, w, 4), dtype=np.uint8)
    rgb = palette.rgb_array()
    visible = indices != TRANSPARENT
    out[visible, :3] = rgb[indices[visible]]
    out[visible, 3] = 255
    return out
