# template_tracker/quantize.py
from __future__ import annotations

"""
Palette quantizer.

Reduces an RGBA image drawn at an integer block scale to one palette index per
logical cell. Each sub-pixel whose RGB exactly matches a palette colour casts
one vote for that colour; fully transparent sub-pixels never vote. The most
voted index wins, ties go to the lowest index, and a cell with no votes is
TRANSPARENT.

Exports:
  rgba_from_bytes(data, width, height) -> U8Image
  block_scale(width, height, logical_width) -> int
  quantize(rgba, palette, scale=1, *, skip_scale_marker=False) -> (h, w) uint8
  quantize_async(...)  same result, yields to the event loop between row bands
"""

import asyncio
from typing import List, Optional, Tuple

import numpy as np

from .constants import DECODE_YIELD_CELLS, SCALE_MARKER_ALPHA
from .core_types import (
    MalformedTemplate,
    Palette,
    TRANSPARENT,
    U8Image,
    assert_u8_rgba,
)

# Cells per band in the blocking path; bounds the (cells, P) vote table.
_SYNC_BAND_CELLS = 1 << 16


def rgba_from_bytes(data: bytes, width: int, height: int) -> U8Image:
    """View raw RGBA bytes as a (height, width, 4) uint8 image."""
    expected = width * height * 4
    if len(data) != expected:
        raise MalformedTemplate(
            f"expected {expected} RGBA bytes for {width}x{height}, got {len(data)}"
        )
    return np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)


def block_scale(width: int, height: int, logical_width: Optional[int]) -> int:
    """
    Scale factor between a physical image and its declared logical width.
    No (or non-positive) logical width means the image is unscaled.
    """
    if logical_width is None or logical_width <= 0:
        return 1
    if width % logical_width != 0:
        raise MalformedTemplate(
            f"refusing to process template with non-integer scale "
            f"({width} / {logical_width})"
        )
    scale = width // logical_width
    if height % scale != 0:
        raise MalformedTemplate(
            f"image height {height} is not a multiple of scale {scale}"
        )
    return scale


def _check_scale(rgba: U8Image, scale: int) -> Tuple[int, int]:
    if scale < 1:
        raise MalformedTemplate(f"scale must be a positive integer, got {scale}")
    height, width = rgba.shape[0], rgba.shape[1]
    if width % scale != 0 or height % scale != 0:
        raise MalformedTemplate(
            f"image {width}x{height} does not divide into {scale}x{scale} blocks"
        )
    return width // scale, height // scale


def _subpixel_votes(
    rgba: U8Image, palette: Palette, skip_scale_marker: bool
) -> np.ndarray:
    """
    Palette index voted for by every sub-pixel, or -1 for no vote.

    Returns:
      int16 [H, W]
    """
    out = np.full(rgba.shape[:2], -1, dtype=np.int16)
    keys, values = palette.packed_keys()
    if keys.size == 0 or out.size == 0:
        return out

    rgb = rgba[..., :3].astype(np.uint32)
    packed = (rgb[..., 0] << 16) | (rgb[..., 1] << 8) | rgb[..., 2]
    pos = np.minimum(np.searchsorted(keys, packed), keys.size - 1)
    voting = (keys[pos] == packed) & (rgba[..., 3] > 0)
    out[voting] = values[pos[voting]]

    if skip_scale_marker and rgba[0, 0, 3] < SCALE_MARKER_ALPHA:
        out[0, 0] = -1
    return out


def _vote_band(
    votes: np.ndarray, scale: int, width: int, rows: Tuple[int, int], colours: int
) -> np.ndarray:
    """Resolve logical rows [start, end) to palette indices. Returns uint8 [rows, width]."""
    start, end = rows
    n_rows = end - start
    band = votes[start * scale : end * scale]
    blocks = (
        band.reshape(n_rows, scale, width, scale)
        .transpose(0, 2, 1, 3)
        .reshape(n_rows * width, scale * scale)
    )
    cells = blocks.shape[0]
    if colours == 0 or cells == 0:
        return np.full((n_rows, width), TRANSPARENT, dtype=np.uint8)

    valid = blocks >= 0
    cell_ids = np.broadcast_to(np.arange(cells)[:, None], blocks.shape)
    flat = cell_ids[valid].astype(np.int64) * colours + blocks[valid]
    tally = np.bincount(flat, minlength=cells * colours).reshape(cells, colours)

    # argmax returns the first maximum, so ties keep the lowest index.
    best = np.argmax(tally, axis=1)
    has_votes = tally[np.arange(cells), best] > 0
    result = np.where(has_votes, best, TRANSPARENT).astype(np.uint8)
    return result.reshape(n_rows, width)


def _row_bands(height: int, width: int, cells_per_band: int) -> List[Tuple[int, int]]:
    """Partition logical rows [0, height) into bands of about cells_per_band cells."""
    step = max(1, cells_per_band // max(1, width))
    return [(start, min(start + step, height)) for start in range(0, height, step)]


def quantize(
    rgba: U8Image,
    palette: Palette,
    scale: int = 1,
    *,
    skip_scale_marker: bool = False,
) -> np.ndarray:
    """
    Quantize an RGBA image drawn at `scale` to palette indices.

    Args:
      rgba              : uint8 [H, W, 4]; H and W must be multiples of scale
      palette           : palette to match against (exact RGB)
      scale             : sub-pixels per logical cell along each axis
      skip_scale_marker : ignore the very first sub-pixel when its alpha is
                          below SCALE_MARKER_ALPHA (authoring-tool marker)

    Returns:
      uint8 [H / scale, W / scale]

    Raises:
      MalformedTemplate when the image does not divide into whole blocks.
    """
    rgba = assert_u8_rgba(np.asarray(rgba))
    width, height = _check_scale(rgba, scale)
    votes = _subpixel_votes(rgba, palette, skip_scale_marker)
    out = np.empty((height, width), dtype=np.uint8)
    for start, end in _row_bands(height, width, _SYNC_BAND_CELLS):
        out[start:end] = _vote_band(votes, scale, width, (start, end), len(palette))
    return out


async def quantize_async(
    rgba: U8Image,
    palette: Palette,
    scale: int = 1,
    *,
    skip_scale_marker: bool = False,
    yield_every: int = DECODE_YIELD_CELLS,
) -> np.ndarray:
    """
    Cooperative variant of quantize() for a shared event loop.

    Control returns to the loop after roughly `yield_every` cells. The result
    is only handed back once every band is decoded.
    """
    rgba = assert_u8_rgba(np.asarray(rgba))
    width, height = _check_scale(rgba, scale)
    votes = _subpixel_votes(rgba, palette, skip_scale_marker)
    out = np.empty((height, width), dtype=np.uint8)
    for start, end in _row_bands(height, width, yield_every):
        out[start:end] = _vote_band(votes, scale, width, (start, end), len(palette))
        await asyncio.sleep(0)
    return out


__all__ = ["rgba_from_bytes", "block_scale", "quantize", "quantize_async"]
