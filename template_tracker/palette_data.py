# template_tracker/palette_data.py
from __future__ import annotations

"""
Palette definitions and builders.

Exports:
  PALETTE: list[tuple[str, str]]  # [(hex, name), ...] in palette-index order
  build_palette(hex_name_pairs=PALETTE) -> Palette
  load_palette(path) -> Palette
"""

import json
from pathlib import Path
from typing import Any, List, Tuple

from .core_types import Palette, PaletteColour, RGBTuple, hex_to_rgb


PALETTE: List[Tuple[str, str]] = [
    ("#ed1c24", "Red"),
    ("#d18078", "Peach"),
    ("#fa8072", "Light Red"),
    ("#9b5249", "Dark Peach"),
    ("#fab6a4", "Light Peach"),
    ("#e45c1a", "Dark Orange"),
    ("#684634", "Dark Brown"),
    ("#ffc5a5", "Light Beige"),
    ("#d18051", "Dark Beige"),
    ("#ff7f27", "Orange"),
    ("#7b6352", "Dark Tan"),
    ("#f8b277", "Beige"),
    ("#d6b594", "Light Tan"),
    ("#9c846b", "Tan"),
    ("#dba463", "Light Brown"),
    ("#95682a", "Brown"),
    ("#f6aa09", "Gold"),
    ("#9c8431", "Dark Goldenrod"),
    ("#6d643f", "Dark Stone"),
    ("#948c6b", "Stone"),
    ("#cdc59e", "Light Stone"),
    ("#c5ad31", "Goldenrod"),
    ("#f9dd3b", "Yellow"),
    ("#e8d45f", "Light Goldenrod"),
    ("#fffabc", "Light Yellow"),
    ("#4a6b3a", "Dark Olive"),
    ("#87ff5e", "Light Green"),
    ("#5a944a", "Olive"),
    ("#84c573", "Light Olive"),
    ("#13e67b", "Green"),
    ("#0eb968", "Dark Green"),
    ("#13e1be", "Light Teal"),
    ("#0c816e", "Dark Teal"),
    ("#bbfaf2", "Light Cyan"),
    ("#10aea6", "Teal"),
    ("#60f7f2", "Cyan"),
    ("#0f799f", "Dark Cyan"),
    ("#7dc7ff", "Light Blue"),
    ("#4093e4", "Blue"),
    ("#333941", "Dark Slate"),
    ("#28509e", "Dark Blue"),
    ("#6d758d", "Slate"),
    ("#99b1fb", "Light Indigo"),
    ("#b3b9d1", "Light Slate"),
    ("#b5aef1", "Light Slate Blue"),
    ("#7a71c4", "Slate Blue"),
    ("#4a4284", "Dark Slate Blue"),
    ("#6b50f6", "Indigo"),
    ("#4d31b8", "Dark Indigo"),
    ("#e09ff9", "Light Purple"),
    ("#780c99", "Dark Purple"),
    ("#aa38b9", "Purple"),
    ("#cb007a", "Dark Pink"),
    ("#ec1f80", "Pink"),
    ("#f38da9", "Light Pink"),
    ("#600018", "Deep Red"),
    ("#a50e1e", "Dark Red"),
    ("#000000", "Black"),
    ("#3c3c3c", "Dark Gray"),
    ("#787878", "Gray"),
    ("#aaaaaa", "Medium Gray"),
    ("#d2d2d2", "Light Gray"),
    ("#ffffff", "White"),
]


def build_palette(hex_name_pairs: List[Tuple[str, str]] = PALETTE) -> Palette:
    """Convert a list of (hex, name) into a Palette indexed by list position."""
    return Palette(
        tuple(PaletteColour(name=name, rgb=hex_to_rgb(hx)) for hx, name in hex_name_pairs)
    )


def _colour_from_json(entry: Any, position: int) -> PaletteColour:
    if not isinstance(entry, dict):
        raise ValueError(f"palette entry {position} is not an object")
    name = str(entry.get("name", f"#{position}"))
    if "hex" in entry:
        return PaletteColour(name=name, rgb=hex_to_rgb(str(entry["hex"])))
    values = entry.get("rgb", entry.get("values"))
    if not isinstance(values, (list, tuple)) or len(values) != 3:
        raise ValueError(f"palette entry {position} has no rgb triple")
    rgb: RGBTuple = (int(values[0]), int(values[1]), int(values[2]))
    if not all(0 <= c <= 255 for c in rgb):
        raise ValueError(f"palette entry {position} rgb out of range")
    return PaletteColour(name=name, rgb=rgb)


def load_palette(path: Path) -> Palette:
    """
    Load a palette from JSON: a list of {"name", "rgb": [r, g, b]} or
    {"name", "hex": "#rrggbb"} objects, in palette-index order.
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError("palette JSON must be a list")
    return Palette(tuple(_colour_from_json(e, i) for i, e in enumerate(raw)))


__all__ = ["PALETTE", "build_palette", "load_palette"]
