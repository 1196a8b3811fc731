#!/usr/bin/env python3
"""
track_template.py
Decode pixel-art templates to the canvas palette and report their progress.

Usage:
  python track_template.py decode SRC [--width TW | --link URL] [--outdir DIR] [--scale-marker] [--palette P] [--debug]
  python track_template.py compare DESIGN CANVAS [--x X] [--y Y] [--placemap IMG] [--state DIR] [--name NAME] [--palette P] [--debug]

Commands:
  decode  : Quantize an image (optionally drawn at an integer block scale) and
            write it as <hash>.png, an indexed PNG keyed by content hash.
  compare : Compare a design placed at (X, Y) against a canvas snapshot image
            and print a progress summary. With --state the tracker's activity
            is restored from and saved to DIR, so repeated runs build history.

Input:
  Any Pillow-readable image. Only pixels exactly matching a palette colour
  count; fully transparent pixels never do.

Notes:
  Palette defaults to template_tracker.palette_data.PALETTE; --palette takes a
  JSON list of {"name", "rgb"} or {"name", "hex"} objects.
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Optional

import numpy as np

from template_tracker.canvas import BLOCKED, CanvasState
from template_tracker.constants import PLACEABLE
from template_tracker.core_types import Palette, Placement
from template_tracker.design import Template, TemplateDesign
from template_tracker.image_io import load_image_rgba
from template_tracker.links import parse_template_link
from template_tracker.palette_data import build_palette, load_palette
from template_tracker.quantize import block_scale, quantize
from template_tracker.repository import TemplateRepository
from template_tracker.summary import format_summary
from template_tracker.tracker import ProgressTracker
from template_tracker.utils import (
    colour_usage_report,
    debug_log,
    enable_line_buffered_stdout,
    error,
    format_elapsed,
    log,
    log_banner,
    log_status,
    status_line,
)

# CLI args


def parse_cli_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="track_template",
        description="Decode templates and track their progress on a canvas.",
    )
    parser.add_argument(
        "--palette", type=Path, default=None, help="Palette JSON (optional)"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose details")
    sub = parser.add_subparsers(dest="command", required=True)

    dec = sub.add_parser("decode", help="Quantize an image into a design")
    dec.add_argument("src", type=Path, help="Input image")
    dec.add_argument(
        "--width",
        type=int,
        default=None,
        help="Logical width; the image must be an integer multiple of it.",
    )
    dec.add_argument(
        "--link",
        default=None,
        help="Template link; its tw/ox/oy/title parameters are used.",
    )
    dec.add_argument(
        "--outdir", type=Path, default=None, help="Output directory (optional)"
    )
    dec.add_argument(
        "--scale-marker",
        action="store_true",
        help="Ignore a low-alpha scale marker in the first sub-pixel.",
    )

    cmp_ = sub.add_parser("compare", help="Report a design's progress on a canvas")
    cmp_.add_argument("design", type=Path, help="Design image (scale 1)")
    cmp_.add_argument("canvas", type=Path, help="Canvas snapshot image")
    cmp_.add_argument("--x", type=int, default=0, help="Design x offset")
    cmp_.add_argument("--y", type=int, default=0, help="Design y offset")
    cmp_.add_argument(
        "--placemap",
        type=Path,
        default=None,
        help="Placemap image; transparent pixels are placeable.",
    )
    cmp_.add_argument(
        "--state", type=Path, default=None, help="Directory for tracker state"
    )
    cmp_.add_argument(
        "--name", default=None, help="Tracker name (defaults to the design stem)"
    )
    return parser.parse_args(argv)


def _resolve_palette(path: Optional[Path]) -> Palette:
    return build_palette() if path is None else load_palette(path)


# Commands


def run_decode(args: argparse.Namespace, palette: Palette) -> int:
    t_start = time.perf_counter()
    log_banner(args.src.name)

    logical_width = args.width
    placement = Placement()
    if args.link:
        link = parse_template_link(args.link)
        logical_width = link.logical_width if logical_width is None else logical_width
        placement = link.placement
        if link.title:
            log(f"Title: {link.title}")

    rgba = load_image_rgba(args.src)
    height0, width0 = rgba.shape[0], rgba.shape[1]
    scale = block_scale(width0, height0, logical_width)
    log_status(
        "decode",
        [
            ("Loaded", f"{width0}x{height0}"),
            ("Scale", scale),
            ("Marker", bool(args.scale_marker)),
            ("Palette", len(palette)),
        ],
        debug=args.debug,
    )

    cells = quantize(rgba, palette, scale, skip_scale_marker=args.scale_marker)
    design = TemplateDesign(cells.shape[1], cells.shape[0], cells.reshape(-1))
    t_decoded = time.perf_counter()

    outdir = args.outdir if args.outdir is not None else args.src.parent
    path = design.save(outdir, palette)

    log(f"Wrote {path.name} | size={design.width}x{design.height} | pixels={design.size:,}")
    log(f"Placement: {placement.x},{placement.y}")
    log("Colours used:")
    for hex_code, name, count in colour_usage_report(design.data, palette):
        log(f"  {hex_code}  {name}: {count:,}")
    if args.debug:
        debug_log(
            status_line(
                [
                    ("Decode", format_elapsed(t_decoded - t_start)),
                    ("Total", format_elapsed(time.perf_counter() - t_start)),
                ]
            )
        )
    return 0


def _load_canvas(
    canvas_path: Path, placemap_path: Optional[Path], palette: Palette
) -> CanvasState:
    canvas = quantize(load_image_rgba(canvas_path), palette)
    placemap = None
    if placemap_path is not None:
        alpha = load_image_rgba(placemap_path)[..., 3]
        placemap = np.where(alpha == 0, PLACEABLE, BLOCKED).astype(np.uint8)
    return CanvasState(canvas, placemap)


def run_compare(args: argparse.Namespace, palette: Palette) -> int:
    log_banner(args.design.name)
    design = TemplateDesign.load(args.design, palette)
    canvas = _load_canvas(args.canvas, args.placemap, palette)
    placement = Placement(args.x, args.y)
    now = time.time()

    if args.debug:
        debug_log(
            status_line(
                [
                    ("Design", f"{design.width}x{design.height}"),
                    ("Canvas", f"{canvas.width}x{canvas.height}"),
                    ("Hash", design.hash[:12]),
                ]
            )
        )

    if args.state is None:
        tracker = ProgressTracker(Template(design, placement), canvas, now=now)
        log(format_summary(tracker, palette, now))
        return 0

    name = args.name or args.design.stem
    repo = TemplateRepository(canvas, palette, args.state, debug=args.debug)
    repo.load(now)
    if name not in repo or repo.get(name).template != Template(design, placement):
        repo.add(name, design, placement, now=now)
    repo.sync_all(now)
    log(format_summary(repo.get(name), palette, now))
    repo.save()
    return 0


# Entry point


def main(argv: Optional[list] = None) -> int:
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)

    if args.command == "decode":
        inputs = [args.src]
    else:
        inputs = [args.design, args.canvas, args.placemap]
    for src in inputs:
        if src is not None and not src.exists():
            error(f"not found: {src}")
            return 2

    try:
        palette = _resolve_palette(args.palette)
        if args.command == "decode":
            return run_decode(args, palette)
        return run_compare(args, palette)
    except ValueError as e:
        error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
