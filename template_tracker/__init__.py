# template_tracker/__init__.py
"""
template_tracker package.

Purpose:
  Track collaborative progress of pixel-art templates on a shared, live
  canvas and estimate when they will be finished. See track_template.py for CLI.

Public API:
  quantize / quantize_async : RGBA image at a block scale -> palette indices.
  TemplateDesign            : immutable indexed design with size and sha-256 hash.
  Template                  : design + placement.
  CanvasState               : live canvas and placemap buffers.
  LiveCanvasComparator      : design vs canvas agreement.
  ActivityHistogram         : rolling per-minute hit counter.
  ProgressTracker           : progress count with positive/neutral/negative activity.
  estimate_eta              : Completing | Regressing | Unknown.
  TemplateRepository        : named trackers with shared designs and persistence.
  build_palette, PALETTE    : default palette.

Quick start:
  from template_tracker import build_palette, TemplateDesign, CanvasState
  from template_tracker import TemplateRepository, PixelEvent
"""

__version__ = "0.1.0"

from . import constants
from . import core_types
from . import palette_data
from . import utils

from .canvas import CanvasState
from .comparator import LiveCanvasComparator
from .core_types import (
    Activity,
    MalformedTemplate,
    Palette,
    PaletteColour,
    PixelChange,
    PixelEvent,
    Placement,
    TRANSPARENT,
)
from .design import Template, TemplateDesign
from .eta import Completing, Eta, Regressing, Unknown, estimate_eta
from .history import ActivityHistogram, partition
from .links import TemplateLink, parse_template_link
from .palette_data import PALETTE, build_palette, load_palette
from .quantize import block_scale, quantize, quantize_async
from .repository import TemplateRepository
from .summary import format_summary
from .tracker import ProgressTracker

__all__ = [
    "__version__",
    "constants",
    "core_types",
    "palette_data",
    "utils",
    "Activity",
    "MalformedTemplate",
    "Palette",
    "PaletteColour",
    "PixelChange",
    "PixelEvent",
    "Placement",
    "TRANSPARENT",
    "CanvasState",
    "LiveCanvasComparator",
    "Template",
    "TemplateDesign",
    "Completing",
    "Regressing",
    "Unknown",
    "Eta",
    "estimate_eta",
    "ActivityHistogram",
    "partition",
    "TemplateLink",
    "parse_template_link",
    "PALETTE",
    "build_palette",
    "load_palette",
    "block_scale",
    "quantize",
    "quantize_async",
    "TemplateRepository",
    "format_summary",
    "ProgressTracker",
]
