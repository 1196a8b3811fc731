from __future__ import annotations

import math

import numpy as np

from template_tracker.canvas import CanvasState
from template_tracker.core_types import Placement, TRANSPARENT
from template_tracker.design import Template, TemplateDesign
from template_tracker.eta import Completing, Regressing, Unknown
from template_tracker.summary import describe_eta, format_summary, rate_marker
from template_tracker.tracker import ProgressTracker
from template_tracker.utils import format_percentage, human_time

from helpers import BLUE, GREEN, PALETTE, RED, T0


def _tracker(canvas_rows, design=None, placement=Placement()):
    design = design or TemplateDesign(2, 2, [RED, BLUE, TRANSPARENT, RED])
    canvas = CanvasState(np.array(canvas_rows, dtype=np.uint8))
    return ProgressTracker(Template(design, placement), canvas, now=T0)


def test_summary_of_unfinished_template():
    tracker = _tracker([[RED, BLUE], [RED, BLUE]])
    assert format_summary(tracker, PALETTE, now=T0 + 60) == "\n".join(
        [
            "66.67% done",
            "2 of 3 pixels",
            "",
            "⏹ 0 pixels/minute",
            "⏹ 0 pixels/hour",
            "⏹ 0 pixels/day",
            "ETA unknown",
            "started tracking 60 seconds ago",
            "[1,1] should be Red",
        ]
    )


def test_summary_of_finished_template():
    tracker = _tracker([[RED, BLUE], [GREEN, RED]])
    assert format_summary(tracker, PALETTE, now=T0) == "100% done\n3 of 3 pixels"


def test_summary_of_empty_template():
    design = TemplateDesign(1, 1, [TRANSPARENT])
    tracker = _tracker([[RED]], design=design)
    assert format_summary(tracker, PALETTE, now=T0) == "⚠ Template is empty"


def test_summary_flags_out_of_bounds_cells():
    tracker = _tracker([[RED, BLUE], [RED, BLUE]], placement=Placement(-1, 0))
    assert "⚠ 1 pixels out of bounds" in format_summary(tracker, PALETTE, now=T0)


def test_summary_truncates_examples():
    design = TemplateDesign(6, 1, [RED] * 6)
    tracker = _tracker([[BLUE] * 6], design=design)
    lines = format_summary(tracker, PALETTE, now=T0, max_examples=4).split("\n")
    assert lines[-5:] == [
        "[0,0] should be Red",
        "[1,0] should be Red",
        "[2,0] should be Red",
        "[3,0] should be Red",
        "...",
    ]


def test_rate_markers():
    assert rate_marker(5, 60) == "⏫"
    assert rate_marker(2, 60) == "🔼"
    assert rate_marker(-5, 60) == "⏬"
    assert rate_marker(-1, 60) == "🔽"
    assert rate_marker(0, 60) == "⏹"


def test_describe_eta():
    assert describe_eta(Completing(90)) == "Done in ~90 seconds"
    assert describe_eta(Regressing(7200)) == "Gone in ~120 minutes"
    assert describe_eta(Unknown()) == "ETA unknown"


def test_human_time_units():
    assert human_time(1) == "1 second"
    assert human_time(119) == "119 seconds"
    assert human_time(600) == "10 minutes"
    assert human_time(3 * 3600) == "3 hours"
    assert human_time(3 * 86400) == "3 days"
    assert human_time(math.inf) == "forever"


def test_format_percentage():
    assert format_percentage(1.0) == "100%"
    assert format_percentage(2 / 3) == "66.67%"
    assert format_percentage(0.5) == "50%"
