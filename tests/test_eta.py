from __future__ import annotations

import numpy as np
import pytest

from template_tracker.canvas import CanvasState
from template_tracker.constants import HOUR, MINUTE
from template_tracker.design import Template, TemplateDesign
from template_tracker.eta import (
    Completing,
    Regressing,
    Unknown,
    candidate_windows,
    estimate_eta,
)
from template_tracker.tracker import ProgressTracker

from helpers import BLUE, RED, T0


def _tracker(correct: int, size: int = 10, started: float = T0 - 3 * HOUR):
    row = np.full((1, size), BLUE, dtype=np.uint8)
    row[0, :correct] = RED
    design = TemplateDesign(size, 1, [RED] * size)
    return ProgressTracker(Template(design), CanvasState(row), now=started)


def _one_per_minute(histogram, minutes: int = 60):
    histogram.hit(0, T0 - minutes * MINUTE)
    for k in range(minutes - 1, -1, -1):
        histogram.hit(1, T0 - k * MINUTE)


def test_candidate_windows():
    assert candidate_windows(0) == []
    assert candidate_windows(30) == [30.0]
    assert candidate_windows(2 * HOUR) == [MINUTE, 15 * MINUTE, HOUR, 2 * HOUR]


def test_complete_template_is_done_now():
    tracker = _tracker(10)
    assert estimate_eta(tracker, T0) == Completing(0.0)


def test_no_tracking_time_is_unknown():
    tracker = _tracker(4, started=T0)
    assert estimate_eta(tracker, T0) == Unknown()


def test_no_activity_is_unknown():
    tracker = _tracker(4)
    assert estimate_eta(tracker, T0) == Unknown()


def test_steady_progress_picks_self_consistent_window():
    tracker = _tracker(4)
    _one_per_minute(tracker.positive)
    eta = estimate_eta(tracker, T0)
    # 6 remaining at 1/minute: 360 s, best matched by the 15 minute window.
    assert isinstance(eta, Completing)
    assert eta.duration == pytest.approx(360.0)


def test_steady_griefing_is_regressing():
    tracker = _tracker(4)
    _one_per_minute(tracker.negative)
    eta = estimate_eta(tracker, T0)
    assert isinstance(eta, Regressing)
    assert eta.duration == pytest.approx(240.0)


def test_tracker_eta_defaults_to_estimate():
    tracker = _tracker(4)
    _one_per_minute(tracker.positive)
    assert tracker.eta(T0) == estimate_eta(tracker, T0)


def test_young_template_uses_its_own_age():
    tracker = _tracker(4, started=T0 - 30)
    tracker.positive.hit(3, T0)
    eta = estimate_eta(tracker, T0)
    # 3 pixels in 30 s, 6 remaining: 60 s.
    assert isinstance(eta, Completing)
    assert eta.duration == pytest.approx(60.0)
