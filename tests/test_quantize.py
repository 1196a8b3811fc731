from __future__ import annotations

import asyncio

import numpy as np
import pytest

from template_tracker.core_types import MalformedTemplate, TRANSPARENT
from template_tracker.design import TemplateDesign
from template_tracker.quantize import block_scale, quantize, quantize_async, rgba_from_bytes

from helpers import BLUE, GREEN, PALETTE, RED, indices_to_rgba


def _upscale(rgba: np.ndarray, scale: int) -> np.ndarray:
    return np.repeat(np.repeat(rgba, scale, axis=0), scale, axis=1)


def test_unscaled_round_trip_reproduces_indices():
    rng = np.random.default_rng(7)
    choices = np.array([RED, BLUE, GREEN, TRANSPARENT], dtype=np.uint8)
    indices = rng.choice(choices, size=(13, 17))
    out = quantize(indices_to_rgba(indices), PALETTE)
    assert out.dtype == np.uint8
    np.testing.assert_array_equal(out, indices)


def test_upscaled_image_reduces_to_logical_cells():
    indices = np.array([[RED, BLUE], [TRANSPARENT, GREEN]], dtype=np.uint8)
    rgba = _upscale(indices_to_rgba(indices), 3)
    np.testing.assert_array_equal(quantize(rgba, PALETTE, 3), indices)


def test_tie_keeps_lowest_palette_index():
    block = np.full((4, 4), BLUE, dtype=np.uint8)
    block[2:, :] = RED  # 8 blue first in raster order, 8 red after
    assert quantize(indices_to_rgba(block), PALETTE, 4)[0, 0] == RED


def test_majority_wins_over_order():
    block = np.full((2, 2), BLUE, dtype=np.uint8)
    block[0, 0] = RED
    assert quantize(indices_to_rgba(block), PALETTE, 2)[0, 0] == BLUE


def test_fully_transparent_block_is_transparent_despite_rgb_match():
    rgba = np.zeros((2, 2, 4), dtype=np.uint8)
    rgba[..., 0] = 255  # exact red RGB, alpha 0
    assert quantize(rgba, PALETTE, 2)[0, 0] == TRANSPARENT


def test_off_palette_colours_do_not_vote():
    rgba = np.zeros((2, 2, 4), dtype=np.uint8)
    rgba[..., :3] = (12, 34, 56)
    rgba[..., 3] = 255
    rgba[1, 1] = (0, 0, 255, 255)
    assert quantize(rgba, PALETTE, 2)[0, 0] == BLUE
    rgba[1, 1] = (1, 2, 3, 255)
    assert quantize(rgba, PALETTE, 2)[0, 0] == TRANSPARENT


def test_scale_marker_is_only_skipped_when_requested():
    rgba = np.zeros((2, 2, 4), dtype=np.uint8)
    rgba[0, 0] = (255, 0, 0, 10)  # faint red marker
    rgba[1, 1] = (0, 0, 255, 255)
    assert quantize(rgba, PALETTE, 2)[0, 0] == RED
    assert quantize(rgba, PALETTE, 2, skip_scale_marker=True)[0, 0] == BLUE


def test_scale_marker_above_threshold_still_votes():
    rgba = np.zeros((2, 2, 4), dtype=np.uint8)
    rgba[0, 0] = (255, 0, 0, 200)
    rgba[1, 1] = (0, 0, 255, 255)
    assert quantize(rgba, PALETTE, 2, skip_scale_marker=True)[0, 0] == RED


def test_block_scale_rejects_non_integer_ratio():
    assert block_scale(12, 8, 3) == 4
    assert block_scale(12, 8, None) == 1
    with pytest.raises(MalformedTemplate):
        block_scale(10, 10, 3)
    with pytest.raises(MalformedTemplate):
        block_scale(12, 10, 3)  # height not a multiple of 4


def test_design_from_rgba_fails_before_decoding():
    rgba = indices_to_rgba(np.zeros((10, 10), dtype=np.uint8))
    with pytest.raises(MalformedTemplate):
        TemplateDesign.from_rgba(rgba, PALETTE, logical_width=3)


def test_quantize_rejects_partial_blocks():
    rgba = indices_to_rgba(np.zeros((3, 4), dtype=np.uint8))
    with pytest.raises(MalformedTemplate):
        quantize(rgba, PALETTE, 2)


def test_async_matches_sync():
    rng = np.random.default_rng(3)
    indices = rng.choice(np.array([RED, BLUE, TRANSPARENT], dtype=np.uint8), size=(9, 5))
    rgba = _upscale(indices_to_rgba(indices), 2)
    out = asyncio.run(quantize_async(rgba, PALETTE, 2, yield_every=7))
    np.testing.assert_array_equal(out, quantize(rgba, PALETTE, 2))


def test_rgba_from_bytes_checks_length():
    data = bytes([255, 0, 0, 255] * 6)
    assert rgba_from_bytes(data, 3, 2).shape == (2, 3, 4)
    with pytest.raises(MalformedTemplate):
        rgba_from_bytes(data, 4, 2)


def test_design_decodes_asynchronously():
    indices = np.array([[RED, BLUE, GREEN], [GREEN, TRANSPARENT, RED]], dtype=np.uint8)
    rgba = _upscale(indices_to_rgba(indices), 2)
    design = asyncio.run(TemplateDesign.from_rgba_async(rgba, PALETTE, logical_width=3))
    assert design == TemplateDesign(3, 2, indices.reshape(-1))
