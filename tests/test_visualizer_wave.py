"""Tests for the layered wave render mode."""

from __future__ import annotations

import math

import pytest

from pulseviz.visualizers.base import FrameInput
from pulseviz.visualizers.color import Hsla
from pulseviz.visualizers.surface import RecordingSurface, StrokePolyline
from pulseviz.visualizers.wave import WaveMode, layer_hue, layer_points


def _draw(spectrum: bytes, *, current_time_ms: float = 0.0):
    surface = RecordingSurface(800, 400)
    frame = FrameInput(
        frame_index=0, width=800, height=400, current_time_ms=current_time_ms
    )
    WaveMode().draw(spectrum, surface, frame)
    return surface.ops_of(StrokePolyline)


def test_wave_draws_three_open_polylines_of_n_points() -> None:
    lines = _draw(bytes([255] * 128))
    assert len(lines) == 3
    assert all(len(line.points) == 128 for line in lines)
    assert all(line.line_width == 3 for line in lines)


def test_layer_zero_starts_at_vertical_center() -> None:
    points = layer_points(bytes([255] * 128), 800, 400, layer=0)
    assert points[0] == (0, 200)


def test_layers_are_offset_upward_by_thirty_units() -> None:
    silent = bytes(128)
    for layer in range(3):
        assert layer_points(silent, 800, 400, layer)[0][1] == 200 - layer * 30


def test_x_steps_by_width_over_bin_count() -> None:
    points = layer_points(bytes(128), 800, 400, layer=0)
    assert [x for x, _ in points[:3]] == pytest.approx([0, 6.25, 12.5])


def test_point_height_follows_sine_of_index() -> None:
    points = layer_points(bytes([255] * 128), 800, 400, layer=1)
    expected = 200 + (400 / 3) * math.sin((5 + 30) * 0.1) - 30
    assert points[5][1] == pytest.approx(expected)


def test_layer_hues_drift_with_time() -> None:
    assert layer_hue(0, 0) == 0
    assert layer_hue(0, 2) == 240
    assert layer_hue(5000, 1) == pytest.approx((100 + 120) % 360)
    lines = _draw(bytes(128), current_time_ms=1000)
    assert lines[0].color == Hsla(20, 100, 50, 0.6)
