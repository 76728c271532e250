"""Layered waveform render mode."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .base import FrameInput, Mode, Spectrum
from .color import Hsla, fade
from .particles import ParticleField
from .surface import Point, Surface

FADE_ALPHA = 0.2
LAYER_COUNT = 3
LAYER_OFFSET = 30
LAYER_HUE_STEP = 120
HUE_DRIFT_MS = 50.0
LINE_WIDTH = 3.0


@dataclass
class WaveMode:
    """Render three phase- and height-offset polylines with drifting hues."""

    mode: Mode = Mode.WAVE
    display_name: str = "Wave"
    uses_particle_field: bool = False

    def draw(
        self,
        spectrum: Spectrum,
        surface: Surface,
        frame: FrameInput,
        field: ParticleField | None = None,
    ) -> None:
        width, height = frame.width, frame.height
        surface.fill_rect(0, 0, width, height, fade(FADE_ALPHA))

        for layer in range(LAYER_COUNT):
            hue = layer_hue(frame.current_time_ms, layer)
            surface.stroke_polyline(
                layer_points(spectrum, width, height, layer),
                Hsla(hue, 100, 50, 0.6),
                LINE_WIDTH,
            )


def layer_hue(current_time_ms: float, layer: int) -> float:
    return (current_time_ms / HUE_DRIFT_MS + layer * LAYER_HUE_STEP) % 360


def layer_points(
    spectrum: Spectrum, width: float, height: float, layer: int
) -> list[Point]:
    """Polyline vertices for one layer, one per bin in index order."""
    count = len(spectrum)
    slice_width = width / count
    points: list[Point] = []
    x = 0.0
    for idx, level in enumerate(spectrum):
        v = level / 255
        y = (
            height / 2
            + v * height / 3 * math.sin((idx + layer * LAYER_OFFSET) * 0.1)
            - layer * LAYER_OFFSET
        )
        points.append((x, y))
        x += slice_width
    return points
