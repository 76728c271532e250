"""Radial spectrum render mode: spokes growing out of a base circle."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .base import FrameInput, Mode, Spectrum
from .color import Hsla, Rgba, fade
from .particles import ParticleField
from .surface import Surface

FADE_ALPHA = 0.1
SPOKE_SCALE = 100.0
LINE_WIDTH = 2.0
RING_COLOR = Rgba(255, 255, 255, 0.5)


@dataclass
class RadialMode:
    """Render bins as spokes around the surface center.

    Spoke length is a fixed ``level / 255 * 100`` logical units regardless of
    surface size; only the base circle radius follows the surface.
    """

    mode: Mode = Mode.RADIAL
    display_name: str = "Radial"
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

        cx = width / 2
        cy = height / 2
        radius = base_radius_for(width, height)
        count = len(spectrum)
        for idx, level in enumerate(spectrum):
            angle = (idx / count) * math.pi * 2
            spoke = (level / 255) * SPOKE_SCALE
            cos_a = math.cos(angle)
            sin_a = math.sin(angle)
            surface.stroke_line(
                cx + cos_a * radius,
                cy + sin_a * radius,
                cx + cos_a * (radius + spoke),
                cy + sin_a * (radius + spoke),
                Hsla((idx / count) * 360, 100, 50, 0.8),
                LINE_WIDTH,
            )

        surface.stroke_circle(cx, cy, radius, RING_COLOR, LINE_WIDTH)


def base_radius_for(width: float, height: float) -> float:
    return min(width, height) / 4
