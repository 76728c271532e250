"""Bar spectrum render mode."""

from __future__ import annotations

from dataclasses import dataclass

from .base import FrameInput, Mode, Spectrum
from .color import ColorStop, Hsla, LinearGradient, fade
from .particles import ParticleField
from .surface import Surface

FADE_ALPHA = 0.2
BAR_WIDTH_FACTOR = 2.5
HEIGHT_FACTOR = 0.8
BAR_GAP = 1.0
CAP_OFFSET = 10.0
CAP_HEIGHT = 5.0


@dataclass
class BarsMode:
    """Render each bin as a gradient bar with a translucent cap strip.

    Total bar run is ``N * (bar_width + 1)`` and is not clamped to the
    surface width; bars past the right edge simply fall off the surface.
    """

    mode: Mode = Mode.BARS
    display_name: str = "Bars"
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

        count = len(spectrum)
        bar_width = bar_width_for(width, count)
        x = 0.0
        for idx, level in enumerate(spectrum):
            bar_height = (level / 255) * height * HEIGHT_FACTOR
            hue = (idx / count) * 360
            top = height - bar_height
            gradient = LinearGradient(
                0,
                top,
                0,
                height,
                (
                    ColorStop(0.0, Hsla(hue, 100, 50, 0.8)),
                    ColorStop(1.0, Hsla(hue, 100, 70, 0.6)),
                ),
            )
            surface.fill_rect(x, top, bar_width, bar_height, gradient)
            surface.fill_rect(
                x, top - CAP_OFFSET, bar_width, CAP_HEIGHT, Hsla(hue, 100, 80, 0.3)
            )
            x += bar_width + BAR_GAP


def bar_width_for(width: float, count: int) -> float:
    return (width / count) * BAR_WIDTH_FACTOR
