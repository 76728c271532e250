"""Color and paint values shared by render modes and surfaces."""

from __future__ import annotations

import colorsys
from dataclasses import dataclass
from typing import Union

RGBA8 = tuple[int, int, int, int]


@dataclass(frozen=True)
class Rgba:
    """Straight-alpha RGB color; channels 0-255, ``alpha`` in [0, 1]."""

    red: int
    green: int
    blue: int
    alpha: float = 1.0

    def to_rgba8(self) -> RGBA8:
        return (
            _channel(self.red),
            _channel(self.green),
            _channel(self.blue),
            _alpha8(self.alpha),
        )

    def css(self) -> str:
        return f"rgba({self.red}, {self.green}, {self.blue}, {_fmt(self.alpha)})"


@dataclass(frozen=True)
class Hsla:
    """CSS-style HSL color; saturation and lightness are percentages."""

    hue: float
    saturation: float
    lightness: float
    alpha: float = 1.0

    def to_rgba8(self) -> RGBA8:
        red, green, blue = colorsys.hls_to_rgb(
            (self.hue % 360.0) / 360.0,
            _unit(self.lightness / 100.0),
            _unit(self.saturation / 100.0),
        )
        return (
            _channel(red * 255.0),
            _channel(green * 255.0),
            _channel(blue * 255.0),
            _alpha8(self.alpha),
        )

    def css(self) -> str:
        return (
            f"hsla({_fmt(self.hue)}, {_fmt(self.saturation)}%, "
            f"{_fmt(self.lightness)}%, {_fmt(self.alpha)})"
        )


Color = Union[Rgba, Hsla]


@dataclass(frozen=True)
class ColorStop:
    offset: float
    color: Color


@dataclass(frozen=True)
class LinearGradient:
    """Gradient along the segment (x0, y0) -> (x1, y1)."""

    x0: float
    y0: float
    x1: float
    y1: float
    stops: tuple[ColorStop, ...]

    def color_at(self, t: float) -> RGBA8:
        return _interpolate(self.stops, t)


@dataclass(frozen=True)
class RadialGradient:
    """Concentric gradient from ``inner_radius`` to ``outer_radius``."""

    cx: float
    cy: float
    inner_radius: float
    outer_radius: float
    stops: tuple[ColorStop, ...]

    def color_at(self, t: float) -> RGBA8:
        return _interpolate(self.stops, t)


Paint = Union[Rgba, Hsla, LinearGradient, RadialGradient]

TRANSPARENT = Rgba(0, 0, 0, 0.0)


def fade(alpha: float) -> Rgba:
    """Translucent black used to leave fading trails between frames."""
    return Rgba(0, 0, 0, alpha)


def _interpolate(stops: tuple[ColorStop, ...], t: float) -> RGBA8:
    if not stops:
        return TRANSPARENT.to_rgba8()
    ordered = sorted(stops, key=lambda stop: stop.offset)
    t = _unit(t)
    if t <= ordered[0].offset:
        return ordered[0].color.to_rgba8()
    for left, right in zip(ordered, ordered[1:]):
        if t <= right.offset:
            span = right.offset - left.offset
            mix = 0.0 if span <= 0.0 else (t - left.offset) / span
            start = left.color.to_rgba8()
            end = right.color.to_rgba8()
            return (
                _channel(start[0] + (end[0] - start[0]) * mix),
                _channel(start[1] + (end[1] - start[1]) * mix),
                _channel(start[2] + (end[2] - start[2]) * mix),
                _channel(start[3] + (end[3] - start[3]) * mix),
            )
    return ordered[-1].color.to_rgba8()


def _unit(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def _channel(value: float) -> int:
    return max(0, min(255, int(round(value))))


def _alpha8(alpha: float) -> int:
    return _channel(_unit(alpha) * 255.0)


def _fmt(value: float) -> str:
    return f"{value:g}"
