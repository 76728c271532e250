"""Tests for color and gradient values."""

from __future__ import annotations

from pulseviz.visualizers.color import (
    ColorStop,
    Hsla,
    LinearGradient,
    RadialGradient,
    Rgba,
    fade,
)


def test_hsla_converts_primary_hues() -> None:
    assert Hsla(0, 100, 50).to_rgba8() == (255, 0, 0, 255)
    assert Hsla(120, 100, 50).to_rgba8() == (0, 255, 0, 255)
    assert Hsla(240, 100, 50, 0.5).to_rgba8() == (0, 0, 255, 128)
    assert Hsla(360 + 120, 100, 50).to_rgba8() == (0, 255, 0, 255)


def test_hsla_lightness_extremes() -> None:
    assert Hsla(200, 100, 100).to_rgba8()[:3] == (255, 255, 255)
    assert Hsla(200, 100, 0).to_rgba8()[:3] == (0, 0, 0)


def test_rgba_clamps_channels_and_alpha() -> None:
    assert Rgba(300, -4, 12, 2.0).to_rgba8() == (255, 0, 12, 255)
    assert fade(0.2).to_rgba8() == (0, 0, 0, 51)


def test_css_rendering() -> None:
    assert Rgba(255, 255, 255, 0.5).css() == "rgba(255, 255, 255, 0.5)"
    assert Hsla(45, 100, 80, 0.3).css() == "hsla(45, 100%, 80%, 0.3)"


def test_gradient_interpolates_between_stops() -> None:
    gradient = LinearGradient(
        0,
        0,
        0,
        10,
        (ColorStop(0.0, Rgba(0, 0, 0, 1.0)), ColorStop(1.0, Rgba(200, 100, 0, 0.0))),
    )
    assert gradient.color_at(0.0) == (0, 0, 0, 255)
    assert gradient.color_at(0.5) == (100, 50, 0, 128)
    assert gradient.color_at(1.0) == (200, 100, 0, 0)
    assert gradient.color_at(-3) == (0, 0, 0, 255)
    assert gradient.color_at(7) == (200, 100, 0, 0)


def test_radial_gradient_without_stops_is_transparent() -> None:
    gradient = RadialGradient(0, 0, 0, 5, ())
    assert gradient.color_at(0.3) == (0, 0, 0, 0)
