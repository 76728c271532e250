"""Core render-mode contracts and per-frame payloads.

These types define the boundary between the engine and the four drawing
algorithms. A render mode is stateless across calls; the only mutable state
that crosses ticks is the `ParticleField`, which the engine hands solely to
modes declaring ``uses_particle_field``.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from ..errors import SpectrumUnavailable

if TYPE_CHECKING:
    from .particles import ParticleField
    from .surface import Surface

Spectrum = bytes


class Mode(str, Enum):
    """Selectable render modes, in UI cycling order."""

    BARS = "bars"
    RADIAL = "radial"
    WAVE = "wave"
    PARTICLES = "particles"


@dataclass(frozen=True)
class FrameInput:
    """Per-tick snapshot taken once at tick start.

    Width and height are read from the surface exactly once so a host resize
    landing mid-tick cannot produce mixed dimensions within one frame.
    """

    frame_index: int
    width: float
    height: float
    current_time_ms: float


class RenderMode(Protocol):
    """Protocol each drawing algorithm must satisfy."""

    mode: Mode
    display_name: str
    uses_particle_field: bool

    def draw(
        self,
        spectrum: Spectrum,
        surface: Surface,
        frame: FrameInput,
        field: ParticleField | None = None,
    ) -> None: ...


def normalize_spectrum(values: object, expected_length: int) -> Spectrum:
    """Validate one spectrum sample and clamp its values into [0, 255].

    Wrong length or non-numeric content raises `SpectrumUnavailable`; numeric
    values outside the byte range are clamped rather than rejected.
    """
    if isinstance(values, (bytes, bytearray, memoryview)):
        data = bytes(values)
        if len(data) != expected_length:
            raise SpectrumUnavailable(
                f"Spectrum has {len(data)} bins, expected {expected_length}."
            )
        return data
    if not isinstance(values, Sequence) or isinstance(values, str):
        raise SpectrumUnavailable(
            f"Spectrum sample must be a sequence, got {type(values).__name__}."
        )
    if len(values) != expected_length:
        raise SpectrumUnavailable(
            f"Spectrum has {len(values)} bins, expected {expected_length}."
        )
    return bytes(_clamp_level(value) for value in values)


def _clamp_level(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SpectrumUnavailable(f"Non-numeric spectrum value {value!r}.")
    if math.isnan(value):
        return 0
    if math.isinf(value):
        return 255 if value > 0 else 0
    return max(0, min(255, int(value)))
