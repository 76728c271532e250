"""Error types raised by the visualization engine and its collaborators.

Only `ConfigurationError` is fatal. The engine catches the other two at tick
time, logs them, and keeps the animation loop alive.
"""

from __future__ import annotations


class PulsevizError(Exception):
    """Base class for pulseviz errors."""


class ConfigurationError(PulsevizError, ValueError):
    """Invalid mode, particle count, buffer length, or frame rate."""


class SurfaceUnavailable(PulsevizError):
    """Drawing surface is missing or detached when a tick wants to paint."""


class SpectrumUnavailable(PulsevizError):
    """Spectrum sampling failed or produced malformed data."""
