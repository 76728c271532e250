"""Render-mode registry and mode parsing.

The registry maps each `Mode` to a factory for its drawing algorithm so the
engine dispatches through one `draw` contract instead of branching on names.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..errors import ConfigurationError
from .bars import BarsMode
from .base import Mode, RenderMode
from .particles import ParticlesMode
from .radial import RadialMode
from .wave import WaveMode

logger = logging.getLogger(__name__)

ModeFactory = Callable[[], RenderMode]

# Older front ends labelled the radial mode "circle".
_MODE_ALIASES = {"circle": Mode.RADIAL}


def parse_mode(value: Mode | str) -> Mode:
    """Resolve a mode value or name; unknown values raise `ConfigurationError`."""
    if isinstance(value, Mode):
        return value
    if not isinstance(value, str):
        raise ConfigurationError(f"Invalid visualizer mode {value!r}.")
    normalized = value.strip().lower()
    if normalized in _MODE_ALIASES:
        return _MODE_ALIASES[normalized]
    try:
        return Mode(normalized)
    except ValueError:
        choices = ", ".join(mode.value for mode in Mode)
        raise ConfigurationError(
            f"Invalid visualizer mode {value!r}; expected one of: {choices}."
        ) from None


class ModeRegistry:
    """Registry creating render-mode strategies by `Mode`."""

    def __init__(self, factories: dict[Mode, ModeFactory], default: Mode) -> None:
        if not factories:
            raise ConfigurationError("ModeRegistry requires at least one factory.")
        if default not in factories:
            raise ConfigurationError(
                f"ModeRegistry default '{default.value}' is not registered."
            )
        self._factories = factories
        self._default = default

    @property
    def default(self) -> Mode:
        return self._default

    def modes(self) -> list[Mode]:
        """Registered modes in declaration order of the `Mode` enum."""
        return [mode for mode in Mode if mode in self._factories]

    def has_mode(self, mode: Mode) -> bool:
        return mode in self._factories

    def create(self, mode: Mode | str) -> RenderMode:
        resolved = parse_mode(mode)
        factory = self._factories.get(resolved)
        if factory is None:
            raise ConfigurationError(f"Visualizer mode '{resolved.value}' unavailable.")
        return factory()

    def next_mode(self, mode: Mode) -> Mode:
        ordered = self.modes()
        if mode not in ordered:
            return self._default
        return ordered[(ordered.index(mode) + 1) % len(ordered)]

    @classmethod
    def built_in(cls) -> ModeRegistry:
        factories: dict[Mode, ModeFactory] = {
            Mode.BARS: BarsMode,
            Mode.RADIAL: RadialMode,
            Mode.WAVE: WaveMode,
            Mode.PARTICLES: ParticlesMode,
        }
        logger.info(
            "Render mode registry loaded",
            extra={
                "event": "mode_registry_loaded",
                "modes": [mode.value for mode in factories],
                "default_mode": Mode.BARS.value,
            },
        )
        return cls(factories, default=Mode.BARS)
