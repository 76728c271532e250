"""Runtime configuration normalization helpers.

These helpers keep CLI flag interpretation deterministic across entrypoints
and validate engine construction parameters before any engine state exists.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ConfigurationError

DEFAULT_BUFFER_LENGTH = 128
DEFAULT_PARTICLE_COUNT = 100
DEFAULT_TARGET_FPS = 60
MIN_TARGET_FPS = 1
MAX_TARGET_FPS = 120


@dataclass(frozen=True)
class EngineConfig:
    """Fixed engine parameters for one visualization session.

    ``buffer_length`` is the number of spectrum bins every sample must carry.
    ``seed`` feeds the particle RNG; ``None`` means nondeterministic.
    """

    buffer_length: int = DEFAULT_BUFFER_LENGTH
    particle_count: int = DEFAULT_PARTICLE_COUNT
    target_fps: int = DEFAULT_TARGET_FPS
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.buffer_length <= 0:
            raise ConfigurationError(
                f"Spectrum buffer length must be positive, got {self.buffer_length}."
            )
        if self.particle_count <= 0:
            raise ConfigurationError(
                f"Particle count must be positive, got {self.particle_count}."
            )
        if self.target_fps <= 0:
            raise ConfigurationError(
                f"Target FPS must be positive, got {self.target_fps}."
            )

    @property
    def frame_budget_s(self) -> float:
        return 1.0 / self.target_fps


def resolve_log_level(*, verbose: bool, quiet: bool) -> str:
    """Resolve effective log level from CLI flags.

    Precedence is deterministic: --quiet overrides --verbose.
    """
    if quiet:
        return "WARNING"
    if verbose:
        return "DEBUG"
    return "INFO"


def clamp_fps(value: int | None) -> int:
    """Normalize a CLI frame-rate override into the supported range."""
    if value is None:
        return DEFAULT_TARGET_FPS
    return max(MIN_TARGET_FPS, min(int(value), MAX_TARGET_FPS))
