"""Particle field simulation and the particle render mode.

The field is a fixed-capacity tuple created once per session. Each tick the
simulation walks it in index order: a particle is advanced, then tested
against every later particle, whose positions have not been advanced yet in
this tick. That interleaving is part of the visual behavior and is kept.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Iterator
from dataclasses import dataclass

from ..errors import ConfigurationError
from .base import FrameInput, Mode, Spectrum
from .color import ColorStop, Hsla, RadialGradient, fade
from .surface import Surface

logger = logging.getLogger(__name__)

FADE_ALPHA = 0.1
ENERGY_BASELINE = 128.0
LINK_DISTANCE = 100.0
LINK_ALPHA = 0.3
SIZE_GAIN = 2.0
HUE_DRIFT_MS = 50.0


@dataclass
class Particle:
    """One self-propelled point; ``base_radius`` and ``hue`` never change."""

    x: float
    y: float
    speed_x: float
    speed_y: float
    base_radius: float
    hue: float

    def advance(self, scale: float, width: float, height: float) -> None:
        """Move by speed * scale, reflect off the bounds, then clamp."""
        self.x += self.speed_x * scale
        self.y += self.speed_y * scale
        if self.x < 0 or self.x > width:
            self.speed_x *= -1
        if self.y < 0 or self.y > height:
            self.speed_y *= -1
        self.x = max(0.0, min(width, self.x))
        self.y = max(0.0, min(height, self.y))


class ParticleField:
    """Fixed-size, index-addressed collection of particles."""

    def __init__(self, particles: tuple[Particle, ...]) -> None:
        if not particles:
            raise ConfigurationError("Particle field needs at least one particle.")
        self._particles = particles

    @classmethod
    def seeded(
        cls,
        count: int,
        width: float,
        height: float,
        *,
        rng: random.Random | None = None,
    ) -> ParticleField:
        if count <= 0:
            raise ConfigurationError(f"Particle count must be positive, got {count}.")
        rand = rng or random.Random()
        particles = tuple(
            Particle(
                x=rand.random() * width,
                y=rand.random() * height,
                base_radius=rand.random() * 3 + 1,
                speed_x=(rand.random() - 0.5) * 2,
                speed_y=(rand.random() - 0.5) * 2,
                hue=rand.random() * 360,
            )
            for _ in range(count)
        )
        logger.debug(
            "Particle field seeded",
            extra={
                "event": "particle_field_seeded",
                "particle_count": count,
                "width": width,
                "height": height,
            },
        )
        return cls(particles)

    def __len__(self) -> int:
        return len(self._particles)

    def __getitem__(self, index: int) -> Particle:
        return self._particles[index]

    def __iter__(self) -> Iterator[Particle]:
        return iter(self._particles)

    def positions(self) -> list[tuple[float, float]]:
        return [(p.x, p.y) for p in self._particles]


@dataclass(frozen=True)
class ParticleLink:
    """Connection from the owning particle to a later particle ``index``."""

    index: int
    x: float
    y: float


@dataclass(frozen=True)
class ParticleSprite:
    """Draw-ready state of one particle after its update in a tick."""

    index: int
    x: float
    y: float
    size: float
    hue: float
    intensity: float
    links: tuple[ParticleLink, ...]


def energy_scale(spectrum: Spectrum) -> float:
    """Mean bin level normalized so moderate volume lands near 1.0."""
    if not spectrum:
        return 0.0
    return (sum(spectrum) / len(spectrum)) / ENERGY_BASELINE


def advance_particles(
    field: ParticleField,
    spectrum: Spectrum,
    width: float,
    height: float,
    current_time_ms: float,
) -> list[ParticleSprite]:
    """Run one simulation step and return sprites in index order."""
    scale = energy_scale(spectrum)
    total = len(field)
    bins = len(spectrum)
    sprites: list[ParticleSprite] = []
    for idx, particle in enumerate(field):
        data_index = math.floor((idx / total) * bins)
        intensity = spectrum[data_index] / 255
        particle.advance(scale, width, height)

        threshold = LINK_DISTANCE * intensity
        links: list[ParticleLink] = []
        for other_idx in range(idx + 1, total):
            other = field[other_idx]
            distance = math.hypot(other.x - particle.x, other.y - particle.y)
            if distance < threshold:
                links.append(ParticleLink(other_idx, other.x, other.y))

        sprites.append(
            ParticleSprite(
                index=idx,
                x=particle.x,
                y=particle.y,
                size=particle.base_radius * (1 + intensity * SIZE_GAIN),
                hue=(particle.hue + current_time_ms / HUE_DRIFT_MS) % 360,
                intensity=intensity,
                links=tuple(links),
            )
        )
    return sprites


def linked_pairs(sprites: list[ParticleSprite]) -> set[tuple[int, int]]:
    return {(sprite.index, link.index) for sprite in sprites for link in sprite.links}


@dataclass
class ParticlesMode:
    """Render the particle field as glowing discs with proximity links."""

    mode: Mode = Mode.PARTICLES
    display_name: str = "Particles"
    uses_particle_field: bool = True

    def draw(
        self,
        spectrum: Spectrum,
        surface: Surface,
        frame: FrameInput,
        field: ParticleField | None = None,
    ) -> None:
        width, height = frame.width, frame.height
        surface.fill_rect(0, 0, width, height, fade(FADE_ALPHA))
        if field is None:
            return

        for sprite in advance_particles(
            field, spectrum, width, height, frame.current_time_ms
        ):
            glow = RadialGradient(
                sprite.x,
                sprite.y,
                0,
                sprite.size,
                (
                    ColorStop(0.0, Hsla(sprite.hue, 100, 50, sprite.intensity)),
                    ColorStop(1.0, Hsla(sprite.hue, 100, 50, 0)),
                ),
            )
            surface.fill_circle(sprite.x, sprite.y, sprite.size, glow)
            link_color = Hsla(sprite.hue, 100, 50, sprite.intensity * LINK_ALPHA)
            for link in sprite.links:
                surface.stroke_line(sprite.x, sprite.y, link.x, link.y, link_color, 1.0)
