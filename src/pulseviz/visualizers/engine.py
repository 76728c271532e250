"""Visualization engine: frame-locked tick loop and render-mode dispatch."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from enum import Enum

from ..errors import SpectrumUnavailable, SurfaceUnavailable
from ..runtime_config import EngineConfig
from ..services.playback import PlaybackStateProvider, monotonic_ms
from ..services.spectrum_source import SpectrumSource
from .base import FrameInput, Mode, RenderMode, Spectrum, normalize_spectrum
from .particles import ParticleField
from .registry import ModeRegistry, parse_mode
from .scheduler import FrameScheduler
from .surface import Surface

logger = logging.getLogger(__name__)

_OVERRUN_WARN_STREAK = 3


class EngineState(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"


class VisualizationEngine:
    """Owns the active mode, the particle field, and the tick loop.

    The loop is a chain of one-shot frame requests. Each tick checks the
    engine state and the playback gate first and, if either says stop, returns
    without requesting another frame, so no loop outlives playback.
    """

    def __init__(
        self,
        *,
        source: SpectrumSource,
        playback: PlaybackStateProvider,
        scheduler: FrameScheduler,
        surface: Surface | None = None,
        config: EngineConfig | None = None,
        registry: ModeRegistry | None = None,
        mode: Mode | str = Mode.BARS,
        clock_ms: Callable[[], float] | None = None,
        on_frame: Callable[[], None] | None = None,
    ) -> None:
        config = config or EngineConfig()
        registry = registry or ModeRegistry.built_in()
        active_mode = parse_mode(mode)
        renderer = registry.create(active_mode)

        self._config = config
        self._registry = registry
        self._source = source
        self._playback = playback
        self._scheduler = scheduler
        self._surface = surface
        self._clock_ms = clock_ms or monotonic_ms
        self.on_frame = on_frame
        self._mode = active_mode
        self._renderer = renderer
        self._state = EngineState.STOPPED
        self._pending: object | None = None
        self._rng = random.Random(config.seed)
        self._field: ParticleField | None = None
        self._frame_index = 0
        self._notice: str | None = None
        self._skip_reason: str | None = None
        self._overrun_streak = 0

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is EngineState.RUNNING

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def registry(self) -> ModeRegistry:
        return self._registry

    @property
    def frame_index(self) -> int:
        return self._frame_index

    @property
    def particle_field(self) -> ParticleField | None:
        return self._field

    @property
    def surface(self) -> Surface | None:
        return self._surface

    def start(self) -> None:
        """Enter RUNNING and request the first frame; no-op when running."""
        if self._state is EngineState.RUNNING:
            return
        if self._surface is not None and self._surface.is_attached:
            self.ensure_particle_field()
        self._state = EngineState.RUNNING
        self._skip_reason = None
        self._pending = self._scheduler.request_frame(self._tick)
        logger.info(
            "Visualizer started",
            extra={"event": "visualizer_started", "mode": self._mode.value},
        )

    def stop(self) -> None:
        """Cancel the pending frame and clear the surface; safe to repeat."""
        if self._pending is not None:
            self._scheduler.cancel_frame(self._pending)
            self._pending = None
        was_running = self._state is EngineState.RUNNING
        self._state = EngineState.STOPPED
        self._clear_surface()
        if was_running:
            logger.info(
                "Visualizer stopped",
                extra={"event": "visualizer_stopped", "frame_index": self._frame_index},
            )

    def set_mode(self, mode: Mode | str) -> Mode:
        """Switch the drawing algorithm used from the next tick on."""
        resolved = parse_mode(mode)
        if resolved is self._mode:
            return resolved
        renderer = self._registry.create(resolved)
        previous = self._mode
        self._renderer = renderer
        self._mode = resolved
        logger.info(
            "Visualizer mode changed",
            extra={
                "event": "visualizer_mode_changed",
                "previous_mode": previous.value,
                "mode": resolved.value,
            },
        )
        return resolved

    def cycle_mode(self) -> Mode:
        return self.set_mode(self._registry.next_mode(self._mode))

    def attach_surface(self, surface: Surface) -> None:
        self._surface = surface

    def detach_surface(self) -> None:
        self._surface = None

    def resize(self, width: float, height: float) -> None:
        """Resize the surface backing only; mode and particles are untouched."""
        if self._surface is None:
            logger.debug("Resize ignored; no surface attached.")
            return
        self._surface.resize(width, height)

    def ensure_particle_field(self) -> ParticleField:
        """Create the session's particle field on first use."""
        if self._field is None:
            self._field = self._seed_field()
        return self._field

    def reseed_particle_field(self) -> ParticleField:
        """Replace the particle field with a freshly randomized one."""
        self._field = self._seed_field()
        return self._field

    def consume_notice(self) -> str | None:
        """Return and clear one-shot user-facing notice text, if present."""
        notice = self._notice
        self._notice = None
        return notice

    def _tick(self) -> None:
        self._pending = None
        if self._state is not EngineState.RUNNING:
            return
        if not self._playback.is_playing:
            self._state = EngineState.STOPPED
            logger.info(
                "Visualizer loop ended with playback",
                extra={
                    "event": "visualizer_loop_ended",
                    "reason": "playback_inactive",
                    "frame_index": self._frame_index,
                },
            )
            return
        self._pending = self._scheduler.request_frame(self._tick)
        self._render_frame()

    def _render_frame(self) -> None:
        start = time.monotonic()
        try:
            surface = self._surface
            if surface is None or not surface.is_attached:
                raise SurfaceUnavailable("No drawing surface attached.")
            frame = FrameInput(
                frame_index=self._frame_index,
                width=surface.width,
                height=surface.height,
                current_time_ms=self._clock_ms(),
            )
            spectrum = self._sample_spectrum()
            field = None
            if self._renderer.uses_particle_field:
                field = self._field or self._seed_field(frame.width, frame.height)
                self._field = field
            self._renderer.draw(spectrum, surface, frame, field)
        except SurfaceUnavailable as exc:
            self._skip_tick("surface_unavailable", exc)
            return
        except SpectrumUnavailable as exc:
            self._skip_tick("spectrum_unavailable", exc)
            return
        except Exception as exc:
            logger.exception(
                "Visualizer mode '%s' draw failed: %s", self._mode.value, exc
            )
            self._notice = f"Visualizer '{self._mode.value}' failed to draw a frame."
            return

        if self._skip_reason is not None:
            logger.info(
                "Visualizer ticks resumed",
                extra={"event": "visualizer_tick_resumed", "reason": self._skip_reason},
            )
            self._skip_reason = None
        self._frame_index += 1
        self._track_budget(time.monotonic() - start)
        if self.on_frame is not None:
            self.on_frame()

    def _sample_spectrum(self) -> Spectrum:
        try:
            raw = self._source.sample()
        except SpectrumUnavailable:
            raise
        except Exception as exc:
            raise SpectrumUnavailable(f"Spectrum sampling failed: {exc}") from exc
        return normalize_spectrum(raw, self._config.buffer_length)

    def _skip_tick(self, reason: str, exc: Exception) -> None:
        # Warn once per streak of identical skips; the rest go to debug.
        level = logging.DEBUG if reason == self._skip_reason else logging.WARNING
        logger.log(
            level,
            "Visualizer tick skipped: %s",
            exc,
            extra={
                "event": "visualizer_tick_skipped",
                "reason": reason,
                "frame_index": self._frame_index,
            },
        )
        self._skip_reason = reason
        self._notice = f"Visualizer frame skipped ({reason.replace('_', ' ')})."

    def _track_budget(self, elapsed: float) -> None:
        budget = self._config.frame_budget_s
        if elapsed <= budget:
            self._overrun_streak = 0
            return
        self._overrun_streak += 1
        if self._overrun_streak >= _OVERRUN_WARN_STREAK:
            logger.warning(
                "Visualizer '%s' frame overrun %.3fs > %.3fs",
                self._mode.value,
                elapsed,
                budget,
                extra={"event": "visualizer_frame_overrun", "mode": self._mode.value},
            )
            self._overrun_streak = 0

    def _seed_field(
        self, width: float | None = None, height: float | None = None
    ) -> ParticleField:
        if width is None or height is None:
            surface = self._surface
            if surface is None:
                raise SurfaceUnavailable("Particle field needs surface dimensions.")
            width, height = surface.width, surface.height
        return ParticleField.seeded(
            self._config.particle_count, width, height, rng=self._rng
        )

    def _clear_surface(self) -> None:
        surface = self._surface
        if surface is None or not surface.is_attached:
            logger.debug("Surface clear skipped; no attached surface.")
            return
        try:
            surface.clear()
        except SurfaceUnavailable as exc:
            logger.debug("Surface clear skipped: %s", exc)
