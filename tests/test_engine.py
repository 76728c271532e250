"""Tests for the visualization engine lifecycle and tick loop."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import SimpleNamespace

import pytest

import pulseviz.visualizers.engine as engine_module
from pulseviz.errors import ConfigurationError, SpectrumUnavailable
from pulseviz.runtime_config import EngineConfig
from pulseviz.services.spectrum_source import StaticSpectrumSource
from pulseviz.visualizers.bars import BarsMode
from pulseviz.visualizers.base import FrameInput, Mode
from pulseviz.visualizers.engine import EngineState, VisualizationEngine
from pulseviz.visualizers.registry import ModeRegistry
from pulseviz.visualizers.scheduler import ManualFrameScheduler
from pulseviz.visualizers.surface import Clear, FillRect, RecordingSurface


@dataclass
class FakePlayback:
    """Playback double whose play state tests flip directly."""

    is_playing: bool = True


@dataclass
class RaisingSource:
    """Spectrum source double that fails on every sample."""

    def sample(self) -> bytes:
        raise RuntimeError("analyser gone")


@dataclass
class FailingMode:
    """Render mode double that fails during draw to test loop resilience."""

    mode: Mode = Mode.WAVE
    display_name: str = "failing"
    uses_particle_field: bool = False

    def draw(self, spectrum, surface, frame, field=None) -> None:
        raise RuntimeError("boom")


@dataclass
class CapturingMode:
    """Render mode double recording what the engine hands to draw."""

    mode: Mode = Mode.PARTICLES
    display_name: str = "capturing"
    uses_particle_field: bool = True
    calls: list[tuple[FrameInput, object]] = field(default_factory=list)

    def draw(self, spectrum, surface, frame, field=None) -> None:
        self.calls.append((frame, field))


def _engine(
    *,
    levels: bytes = bytes([128] * 128),
    playback: FakePlayback | None = None,
    surface: RecordingSurface | None = None,
    mode: Mode | str = Mode.BARS,
    **kwargs,
):
    scheduler = ManualFrameScheduler()
    surface = surface if surface is not None else RecordingSurface(800, 400)
    engine = VisualizationEngine(
        source=kwargs.pop("source", StaticSpectrumSource(levels)),
        playback=playback or FakePlayback(),
        scheduler=scheduler,
        surface=surface,
        config=kwargs.pop("config", EngineConfig(seed=7)),
        mode=mode,
        clock_ms=lambda: 1000.0,
        **kwargs,
    )
    return engine, scheduler, surface


def _events(caplog) -> list[str]:
    return [getattr(record, "event", "") for record in caplog.records]


def test_start_runs_one_tick_per_refresh() -> None:
    engine, scheduler, surface = _engine()
    engine.start()
    assert engine.state is EngineState.RUNNING
    assert scheduler.pending == 1

    scheduler.run_frames(3)

    assert engine.frame_index == 3
    assert scheduler.pending == 1
    assert surface.ops_of(FillRect)


def test_start_while_running_is_a_no_op() -> None:
    engine, scheduler, _ = _engine()
    engine.start()
    engine.start()
    assert scheduler.pending == 1


def test_stop_twice_is_safe_and_clears_surface(caplog) -> None:
    caplog.set_level(logging.INFO)
    engine, scheduler, surface = _engine()
    engine.start()
    scheduler.run_pending()

    engine.stop()
    engine.stop()

    assert engine.state is EngineState.STOPPED
    assert scheduler.pending == 0
    assert surface.is_cleared
    assert _events(caplog).count("visualizer_stopped") == 1


def test_stop_without_surface_does_not_raise() -> None:
    engine = VisualizationEngine(
        source=StaticSpectrumSource(bytes(128)),
        playback=FakePlayback(),
        scheduler=ManualFrameScheduler(),
    )
    engine.stop()
    assert engine.state is EngineState.STOPPED


def test_stopped_engine_ignores_stale_ticks() -> None:
    engine, scheduler, surface = _engine()
    engine.start()
    engine.stop()
    surface.reset_ops()
    engine._tick()
    assert surface.ops == []
    assert engine.frame_index == 0


def test_loop_ends_when_playback_stops_and_keeps_last_frame(caplog) -> None:
    caplog.set_level(logging.INFO)
    playback = FakePlayback()
    engine, scheduler, surface = _engine(playback=playback)
    engine.start()
    scheduler.run_pending()
    frames_before = engine.frame_index

    playback.is_playing = False
    scheduler.run_pending()

    assert engine.state is EngineState.STOPPED
    assert scheduler.pending == 0
    assert engine.frame_index == frames_before
    assert not isinstance(surface.ops[-1], Clear)
    assert "visualizer_loop_ended" in _events(caplog)


def test_restart_after_playback_gate_resumes_loop() -> None:
    playback = FakePlayback()
    engine, scheduler, _ = _engine(playback=playback)
    engine.start()
    playback.is_playing = False
    scheduler.run_pending()
    playback.is_playing = True

    engine.start()
    scheduler.run_frames(2)

    assert engine.is_running
    assert engine.frame_index == 2


def test_detached_surface_skips_tick_and_keeps_loop(caplog) -> None:
    caplog.set_level(logging.DEBUG)
    engine, scheduler, surface = _engine()
    engine.start()
    surface.detach()

    scheduler.run_frames(2)

    assert engine.is_running
    assert scheduler.pending == 1
    assert engine.frame_index == 0
    skipped = [
        record
        for record in caplog.records
        if getattr(record, "event", "") == "visualizer_tick_skipped"
    ]
    assert [record.reason for record in skipped] == [
        "surface_unavailable",
        "surface_unavailable",
    ]
    assert skipped[0].levelno == logging.WARNING
    assert skipped[1].levelno == logging.DEBUG
    assert engine.consume_notice() is not None
    assert engine.consume_notice() is None

    surface.attach()
    scheduler.run_pending()
    assert engine.frame_index == 1
    assert "visualizer_tick_resumed" in _events(caplog)


def test_missing_surface_skips_tick() -> None:
    engine, scheduler, _ = _engine()
    engine.detach_surface()
    engine.start()
    scheduler.run_pending()
    assert engine.is_running
    assert engine.frame_index == 0
    assert engine.particle_field is None


@pytest.mark.parametrize(
    "source",
    [
        StaticSpectrumSource(bytes(64)),
        StaticSpectrumSource(["x"] * 128),
        RaisingSource(),
    ],
)
def test_bad_spectrum_skips_tick(source, caplog) -> None:
    caplog.set_level(logging.DEBUG)
    engine, scheduler, surface = _engine(source=source)
    engine.start()
    scheduler.run_pending()

    assert engine.is_running
    assert scheduler.pending == 1
    assert surface.ops == []
    skipped = [
        record
        for record in caplog.records
        if getattr(record, "event", "") == "visualizer_tick_skipped"
    ]
    assert skipped[0].reason == "spectrum_unavailable"


def test_out_of_range_levels_are_clamped() -> None:
    engine, scheduler, surface = _engine(levels=[300] * 64 + [-5] * 64)
    engine.start()
    scheduler.run_pending()
    bars = [op for op in surface.ops_of(FillRect) if op.width != 800]
    assert bars[0].height == pytest.approx(320)
    assert bars[-2].height == 0


def test_draw_failure_is_logged_and_loop_continues(caplog) -> None:
    caplog.set_level(logging.ERROR)
    registry = ModeRegistry({Mode.BARS: BarsMode, Mode.WAVE: FailingMode}, Mode.BARS)
    engine, scheduler, _ = _engine(registry=registry, mode=Mode.WAVE)
    engine.start()
    scheduler.run_frames(2)

    assert engine.is_running
    assert scheduler.pending == 1
    assert any(record.exc_info for record in caplog.records)
    assert "failed to draw" in (engine.consume_notice() or "")


def test_invalid_configuration_raises_before_any_state() -> None:
    with pytest.raises(ConfigurationError):
        _engine(mode="spiral")
    with pytest.raises(ConfigurationError):
        EngineConfig(particle_count=0)
    with pytest.raises(ConfigurationError):
        EngineConfig(buffer_length=0)
    with pytest.raises(ConfigurationError):
        EngineConfig(target_fps=0)


def test_set_mode_accepts_names_and_rejects_unknown(caplog) -> None:
    caplog.set_level(logging.INFO)
    engine, _, _ = _engine()
    assert engine.set_mode("circle") is Mode.RADIAL
    assert "visualizer_mode_changed" in _events(caplog)
    with pytest.raises(ConfigurationError):
        engine.set_mode("spiral")
    assert engine.mode is Mode.RADIAL


def test_cycle_mode_walks_registry_order() -> None:
    engine, _, _ = _engine()
    assert [engine.cycle_mode() for _ in range(4)] == [
        Mode.RADIAL,
        Mode.WAVE,
        Mode.PARTICLES,
        Mode.BARS,
    ]


def test_switching_to_particles_preserves_positions() -> None:
    engine, scheduler, _ = _engine(levels=bytes(128))
    engine.start()
    scheduler.run_pending()
    field_before = engine.particle_field
    assert field_before is not None
    positions = field_before.positions()

    engine.set_mode(Mode.PARTICLES)

    assert engine.particle_field is field_before
    assert engine.particle_field.positions() == positions
    scheduler.run_pending()
    assert engine.particle_field.positions() == positions


def test_particle_field_only_reaches_particle_modes() -> None:
    capture = CapturingMode()
    registry = ModeRegistry(
        {Mode.BARS: BarsMode, Mode.PARTICLES: lambda: capture}, Mode.BARS
    )
    engine, scheduler, _ = _engine(registry=registry, mode=Mode.PARTICLES)
    engine.start()
    scheduler.run_pending()

    frame, field_arg = capture.calls[0]
    assert field_arg is engine.particle_field
    assert len(field_arg) == 100
    assert (frame.width, frame.height, frame.current_time_ms) == (800, 400, 1000.0)


def test_particle_field_created_lazily_from_surface_size() -> None:
    engine, _, _ = _engine(config=EngineConfig(particle_count=12, seed=1))
    assert engine.particle_field is None
    field_obj = engine.ensure_particle_field()
    assert len(field_obj) == 12
    assert engine.ensure_particle_field() is field_obj
    assert engine.reseed_particle_field() is not field_obj


def test_resize_applies_to_next_tick() -> None:
    engine, scheduler, surface = _engine()
    engine.start()
    engine.resize(320, 200)
    scheduler.run_pending()
    fade = surface.ops_of(FillRect)[0]
    assert (fade.width, fade.height) == (320, 200)


def test_on_frame_runs_after_each_successful_draw() -> None:
    calls: list[int] = []
    engine, scheduler, _ = _engine(on_frame=lambda: calls.append(1))
    engine.start()
    scheduler.run_frames(3)
    assert len(calls) == 3


def test_frame_overruns_warn_every_third_frame(monkeypatch, caplog) -> None:
    caplog.set_level(logging.WARNING)
    ticks = iter(float(value) for value in range(1000))
    monkeypatch.setattr(
        engine_module, "time", SimpleNamespace(monotonic=lambda: next(ticks))
    )
    engine, scheduler, _ = _engine()
    engine.start()
    scheduler.run_frames(6)

    assert engine.frame_index == 6
    assert _events(caplog).count("visualizer_frame_overrun") == 2


def test_spectrum_unavailable_from_source_passes_through() -> None:
    class Unavailable:
        def sample(self) -> bytes:
            raise SpectrumUnavailable("not ready")

    engine, scheduler, surface = _engine(source=Unavailable())
    engine.start()
    scheduler.run_pending()
    assert surface.ops == []
    assert engine.is_running
