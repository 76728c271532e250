"""Textual TUI app hosting the visualization engine."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from textual.app import App, ComposeResult
from textual.timer import Timer
from textual.widgets import Footer, Header

from . import __version__
from .errors import ConfigurationError
from .logging_utils import setup_logging
from .paths import log_dir
from .runtime_config import EngineConfig, clamp_fps, resolve_log_level
from .services.audio_decode import decode_wave_mono, is_wave_path
from .services.playback import ClockPlayback, PlaybackStateChanged
from .services.spectrum_source import (
    AnalyserSpectrumSource,
    SpectrumSource,
    StaticSpectrumSource,
)
from .ui.canvas_view import CanvasResized, CanvasView
from .ui.frame_scheduler import TextualFrameScheduler
from .ui.status_pane import StatusPane, StatusSnapshot
from .version import build_help_epilog
from .visualizers import Mode, VisualizationEngine, parse_mode

logger = logging.getLogger(__name__)
STATUS_POLL_INTERVAL = 0.25
SEEK_STEP_MS = 5_000
SEEK_STEP_BIG_MS = 30_000
VOLUME_STEP = 5


class PulsevizApp(App):
    TITLE = "pulseviz"
    CSS = """
    Screen {
        layout: vertical;
    }

    #visualizer-pane {
        height: 1fr;
        border: solid white;
    }

    #status-pane {
        height: 3;
        border: solid white;
        padding: 0 1;
    }
    """
    BINDINGS = [
        ("space", "play_pause", "Play/Pause"),
        ("x", "stop", "Stop"),
        ("left", "seek_back", "Seek -5s"),
        ("right", "seek_forward", "Seek +5s"),
        ("shift+left", "seek_back_big", "Seek -30s"),
        ("shift+right", "seek_forward_big", "Seek +30s"),
        ("home", "seek_start", "Seek start"),
        ("minus", "volume_down", "Vol -"),
        ("plus", "volume_up", "Vol +"),
        ("m", "cycle_mode", "Mode"),
        ("1", "set_mode('bars')", "Bars"),
        ("2", "set_mode('radial')", "Radial"),
        ("3", "set_mode('wave')", "Wave"),
        ("4", "set_mode('particles')", "Particles"),
        ("r", "reseed_particles", "Reseed"),
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        *,
        track_path: str | None = None,
        config: EngineConfig | None = None,
        mode: Mode | str = Mode.BARS,
        auto_play: bool = False,
        clock_ms: Callable[[], float] | None = None,
    ) -> None:
        super().__init__()
        self.engine_config = config or EngineConfig()
        self.initial_mode = parse_mode(mode)
        self.playback = ClockPlayback(clock_ms=clock_ms)
        self.engine: VisualizationEngine | None = None
        self.startup_failed = False
        self._track_path = track_path
        self._auto_play = auto_play
        self._canvas_sized = False
        self._clock_ms = clock_ms
        self._source: SpectrumSource = StaticSpectrumSource(
            bytes(self.engine_config.buffer_length)
        )
        self._poll_timer: Timer | None = None
        self._notice: str | None = None
        self._status_ready = False

    def compose(self) -> ComposeResult:
        yield Header()
        yield CanvasView(id="visualizer-pane")
        yield StatusPane(id="status-pane")
        yield Footer()

    def on_mount(self) -> None:
        canvas = self.query_one(CanvasView)
        try:
            if self._track_path:
                self._load_track(self._track_path)
            self.engine = VisualizationEngine(
                source=self._source,
                playback=self.playback,
                scheduler=TextualFrameScheduler(
                    self, fps=self.engine_config.target_fps
                ),
                surface=canvas.surface,
                config=self.engine_config,
                mode=self.initial_mode,
                clock_ms=self._clock_ms,
                on_frame=canvas.refresh,
            )
        except ConfigurationError as exc:
            logger.exception("Visualizer engine configuration rejected: %s", exc)
            self.startup_failed = True
            self.exit(return_code=1)
            return
        self.playback.set_event_handler(self._handle_playback_event)
        self._poll_timer = self.set_interval(
            STATUS_POLL_INTERVAL, self._poll_playback
        )
        self._status_ready = True
        if self._auto_play and self._canvas_sized:
            self._auto_play = False
            self.action_play_pause()
        self._update_status()

    def on_unmount(self) -> None:
        self._status_ready = False
        if self._poll_timer is not None:
            self._poll_timer.stop()
            self._poll_timer = None
        if self.engine is not None:
            self.engine.stop()

    def on_canvas_resized(self, message: CanvasResized) -> None:
        if self.engine is not None:
            self.engine.resize(message.width, message.height)
        else:
            self.query_one(CanvasView).surface.resize(message.width, message.height)
        self._canvas_sized = True
        if self._auto_play and self.engine is not None:
            # Playback starts once the canvas has its real size so the particle
            # field is seeded across the whole surface.
            self._auto_play = False
            self.action_play_pause()

    def action_play_pause(self) -> None:
        if self.playback.is_playing:
            # The engine loop ends on its next tick once playback reports paused.
            self.playback.pause()
            return
        if not self.playback.play():
            self._notice = "No track loaded."
            self._update_status()
            return
        if self.engine is not None:
            self.engine.start()

    def action_stop(self) -> None:
        self.playback.stop()
        if self.engine is not None:
            self.engine.stop()
        self._update_status()

    def action_seek_back(self) -> None:
        self._seek_relative(-SEEK_STEP_MS)

    def action_seek_forward(self) -> None:
        self._seek_relative(SEEK_STEP_MS)

    def action_seek_back_big(self) -> None:
        self._seek_relative(-SEEK_STEP_BIG_MS)

    def action_seek_forward_big(self) -> None:
        self._seek_relative(SEEK_STEP_BIG_MS)

    def action_seek_start(self) -> None:
        self._seek_to(0)

    def action_volume_down(self) -> None:
        self.playback.set_volume(self.playback.volume - VOLUME_STEP)
        self._update_status()

    def action_volume_up(self) -> None:
        self.playback.set_volume(self.playback.volume + VOLUME_STEP)
        self._update_status()

    def action_cycle_mode(self) -> None:
        if self.engine is None:
            return
        self.engine.cycle_mode()
        self._update_status()

    def action_set_mode(self, name: str) -> None:
        if self.engine is None:
            return
        try:
            self.engine.set_mode(name)
        except ConfigurationError as exc:
            logger.warning("Rejected visualizer mode '%s': %s", name, exc)
            self._notice = str(exc)
        self._update_status()

    def action_reseed_particles(self) -> None:
        if self.engine is None:
            return
        self.engine.reseed_particle_field()

    def _load_track(self, track_path: str) -> None:
        if not is_wave_path(track_path):
            logger.warning("Unsupported track format '%s'; PCM WAV only.", track_path)
            name = Path(track_path).name
            self._notice = f"Unsupported format '{name}' (PCM WAV only)."
            return
        decoded = decode_wave_mono(track_path)
        if decoded is None:
            self._notice = f"Unable to read '{Path(track_path).name}' (PCM WAV only)."
            return
        self._source = AnalyserSpectrumSource.from_decoded(
            decoded,
            self.playback,
            fft_size=self.engine_config.buffer_length * 2,
        )
        self.playback.load(decoded.duration_ms, track_name=Path(track_path).name)

    def _seek_relative(self, delta_ms: int) -> None:
        self._seek_to(self.playback.position_ms + delta_ms)

    def _seek_to(self, position_ms: float) -> None:
        self.playback.seek_ms(position_ms)
        if isinstance(self._source, AnalyserSpectrumSource):
            self._source.reset()
        self._update_status()

    def _poll_playback(self) -> None:
        self.playback.poll()
        self._update_status()

    def _handle_playback_event(self, event: PlaybackStateChanged) -> None:
        if event.ended and self.engine is not None:
            self.engine.stop()
        self._update_status()

    def _update_status(self) -> None:
        if not self._status_ready:
            return
        notice = self._notice
        if self.engine is not None:
            notice = self.engine.consume_notice() or notice
        self._notice = None
        self.query_one(StatusPane).update_status(
            StatusSnapshot(
                status=self.playback.status,
                mode=(
                    self.engine.mode.value if self.engine else self.initial_mode.value
                ),
                position_ms=self.playback.position_ms,
                duration_ms=self.playback.duration_ms,
                progress=self.playback.progress,
                volume=self.playback.volume,
                track_name=self.playback.track_name,
                notice=notice,
            )
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pulseviz",
        description="Audio-reactive spectrum visualizer for the terminal.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=build_help_epilog(),
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("track", nargs="?", help="PCM WAV file to visualize")
    parser.add_argument(
        "--mode",
        default=Mode.BARS.value,
        help="Initial visualizer mode (bars, radial, wave, particles).",
    )
    parser.add_argument(
        "--fps", type=int, help="Frame rate for the render loop (clamped to 1-120)."
    )
    parser.add_argument(
        "--particles", type=int, default=100, help="Particle count for particle mode."
    )
    parser.add_argument("--seed", type=int, help="Seed for particle placement.")
    parser.add_argument(
        "--play", action="store_true", help="Start playback immediately."
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument(
        "--quiet", action="store_true", help="Only show warnings and errors"
    )
    parser.add_argument("--log-file", help="Write logs to a file path")
    return parser


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    try:
        level = resolve_log_level(verbose=args.verbose, quiet=args.quiet)
        setup_logging(
            log_dir=log_dir(),
            level=level,
            log_file=Path(args.log_file) if args.log_file else None,
            console=False,
        )
        config = EngineConfig(
            particle_count=args.particles,
            target_fps=clamp_fps(args.fps),
            seed=args.seed,
        )
        mode = parse_mode(args.mode)
    except ConfigurationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    try:
        logging.getLogger(__name__).info("Starting pulseviz TUI")
        app = PulsevizApp(
            track_path=args.track, config=config, mode=mode, auto_play=args.play
        )
        app.run()
        return 1 if getattr(app, "startup_failed", False) else 0
    except Exception as exc:  # pragma: no cover - top-level safety net
        logging.getLogger(__name__).exception("Fatal startup error: %s", exc)
        print(
            "Startup failed. Verify the track path and re-run with --verbose.",
            file=sys.stderr,
        )
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
