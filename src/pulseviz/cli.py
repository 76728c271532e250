"""Headless snapshot command: render frames of a WAV track to PNG."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .errors import ConfigurationError
from .logging_utils import setup_logging
from .paths import log_dir, snapshot_dir
from .runtime_config import EngineConfig, clamp_fps, resolve_log_level
from .services.audio_decode import decode_wave_mono, is_wave_path
from .services.playback import ClockPlayback
from .services.spectrum_source import AnalyserSpectrumSource
from .visualizers import ManualFrameScheduler, Mode, VisualizationEngine, parse_mode
from .visualizers.raster import RasterSurface

logger = logging.getLogger(__name__)

DEFAULT_SIZE = "800x400"


class FrameClock:
    """Deterministic millisecond clock advanced one frame at a time."""

    def __init__(self, fps: int, start_ms: float = 0.0) -> None:
        self.frame_ms = 1000.0 / fps
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self) -> None:
        self.now_ms += self.frame_ms


def parse_size(value: str) -> tuple[int, int]:
    """Parse ``WIDTHxHEIGHT`` into positive integers."""
    parts = value.lower().split("x")
    if len(parts) != 2:
        raise ConfigurationError(f"Size must look like 800x400, got '{value}'.")
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise ConfigurationError(
            f"Size must look like 800x400, got '{value}'."
        ) from exc
    if width <= 0 or height <= 0:
        raise ConfigurationError(f"Size must be positive, got '{value}'.")
    return width, height


def render_snapshot(
    track: Path,
    out: Path,
    *,
    mode: Mode,
    at_seconds: float,
    frames: int,
    size: tuple[int, int],
    config: EngineConfig,
) -> Path:
    """Play ``frames`` ticks of ``track`` from ``at_seconds`` and save the last."""
    if frames <= 0:
        raise ConfigurationError(f"Frame count must be positive, got {frames}.")
    if not is_wave_path(track):
        raise ConfigurationError(f"Unsupported format '{track.name}' (PCM WAV only).")
    decoded = decode_wave_mono(track)
    if decoded is None:
        raise ConfigurationError(f"Unable to read '{track}' (PCM WAV only).")

    clock = FrameClock(config.target_fps)
    playback = ClockPlayback(clock_ms=clock)
    playback.load(decoded.duration_ms, track_name=track.name)
    playback.seek_ms(at_seconds * 1000.0)
    source = AnalyserSpectrumSource.from_decoded(
        decoded, playback, fft_size=config.buffer_length * 2
    )
    surface = RasterSurface(*size)
    scheduler = ManualFrameScheduler()
    engine = VisualizationEngine(
        source=source,
        playback=playback,
        scheduler=scheduler,
        surface=surface,
        config=config,
        mode=mode,
        clock_ms=clock,
    )
    playback.play()
    engine.start()
    for _ in range(frames):
        if not scheduler.run_pending():
            break
        clock.advance()
    logger.info(
        "Rendered %d frame(s) of '%s' in %s mode",
        engine.frame_index,
        track.name,
        mode.value,
        extra={"event": "snapshot_rendered", "frames": engine.frame_index},
    )
    return surface.save_png(out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pulseviz-snapshot",
        description="Render a visualizer frame of a WAV track to a PNG file.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("track", help="PCM WAV file to analyse")
    parser.add_argument(
        "--mode",
        default=Mode.BARS.value,
        help="Visualizer mode (bars, radial, wave, particles).",
    )
    parser.add_argument(
        "--at", type=float, default=0.0, help="Track position in seconds."
    )
    parser.add_argument(
        "--frames", type=int, default=30, help="Frames to render before saving."
    )
    parser.add_argument("--size", default=DEFAULT_SIZE, help="Canvas size WxH.")
    parser.add_argument("--fps", type=int, help="Simulated frame rate (1-120).")
    parser.add_argument(
        "--particles", type=int, default=100, help="Particle count for particle mode."
    )
    parser.add_argument("--seed", type=int, help="Seed for particle placement.")
    parser.add_argument("--out", help="Output PNG path.")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument(
        "--quiet", action="store_true", help="Only show warnings and errors"
    )
    parser.add_argument("--log-file", help="Write logs to a file path")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        level = resolve_log_level(verbose=args.verbose, quiet=args.quiet)
        setup_logging(
            log_dir=log_dir(),
            level=level,
            log_file=Path(args.log_file) if args.log_file else None,
        )
        mode = parse_mode(args.mode)
        config = EngineConfig(
            particle_count=args.particles,
            target_fps=clamp_fps(args.fps),
            seed=args.seed,
        )
        track = Path(args.track)
        out = (
            Path(args.out)
            if args.out
            else snapshot_dir() / f"{track.stem}-{mode.value}.png"
        )
        saved = render_snapshot(
            track,
            out,
            mode=mode,
            at_seconds=args.at,
            frames=args.frames,
            size=parse_size(args.size),
            config=config,
        )
    except ConfigurationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:  # pragma: no cover - top-level safety net
        logger.exception("Unhandled error: %s", exc)
        print("Unexpected error. Re-run with --verbose for details.", file=sys.stderr)
        return 1
    print(f"Saved {saved}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
