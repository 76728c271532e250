"""PCM WAV decode helpers for live spectrum sampling."""

from __future__ import annotations

import logging
import struct
import wave
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_WAVE_SUFFIXES = {".wav", ".wave"}


@dataclass(frozen=True)
class DecodedAudio:
    """Mono float samples in [-1.0, 1.0] at the file's native rate."""

    sample_rate: int
    samples: list[float]

    @property
    def duration_ms(self) -> int:
        if self.sample_rate <= 0:
            return 0
        return int((len(self.samples) * 1000) / self.sample_rate)


def is_wave_path(path: Path | str) -> bool:
    return Path(path).suffix.lower() in _WAVE_SUFFIXES


def decode_wave_mono(track_path: Path | str) -> DecodedAudio | None:
    """Decode a PCM WAV file into mono samples, or ``None`` when unreadable."""
    path = Path(track_path)
    if not path.exists() or not path.is_file():
        logger.warning("Track path '%s' is not a readable file.", path)
        return None
    try:
        with wave.open(str(path), "rb") as handle:
            channels = int(handle.getnchannels())
            frame_rate = int(handle.getframerate())
            sample_width = int(handle.getsampwidth())
            if channels <= 0 or frame_rate <= 0 or sample_width <= 0:
                return None
            raw = handle.readframes(handle.getnframes())
    except (wave.Error, EOFError, OSError) as exc:
        logger.warning("Failed to decode WAV '%s': %s", path, exc)
        return None
    try:
        mono = _pcm_to_mono(raw, channels=channels, sample_width=sample_width)
    except ValueError as exc:
        logger.warning("Unsupported PCM layout in '%s': %s", path, exc)
        return None
    if not mono:
        return None
    decoded = DecodedAudio(sample_rate=frame_rate, samples=mono)
    logger.info(
        "Decoded track for spectrum sampling",
        extra={
            "event": "audio_decoded",
            "path": str(path),
            "sample_rate": frame_rate,
            "channels": channels,
            "duration_ms": decoded.duration_ms,
        },
    )
    return decoded


def _pcm_to_mono(raw: bytes, *, channels: int, sample_width: int) -> list[float]:
    bytes_per_frame = channels * sample_width
    frame_count = len(raw) // bytes_per_frame
    if frame_count <= 0:
        return []
    if sample_width == 2:
        usable = raw[: frame_count * bytes_per_frame]
        if channels == 1:
            return [sample / 32768.0 for (sample,) in struct.iter_unpack("<h", usable)]
        return [
            sum(frame) / (channels * 32768.0)
            for frame in struct.iter_unpack("<" + ("h" * channels), usable)
        ]

    max_value = _sample_max(sample_width)
    mono: list[float] = []
    for frame_idx in range(frame_count):
        offset = frame_idx * bytes_per_frame
        total = 0.0
        for channel in range(channels):
            total += _read_sample(raw, offset + (channel * sample_width), sample_width)
        mono.append(max(-1.0, min(1.0, (total / channels) / max_value)))
    return mono


def _read_sample(raw: bytes, offset: int, sample_width: int) -> int:
    if sample_width == 1:
        return raw[offset] - 128
    if sample_width == 3:
        value = int.from_bytes(raw[offset : offset + 3], "little", signed=False)
        if value & 0x800000:
            value -= 0x1000000
        return value
    if sample_width == 4:
        return int.from_bytes(raw[offset : offset + 4], "little", signed=True)
    raise ValueError(f"Unsupported sample width {sample_width}")


def _sample_max(sample_width: int) -> float:
    if sample_width == 1:
        return 128.0
    if sample_width == 3:
        return 8_388_608.0
    if sample_width == 4:
        return 2_147_483_648.0
    raise ValueError(f"Unsupported sample width {sample_width}")
