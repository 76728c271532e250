"""Test configuration."""

from __future__ import annotations

import asyncio
import struct
import sys
import wave
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def ensure_current_event_loop():
    """Provide a current event loop for sync tests (required on Python 3.9)."""
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        yield
    finally:
        loop.close()
        asyncio.set_event_loop(None)


@pytest.fixture
def write_wave(tmp_path):
    """Write a 16-bit PCM WAV built from float samples in [-1, 1]."""

    def _write(
        samples: list[float],
        *,
        name: str = "tone.wav",
        sample_rate: int = 8000,
        channels: int = 1,
    ) -> Path:
        path = tmp_path / name
        frames = b"".join(
            struct.pack("<" + "h" * channels, *([int(value * 32767)] * channels))
            for value in samples
        )
        with wave.open(str(path), "wb") as handle:
            handle.setnchannels(channels)
            handle.setsampwidth(2)
            handle.setframerate(sample_rate)
            handle.writeframes(frames)
        return path

    return _write
