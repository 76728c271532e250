"""Spectrum sources sampled by the engine once per tick.

`AnalyserSpectrumSource` reproduces the classic browser analyser node: a
Blackman-windowed FFT over the most recent ``fft_size`` samples, magnitudes
smoothed across calls, converted to decibels and mapped linearly from
``[min_db, max_db]`` onto byte levels.
"""

from __future__ import annotations

import cmath
import logging
import math
from collections.abc import Sequence
from typing import Protocol

from ..errors import ConfigurationError
from .audio_decode import DecodedAudio
from .playback import PositionProvider

logger = logging.getLogger(__name__)

DEFAULT_FFT_SIZE = 256
DEFAULT_SMOOTHING = 0.8
DEFAULT_MIN_DB = -100.0
DEFAULT_MAX_DB = -30.0
_BLACKMAN_ALPHA = 0.16


class SpectrumSource(Protocol):
    """Synchronous, non-blocking provider of the latest bin levels."""

    def sample(self) -> Sequence[int] | bytes: ...


class StaticSpectrumSource:
    """Returns the same levels on every call; handy for tests and previews."""

    def __init__(self, levels: Sequence[int] | bytes) -> None:
        self._levels = levels

    def set_levels(self, levels: Sequence[int] | bytes) -> None:
        self._levels = levels

    def sample(self) -> Sequence[int] | bytes:
        return self._levels


class AnalyserSpectrumSource:
    """Byte spectrum of decoded PCM at the playback collaborator's position."""

    def __init__(
        self,
        samples: Sequence[float],
        sample_rate: int,
        position: PositionProvider,
        *,
        fft_size: int = DEFAULT_FFT_SIZE,
        smoothing: float = DEFAULT_SMOOTHING,
        min_db: float = DEFAULT_MIN_DB,
        max_db: float = DEFAULT_MAX_DB,
    ) -> None:
        if fft_size < 32 or fft_size & (fft_size - 1):
            raise ConfigurationError(
                f"FFT size must be a power of two >= 32, got {fft_size}."
            )
        if sample_rate <= 0:
            raise ConfigurationError(
                f"Sample rate must be positive, got {sample_rate}."
            )
        if not 0.0 <= smoothing <= 1.0:
            raise ConfigurationError(
                f"Smoothing must be within [0, 1], got {smoothing}."
            )
        if min_db >= max_db:
            raise ConfigurationError("min_db must be lower than max_db.")
        self._samples = samples
        self._sample_rate = sample_rate
        self._position = position
        self._fft_size = fft_size
        self._smoothing = smoothing
        self._min_db = min_db
        self._max_db = max_db
        self._window = blackman_window(fft_size)
        self._smoothed = [0.0] * (fft_size // 2)

    @classmethod
    def from_decoded(
        cls,
        decoded: DecodedAudio,
        position: PositionProvider,
        *,
        fft_size: int = DEFAULT_FFT_SIZE,
        smoothing: float = DEFAULT_SMOOTHING,
    ) -> AnalyserSpectrumSource:
        return cls(
            decoded.samples,
            decoded.sample_rate,
            position,
            fft_size=fft_size,
            smoothing=smoothing,
        )

    @property
    def bin_count(self) -> int:
        return self._fft_size // 2

    def reset(self) -> None:
        """Forget smoothing history, e.g. after a seek."""
        self._smoothed = [0.0] * self.bin_count

    def sample(self) -> bytes:
        block = self._time_block()
        windowed = [value * weight for value, weight in zip(block, self._window)]
        spectrum = fft(windowed)
        size = self._fft_size
        tau = self._smoothing
        for k in range(self.bin_count):
            magnitude = abs(spectrum[k]) / size
            self._smoothed[k] = (tau * self._smoothed[k]) + ((1.0 - tau) * magnitude)
        return bytes(self._to_byte(value) for value in self._smoothed)

    def _time_block(self) -> list[float]:
        end = int((self._position.position_ms / 1000.0) * self._sample_rate)
        end = max(0, min(end, len(self._samples)))
        start = end - self._fft_size
        if start >= 0:
            return list(self._samples[start:end])
        return [0.0] * (-start) + list(self._samples[0:end])

    def _to_byte(self, magnitude: float) -> int:
        if magnitude <= 0.0:
            return 0
        db = 20.0 * math.log10(magnitude)
        scaled = (255.0 / (self._max_db - self._min_db)) * (db - self._min_db)
        return max(0, min(255, int(math.floor(scaled))))


def blackman_window(size: int) -> list[float]:
    a0 = (1.0 - _BLACKMAN_ALPHA) / 2.0
    a1 = 0.5
    a2 = _BLACKMAN_ALPHA / 2.0
    return [
        a0
        - a1 * math.cos((2.0 * math.pi * n) / size)
        + a2 * math.cos((4.0 * math.pi * n) / size)
        for n in range(size)
    ]


def fft(values: Sequence[float]) -> list[complex]:
    """Iterative radix-2 FFT; ``len(values)`` must be a power of two."""
    size = len(values)
    out = [complex(value) for value in values]
    j = 0
    for i in range(1, size):
        bit = size >> 1
        while j & bit:
            j ^= bit
            bit >>= 1
        j |= bit
        if i < j:
            out[i], out[j] = out[j], out[i]
    length = 2
    while length <= size:
        step = cmath.exp(-2j * math.pi / length)
        half = length // 2
        for start in range(0, size, length):
            w = complex(1.0)
            for k in range(half):
                even = out[start + k]
                odd = out[start + k + half] * w
                out[start + k] = even + odd
                out[start + k + half] = even - odd
                w *= step
        length <<= 1
    return out
