"""Playback collaborator contracts and a clock-driven transport.

The engine only reads ``is_playing``. `ClockPlayback` adds the transport
controls the front ends need; it does not produce sound, its position simply
follows a monotonic clock so spectrum sampling stays in step with the UI.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal, Protocol

logger = logging.getLogger(__name__)

PlaybackStatus = Literal["idle", "playing", "paused", "stopped"]
ClockMs = Callable[[], float]


class PlaybackStateProvider(Protocol):
    """Read-only play-state view consumed by the engine tick gate."""

    @property
    def is_playing(self) -> bool: ...


class PositionProvider(Protocol):
    """Current transport position, used by spectrum sources."""

    @property
    def position_ms(self) -> float: ...


@dataclass(frozen=True)
class PlaybackStateChanged:
    """Transport transition; ``ended`` marks a natural end-of-track stop."""

    status: PlaybackStatus
    position_ms: float
    duration_ms: float
    ended: bool = False


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class ClockPlayback:
    """In-memory transport whose position advances with a monotonic clock."""

    def __init__(self, *, clock_ms: ClockMs | None = None) -> None:
        self._clock_ms = clock_ms or monotonic_ms
        self._status: PlaybackStatus = "idle"
        self._duration_ms = 0.0
        self._anchor_position_ms = 0.0
        self._anchor_clock_ms = 0.0
        self._volume = 100
        self._track_name: str | None = None
        self._handler: Callable[[PlaybackStateChanged], None] | None = None

    def set_event_handler(
        self, handler: Callable[[PlaybackStateChanged], None] | None
    ) -> None:
        self._handler = handler

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def track_name(self) -> str | None:
        return self._track_name

    @property
    def has_media(self) -> bool:
        return self._duration_ms > 0

    @property
    def duration_ms(self) -> float:
        return self._duration_ms

    @property
    def volume(self) -> int:
        return self._volume

    @property
    def position_ms(self) -> float:
        if self._status != "playing":
            return self._anchor_position_ms
        elapsed = self._clock_ms() - self._anchor_clock_ms
        return min(self._duration_ms, self._anchor_position_ms + max(0.0, elapsed))

    @property
    def is_playing(self) -> bool:
        return self._status == "playing" and not self._reached_end()

    @property
    def progress(self) -> float:
        """Position as a percentage of the duration (0 when nothing loaded)."""
        if self._duration_ms <= 0:
            return 0.0
        return (self.position_ms / self._duration_ms) * 100.0

    def load(self, duration_ms: float, track_name: str | None = None) -> None:
        self._duration_ms = max(0.0, float(duration_ms))
        self._track_name = track_name
        self._anchor_position_ms = 0.0
        self._status = "stopped"
        logger.info(
            "Track loaded",
            extra={
                "event": "playback_track_loaded",
                "track_name": track_name,
                "duration_ms": self._duration_ms,
            },
        )
        self._emit()

    def play(self) -> bool:
        if not self.has_media:
            return False
        if self._reached_end():
            self._anchor_position_ms = 0.0
        self._anchor_clock_ms = self._clock_ms()
        self._status = "playing"
        self._emit()
        return True

    def pause(self) -> None:
        if self._status != "playing":
            return
        self._anchor_position_ms = self.position_ms
        self._status = "paused"
        self._emit()

    def stop(self) -> None:
        if not self.has_media:
            return
        self._anchor_position_ms = 0.0
        self._status = "stopped"
        self._emit()

    def seek_ms(self, position_ms: float) -> None:
        self._anchor_position_ms = _clamp(position_ms, 0.0, self._duration_ms)
        self._anchor_clock_ms = self._clock_ms()
        self._emit()

    def seek_fraction(self, fraction: float) -> None:
        self.seek_ms(_clamp(fraction, 0.0, 1.0) * self._duration_ms)

    def set_volume(self, volume: int) -> None:
        self._volume = int(_clamp(volume, 0, 100))

    def poll(self) -> None:
        """Detect end of track; playback then stops and rewinds like `stop`."""
        if self._status == "playing" and self._reached_end():
            self._anchor_position_ms = 0.0
            self._status = "stopped"
            logger.info(
                "Track ended",
                extra={"event": "playback_track_ended", "track_name": self._track_name},
            )
            self._emit(ended=True)

    def _reached_end(self) -> bool:
        if self._status != "playing" or self._duration_ms <= 0:
            return False
        elapsed = self._clock_ms() - self._anchor_clock_ms
        return self._anchor_position_ms + elapsed >= self._duration_ms

    def _emit(self, *, ended: bool = False) -> None:
        if self._handler is None:
            return
        self._handler(
            PlaybackStateChanged(
                status=self._status,
                position_ms=self.position_ms,
                duration_ms=self._duration_ms,
                ended=ended,
            )
        )


def _clamp(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(value, max_value))
