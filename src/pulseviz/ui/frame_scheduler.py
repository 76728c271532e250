"""Frame scheduler backed by Textual one-shot timers."""

from __future__ import annotations

from textual.message_pump import MessagePump
from textual.timer import Timer

from pulseviz.visualizers.scheduler import FrameCallback


class TextualFrameScheduler:
    """Schedules engine ticks on the app's event loop at ``fps`` cadence."""

    def __init__(self, host: MessagePump, *, fps: int) -> None:
        self._host = host
        self._interval = 1.0 / max(1, fps)

    @property
    def interval(self) -> float:
        return self._interval

    def request_frame(self, callback: FrameCallback) -> Timer:
        return self._host.set_timer(self._interval, callback, name="visualizer-frame")

    def cancel_frame(self, handle: object) -> None:
        if isinstance(handle, Timer):
            handle.stop()
