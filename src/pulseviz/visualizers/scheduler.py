"""Frame scheduling contracts.

The engine never loops on its own: every tick asks the scheduler for the next
display refresh and simply does not ask again once it should stop. Hosts
supply the scheduler (a Textual timer in the terminal UI, a manual queue in
tests and headless rendering).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

FrameCallback = Callable[[], None]


class FrameScheduler(Protocol):
    def request_frame(self, callback: FrameCallback) -> object: ...

    def cancel_frame(self, handle: object) -> None: ...


@dataclass
class _ManualRequest:
    callback: FrameCallback
    cancelled: bool = False


@dataclass
class ManualFrameScheduler:
    """Deterministic scheduler driven by explicit `run_pending` calls.

    Each `run_pending` call stands for one display refresh: it runs the
    callbacks queued before the call, and anything they request lands in the
    next refresh.
    """

    _queue: list[_ManualRequest] = field(default_factory=list)
    frames_run: int = 0

    @property
    def pending(self) -> int:
        return sum(1 for request in self._queue if not request.cancelled)

    def request_frame(self, callback: FrameCallback) -> object:
        request = _ManualRequest(callback)
        self._queue.append(request)
        return request

    def cancel_frame(self, handle: object) -> None:
        if isinstance(handle, _ManualRequest):
            handle.cancelled = True

    def run_pending(self) -> int:
        """Run one refresh worth of callbacks and return how many ran."""
        batch = self._queue
        self._queue = []
        ran = 0
        for request in batch:
            if request.cancelled:
                continue
            request.callback()
            ran += 1
        if ran:
            self.frames_run += 1
        return ran

    def run_frames(self, count: int) -> int:
        """Run up to ``count`` refreshes, stopping early once nothing is queued."""
        total = 0
        for _ in range(count):
            if not self.pending:
                break
            total += self.run_pending()
        return total
