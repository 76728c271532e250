"""Status line with transport state, time, progress, volume, and mode."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text
from textual.widgets import Static

from pulseviz.utils.time_format import format_time_pair_ms

PROGRESS_WIDTH = 24


@dataclass(frozen=True)
class StatusSnapshot:
    status: str
    mode: str
    position_ms: float
    duration_ms: float
    progress: float
    volume: int
    track_name: str | None = None
    notice: str | None = None


class StatusPane(Static):
    last_snapshot: StatusSnapshot | None = None

    def update_status(self, snapshot: StatusSnapshot) -> None:
        self.last_snapshot = snapshot
        self.update(status_text(snapshot))


def progress_bar(percent: float, width: int = PROGRESS_WIDTH) -> str:
    clamped = max(0.0, min(100.0, percent))
    fill = int(round(width * clamped / 100.0))
    return ("#" * fill).ljust(width, "-")


def status_text(snapshot: StatusSnapshot) -> Text:
    pos_text, dur_text = format_time_pair_ms(snapshot.position_ms, snapshot.duration_ms)
    text = Text(no_wrap=True, overflow="ellipsis")
    if snapshot.notice:
        text.append("Notice: ", style="bold #FF5A36")
        text.append(snapshot.notice)
        text.append(" | ")
    text.append("Track: ", style="bold #F2C94C")
    text.append(snapshot.track_name or "none")
    text.append(" | ")
    text.append("Status: ", style="bold #F2C94C")
    text.append(snapshot.status)
    text.append(" | ")
    text.append(f"{pos_text} / {dur_text} ")
    text.append(f"[{progress_bar(snapshot.progress)}]")
    text.append(" | ")
    text.append("Vol: ", style="bold #F2C94C")
    text.append(f"{snapshot.volume}%")
    text.append(" | ")
    text.append("Mode: ", style="bold #F2C94C")
    text.append(snapshot.mode)
    return text
