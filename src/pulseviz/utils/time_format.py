"""Time formatting helpers for the UI."""

from __future__ import annotations

import math


def format_time(seconds: float) -> str:
    """Format seconds as ``m:ss`` with unpadded minutes."""
    total = _coerce_seconds(seconds)
    minutes = total // 60
    secs = total % 60
    return f"{minutes}:{secs:02d}"


def format_time_ms(ms: float) -> str:
    return format_time(_coerce_seconds(ms) // 1000)


def format_time_pair_ms(position_ms: float, duration_ms: float) -> tuple[str, str]:
    """Format position and duration; unknown durations render as ``-:--``."""
    position = format_time_ms(position_ms)
    if _coerce_seconds(duration_ms) <= 0:
        return position, "-:--"
    return position, format_time_ms(duration_ms)


def _coerce_seconds(value: float) -> int:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(numeric):
        return 0
    return max(0, int(numeric))
