"""Tests for status line rendering."""

from __future__ import annotations

from pulseviz.ui.status_pane import StatusSnapshot, progress_bar, status_text


def _snapshot(**overrides) -> StatusSnapshot:
    values = {
        "status": "playing",
        "mode": "bars",
        "position_ms": 65_000,
        "duration_ms": 200_000,
        "progress": 32.5,
        "volume": 80,
        "track_name": "tone.wav",
    }
    values.update(overrides)
    return StatusSnapshot(**values)


def test_progress_bar_fills_proportionally() -> None:
    assert progress_bar(0, width=10) == "-" * 10
    assert progress_bar(50, width=10) == "#####-----"
    assert progress_bar(150, width=10) == "#" * 10
    assert progress_bar(-4, width=4) == "----"


def test_status_text_includes_transport_fields() -> None:
    plain = status_text(_snapshot()).plain
    assert "Track: tone.wav" in plain
    assert "Status: playing" in plain
    assert "1:05 / 3:20" in plain
    assert "Vol: 80%" in plain
    assert "Mode: bars" in plain
    assert "Notice" not in plain


def test_status_text_shows_placeholders_and_notice() -> None:
    plain = status_text(
        _snapshot(track_name=None, duration_ms=0, notice="Frame skipped.")
    ).plain
    assert plain.startswith("Notice: Frame skipped.")
    assert "Track: none" in plain
    assert "/ -:--" in plain
