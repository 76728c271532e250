"""Tests for PCM WAV decoding."""

from __future__ import annotations

import pytest

from pulseviz.services.audio_decode import (
    _pcm_to_mono,
    _read_sample,
    decode_wave_mono,
    is_wave_path,
)


def test_decode_mono_wave(write_wave) -> None:
    path = write_wave([0.0, 0.5, -0.5, 1.0] * 2000, sample_rate=8000)
    decoded = decode_wave_mono(path)
    assert decoded is not None
    assert decoded.sample_rate == 8000
    assert len(decoded.samples) == 8000
    assert decoded.duration_ms == 1000
    assert decoded.samples[:3] == pytest.approx([0.0, 0.5, -0.5], abs=1e-3)


def test_decode_stereo_wave_averages_channels(write_wave) -> None:
    path = write_wave([0.25] * 100, channels=2, name="stereo.wav")
    decoded = decode_wave_mono(path)
    assert decoded is not None
    assert len(decoded.samples) == 100
    assert decoded.samples[0] == pytest.approx(0.25, abs=1e-3)


def test_decode_missing_or_invalid_files_return_none(tmp_path) -> None:
    assert decode_wave_mono(tmp_path / "missing.wav") is None
    assert decode_wave_mono(tmp_path) is None
    garbage = tmp_path / "garbage.wav"
    garbage.write_bytes(b"not a riff file")
    assert decode_wave_mono(garbage) is None


def test_decode_empty_wave_returns_none(write_wave) -> None:
    assert decode_wave_mono(write_wave([], name="empty.wav")) is None


def test_is_wave_path() -> None:
    assert is_wave_path("song.WAV")
    assert is_wave_path("song.wave")
    assert not is_wave_path("song.mp3")


def test_eight_bit_pcm_is_unsigned() -> None:
    assert _pcm_to_mono(bytes([128, 255, 0]), channels=1, sample_width=1) == [
        0.0,
        127 / 128,
        -1.0,
    ]


def test_twenty_four_bit_samples_are_sign_extended() -> None:
    assert _read_sample(b"\xff\xff\xff", 0, 3) == -1
    assert _read_sample(b"\x00\x00\x40", 0, 3) == 0x400000
    with pytest.raises(ValueError):
        _read_sample(b"\x00\x00", 0, 2)
