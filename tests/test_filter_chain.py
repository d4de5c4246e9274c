"""Tests for the high-pass/low-pass conditioning chain."""

from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from recitation_pitch.filter_chain import FilterChain, FilterChainError


def _tone(freq, sr=44100, seconds=1.0):
    t = np.arange(int(sr * seconds)) / sr
    return np.sin(2 * np.pi * freq * t).astype(np.float32)


def _steady_rms(x):
    tail = x[len(x) // 2 :]
    return float(np.sqrt(np.mean(tail.astype(np.float64) ** 2)))


def test_stages_are_highpass_then_lowpass():
    chain = FilterChain(44100)
    kinds = [stage.kind for stage in chain.stages]
    cutoffs = [stage.cutoff_hz for stage in chain.stages]
    assert kinds == ["highpass", "lowpass"]
    assert cutoffs == [60.0, 4000.0]


def test_voice_band_passes_and_out_of_band_is_attenuated():
    sr = 44100
    voice = _steady_rms(FilterChain(sr).process(_tone(220.0, sr)))
    rumble = _steady_rms(FilterChain(sr).process(_tone(15.0, sr)))
    hiss = _steady_rms(FilterChain(sr).process(_tone(15000.0, sr)))
    reference = _steady_rms(_tone(220.0, sr))

    assert voice > 0.85 * reference
    assert rumble < 0.1 * reference
    assert hiss < 0.1 * reference


def test_chunked_processing_matches_single_call():
    sr = 16000
    rng = np.random.default_rng(3)
    signal_in = rng.standard_normal(4000).astype(np.float32)

    whole = FilterChain(sr).process(signal_in)

    chunked_chain = FilterChain(sr)
    pieces = [chunked_chain.process(chunk) for chunk in np.array_split(signal_in, 7)]
    chunked = np.concatenate(pieces)

    assert np.allclose(whole, chunked, atol=1e-5)


def test_empty_chunk_returns_empty_array():
    out = FilterChain(44100).process(np.zeros(0, dtype=np.float32))
    assert out.size == 0
    assert out.dtype == np.float32


def test_reset_clears_filter_state():
    chain = FilterChain(44100)
    chain.process(_tone(220.0, seconds=0.1))
    chain.reset()
    assert all(not np.any(stage.zi) for stage in chain.stages)


@pytest.mark.parametrize("samplerate", [0, -8000, 6000, 8000])
def test_invalid_sample_rate_cannot_build_chain(samplerate):
    # At 8 kHz the 4 kHz low-pass sits exactly on Nyquist.
    with pytest.raises(FilterChainError):
        FilterChain(samplerate)


def test_cutoffs_must_be_ordered():
    with pytest.raises(FilterChainError):
        FilterChain(44100, highpass_hz=500.0, lowpass_hz=400.0)
