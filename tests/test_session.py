"""Lifecycle and timing tests for PitchTracker driven by a manual clock."""

from __future__ import annotations

from pathlib import Path
import logging
import sys

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from recitation_pitch.audio_sources import ArraySource
from recitation_pitch.config import FilterOptions, TrackerConfig
from recitation_pitch.driver import ManualDriver
from recitation_pitch.session import (
    PitchTracker,
    SessionStartError,
    SessionState,
    SessionStateError,
)

INTERVAL = 1.0 / 60.0


class _FailingSource(ArraySource):
    def start(self) -> None:
        raise OSError("no input device")


class _CountingSource(ArraySource):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.stop_calls = 0

    def stop(self) -> None:
        self.stop_calls += 1
        super().stop()


def _tracker(config=None):
    driver = ManualDriver(interval=INTERVAL)
    tracker = PitchTracker(driver, clock=driver.now, config=config)
    return driver, tracker


def _silence(seconds=1.0, sr=44100):
    return ArraySource(np.zeros(int(sr * seconds), dtype=np.float32), sr, hop=735)


def test_emits_one_point_per_tick_on_a_monotonic_timeline():
    driver, tracker = _tracker()
    points = []
    tracker.start(_silence(), points.append)
    assert tracker.state is SessionState.RUNNING

    assert driver.step(10) == 10
    assert len(points) == 10
    times = [p.time for p in points]
    assert times == sorted(times)
    assert np.allclose(np.diff(times), INTERVAL)
    assert times[0] == pytest.approx(INTERVAL)
    # Silence still produces points, just unvoiced ones.
    assert all(p.frequency is None and p.midi is None for p in points)
    tracker.stop()


def test_timeline_is_even_across_voiced_and_unvoiced_stretches():
    sr = 44100
    t = np.arange(sr // 2) / sr
    # 110.25 Hz has a period of exactly 400 samples at 44.1 kHz.
    tone = (0.5 * np.sin(2 * np.pi * 110.25 * t)).astype(np.float32)
    silence = np.zeros_like(tone)
    audio = np.concatenate([tone, silence, tone, silence])

    driver, tracker = _tracker()
    points = []
    tracker.start(ArraySource(audio, sr, hop=735), points.append)
    driver.step(audio.size // 735)
    tracker.stop()

    voiced = [p.frequency is not None for p in points]
    assert len(points) == audio.size // 735
    assert any(voiced) and not all(voiced)
    transitions = sum(a != b for a, b in zip(voiced, voiced[1:]))
    assert transitions >= 3

    times = np.array([p.time for p in points])
    assert np.all(np.diff(times) > 0)
    assert np.allclose(np.diff(times), INTERVAL)


def test_stop_is_idempotent_and_halts_emission():
    driver, tracker = _tracker()
    source = _CountingSource(np.zeros(4410, dtype=np.float32), 44100, hop=735)
    points = []
    tracker.start(source, points.append)
    driver.step(2)

    tracker.stop()
    tracker.stop()

    assert tracker.state is SessionState.STOPPED
    assert not tracker.is_active()
    assert source.stop_calls == 1
    assert not driver.scheduled
    assert driver.step(5) == 0
    assert len(points) == 2


def test_double_start_is_rejected():
    _, tracker = _tracker()
    tracker.start(_silence(), lambda p: None)
    with pytest.raises(SessionStateError):
        tracker.start(_silence(), lambda p: None)
    tracker.stop()


def test_stopped_tracker_cannot_restart():
    _, tracker = _tracker()
    tracker.start(_silence(), lambda p: None)
    tracker.stop()
    with pytest.raises(SessionStateError):
        tracker.start(_silence(), lambda p: None)


def test_source_start_failure_is_reported_once_and_leaves_idle():
    driver, tracker = _tracker()
    source = _FailingSource(np.zeros(100, dtype=np.float32), 44100, hop=10)
    with pytest.raises(SessionStartError) as excinfo:
        tracker.start(source, lambda p: None)
    assert isinstance(excinfo.value.__cause__, OSError)
    assert tracker.state is SessionState.IDLE
    assert not driver.scheduled

    tracker.start(_silence(), lambda p: None)
    assert tracker.is_active()
    tracker.stop()


def test_unsupported_sample_rate_fails_to_start():
    # The 4 kHz low-pass cannot be built below a 8 kHz Nyquist limit.
    _, tracker = _tracker()
    source = ArraySource(np.zeros(800, dtype=np.float32), 8000, hop=133)
    with pytest.raises(SessionStartError):
        tracker.start(source, lambda p: None)
    assert not tracker.is_active()


def test_current_time_follows_the_clock():
    driver, tracker = _tracker()
    assert tracker.get_current_time() == 0.0
    tracker.start(_silence(), lambda p: None)
    driver.step(3)
    assert tracker.get_current_time() == pytest.approx(3 * INTERVAL)
    tracker.stop()
    assert tracker.get_current_time() == 0.0


def test_stop_before_start_only_warns(caplog):
    _, tracker = _tracker()
    with caplog.at_level(logging.WARNING, logger="recitation_pitch.session"):
        tracker.stop()
    assert tracker.state is SessionState.IDLE
    assert "never started" in caplog.text


def test_consumer_exception_does_not_break_the_stream(caplog):
    driver, tracker = _tracker()
    calls = []

    def on_update(point):
        calls.append(point)
        raise RuntimeError("display went away")

    tracker.start(_silence(), on_update)
    with caplog.at_level(logging.ERROR, logger="recitation_pitch.session"):
        assert driver.step(3) == 3
    assert len(calls) == 3
    assert tracker.is_active()
    assert "callback failed" in caplog.text
    tracker.stop()


def test_filter_options_apply_from_next_tick():
    sr = 44100
    t = np.arange(sr) / sr
    # 110.25 Hz has a period of exactly 400 samples at 44.1 kHz.
    tone = (0.5 * np.sin(2 * np.pi * 110.25 * t)).astype(np.float32)
    driver, tracker = _tracker()
    points = []
    tracker.start(ArraySource(tone, sr, hop=735), points.append)

    driver.step(20)
    assert points[-1].frequency is not None

    options = tracker.set_filter_options(enabled=True, min_hz=200.0)
    assert options.enabled and options.min_hz == 200.0
    driver.step(1)
    assert points[-1].frequency is None
    tracker.stop()


def test_start_options_override_config():
    config = TrackerConfig(filter=FilterOptions())
    _, tracker = _tracker(config)
    preset = FilterOptions.voice_preset()
    tracker.start(_silence(), lambda p: None, preset)
    assert tracker.options == preset
    tracker.stop()
