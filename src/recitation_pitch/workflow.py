"""High-level workflows for tracking pitch live or over a recording."""

from __future__ import annotations

import dataclasses
import math
from typing import List, Optional

import numpy as np

from .audio_sources import ArraySource, AudioSource
from .config import FilterOptions, TrackerConfig
from .driver import ManualDriver, SleepDriver
from .recorder import PitchTrackRecorder
from .results import PitchPoint
from .session import PitchCallback, PitchTracker


def extract_pitch_track(
    audio: np.ndarray,
    sample_rate: int,
    *,
    options: Optional[FilterOptions] = None,
    config: Optional[TrackerConfig] = None,
) -> List[PitchPoint]:
    """Run the live pipeline over a recorded signal.

    The recording is replayed in tick-sized chunks through a
    :class:`~recitation_pitch.driver.ManualDriver`, so the returned points are
    exactly what a live session would have emitted for the same audio, one
    point per tick at ``k / tick_hz`` seconds.
    """

    base_cfg = config if config is not None else TrackerConfig()
    working_cfg = dataclasses.replace(base_cfg, samplerate=int(sample_rate))
    if options is not None:
        working_cfg = dataclasses.replace(working_cfg, filter=options)

    hop = max(1, int(round(sample_rate * working_cfg.tick_interval)))
    samples = np.asarray(audio, dtype=np.float32).reshape(-1)
    source = ArraySource(samples, sample_rate, hop)
    driver = ManualDriver(interval=working_cfg.tick_interval)
    tracker = PitchTracker(driver, clock=driver.now, config=working_cfg)
    recorder = PitchTrackRecorder()

    tracker.start(source, recorder)
    try:
        driver.step(int(math.ceil(samples.size / hop)))
    finally:
        tracker.stop()
    return recorder.points


def run_live_session(
    source: AudioSource,
    on_update: PitchCallback,
    *,
    config: Optional[TrackerConfig] = None,
    duration: Optional[float] = None,
) -> PitchTracker:
    """Track ``source`` in real time until ``duration`` elapses or Ctrl+C.

    Blocks the calling thread, which drives the tick loop. The stopped tracker
    is returned for inspection.
    """

    working_cfg = config if config is not None else TrackerConfig()
    driver = SleepDriver(interval=working_cfg.tick_interval)
    tracker = PitchTracker(driver, config=working_cfg)
    tracker.start(source, on_update)
    try:
        driver.run(duration=duration)
    except KeyboardInterrupt:
        print("[INFO] Interrupted; stopping pitch tracking.")
    finally:
        tracker.stop()
    return tracker


__all__ = ["extract_pitch_track", "run_live_session"]
