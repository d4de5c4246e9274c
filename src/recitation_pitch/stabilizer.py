"""Outlier rejection, median smoothing and octave-error correction."""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from .config import FilterOptions
from .results import PitchPoint
from .utils import RingBuffer

logger = logging.getLogger(__name__)

SMOOTHING_WINDOW = 7
MAX_BUFFER_SIZE = 20
OUTLIER_SIGMA = 2.5
OCTAVE_UP_RANGE = (1.9, 2.1)
OCTAVE_DOWN_RANGE = (0.48, 0.52)


def upper_median(values: Sequence[float]) -> float:
    """Middle element of the sorted values (the upper one for even counts)."""
    ordered = sorted(values)
    return float(ordered[len(ordered) // 2])


def is_outlier(frequency: float, recent: Sequence[float]) -> bool:
    """True when ``frequency`` lies more than 2.5 sigma from the recent mean."""
    if len(recent) < 3:
        return False
    values = np.asarray(recent, dtype=np.float64)
    mean = float(np.mean(values))
    std = float(np.std(values))
    return abs(frequency - mean) > OUTLIER_SIGMA * std


def correct_octave(frequency: float, previous: Optional[float]) -> float:
    """Undo a jump of about one octave relative to ``previous``."""
    if previous is None or previous <= 0:
        return frequency
    ratio = frequency / previous
    if OCTAVE_UP_RANGE[0] < ratio < OCTAVE_UP_RANGE[1]:
        return frequency / 2.0
    if OCTAVE_DOWN_RANGE[0] < ratio < OCTAVE_DOWN_RANGE[1]:
        return frequency * 2.0
    return frequency


def trimmed_mean(frequencies: Sequence[float]) -> Optional[float]:
    """Mean of the middle 50% of ``frequencies``; median if that slice is empty."""
    if not frequencies:
        return None
    ordered = sorted(frequencies)
    start = int(math.floor(len(ordered) * 0.25))
    end = int(math.ceil(len(ordered) * 0.75))
    middle = ordered[start:end]
    if middle:
        return float(sum(middle) / len(middle))
    return float(ordered[len(ordered) // 2])


def smooth_pitch_data(points: Sequence[PitchPoint], window: int = SMOOTHING_WINDOW) -> List[PitchPoint]:
    """Smooth a recorded pitch track with a centred trimmed-mean window.

    Each point takes the trimmed mean of the voiced frequencies within
    ``window // 2`` points on either side. Points whose neighbourhood has no
    voiced frequency are returned unchanged.
    """
    if not points or window <= 1:
        return list(points)
    half = window // 2
    smoothed: List[PitchPoint] = []
    for i, point in enumerate(points):
        neighbourhood = points[max(0, i - half) : i + half + 1]
        voiced = [p.frequency for p in neighbourhood if p.frequency is not None]
        value = trimmed_mean(voiced)
        smoothed.append(point if value is None else point.with_frequency(value))
    return smoothed


class TemporalStabilizer:
    """Per-session smoothing state for the live pitch stream."""

    def __init__(
        self,
        window: int = SMOOTHING_WINDOW,
        pitch_buffer_size: int = MAX_BUFFER_SIZE,
    ) -> None:
        self.recent_frequencies = RingBuffer(window)
        # NaN marks unvoiced points.
        self.recent_points = RingBuffer(pitch_buffer_size)
        self.previous_frequency: Optional[float] = None
        self.outliers_corrected = 0

    def process(self, point: PitchPoint, options: FilterOptions) -> PitchPoint:
        if not options.enabled:
            self._track_raw(point)
            return point

        if point.frequency is None:
            self.recent_frequencies.clear()
        else:
            point = point.with_frequency(self._stabilize(point.frequency))

        if options.smoothing_window > 1:
            point = self._secondary_smoothing(point, options.smoothing_window)
        return point

    def _track_raw(self, point: PitchPoint) -> None:
        if point.frequency is None:
            self.recent_frequencies.clear()
        else:
            self.previous_frequency = point.frequency

    def _stabilize(self, frequency: float) -> float:
        recent = self.recent_frequencies.values()
        if is_outlier(frequency, recent):
            corrected = upper_median(recent)
            logger.debug("Outlier %.1f Hz replaced with %.1f Hz", frequency, corrected)
            self.outliers_corrected += 1
            frequency = corrected

        self.recent_frequencies.push(frequency)
        smoothed = upper_median(self.recent_frequencies.values())
        smoothed = correct_octave(smoothed, self.previous_frequency)
        self.previous_frequency = smoothed
        return smoothed

    def _secondary_smoothing(self, point: PitchPoint, window: int) -> PitchPoint:
        """Trimmed mean over the trailing half-window of the last ``window`` points.

        Unvoiced points are filled from voiced neighbours in that half-window.
        """
        self.recent_points.push(np.nan if point.frequency is None else point.frequency)
        if len(self.recent_points) < window:
            return point
        latest = self.recent_points.latest(window)[-(window // 2 + 1) :]
        value = trimmed_mean([float(f) for f in latest if np.isfinite(f)])
        return point if value is None else point.with_frequency(value)

    def reset(self) -> None:
        self.recent_frequencies.clear()
        self.recent_points.clear()
        self.previous_frequency = None


__all__ = [
    "MAX_BUFFER_SIZE",
    "SMOOTHING_WINDOW",
    "TemporalStabilizer",
    "correct_octave",
    "is_outlier",
    "smooth_pitch_data",
    "trimmed_mean",
    "upper_median",
]
