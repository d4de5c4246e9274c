"""Normalised time-domain autocorrelation pitch estimation."""

from __future__ import annotations

import math

import numpy as np

from .results import PitchEstimate

MIN_FREQUENCY_HZ = 60.0
MAX_FREQUENCY_HZ = 1200.0

SILENCE_PEAK = 0.0003
SILENCE_RMS = 0.0001
ENERGY_THRESHOLD = 0.00008
CORRELATION_THRESHOLD = 0.1
MAX_OFFSET = 4096
NORM_EPS = 0.00001


def period_bounds(sample_rate: float) -> tuple[int, int]:
    """Lag search range ``[min_period, max_period)`` covering 60-1200 Hz."""
    return (
        int(math.floor(sample_rate / MAX_FREQUENCY_HZ)),
        int(math.floor(sample_rate / MIN_FREQUENCY_HZ)),
    )


def normalized_autocorrelation(
    x: np.ndarray, periods: np.ndarray, rms_norm: float
) -> np.ndarray:
    """Normalised correlation of the centred window ``x`` at each lag in ``periods``.

    For lag ``p`` the sums run over ``n = min(len(x) - p, MAX_OFFSET)`` samples:
    ``sum(x[i] * x[i + p]) / (sqrt(sum(x[i + p] ** 2) * n * rms_norm ** 2) + eps)``.
    """
    size = x.size
    squares = np.concatenate(([0.0], np.cumsum(x * x)))
    corr = np.empty(periods.size, dtype=np.float64)
    counts = np.empty(periods.size, dtype=np.float64)
    sum_squares = np.empty(periods.size, dtype=np.float64)
    for k, period in enumerate(periods):
        n = min(size - period, MAX_OFFSET)
        corr[k] = np.dot(x[:n], x[period : period + n])
        counts[k] = n
        sum_squares[k] = squares[period + n] - squares[period]
    sum_squares = np.maximum(sum_squares, 0.0)
    return corr / (np.sqrt(sum_squares * counts * rms_norm * rms_norm) + NORM_EPS)


def detect_pitch(
    samples: np.ndarray, sample_rate: float, peak: float, rms: float
) -> PitchEstimate:
    """Estimate the fundamental frequency of one analysis window.

    Returns ``PitchEstimate(None, 0.0)`` for silent, low-energy, aperiodic or
    out-of-range frames and for any non-finite input; it never raises on
    numeric edge cases.
    """
    if not (math.isfinite(peak) and math.isfinite(rms)):
        return PitchEstimate.unvoiced()
    if peak < SILENCE_PEAK or rms < SILENCE_RMS:
        return PitchEstimate.unvoiced()
    if not math.isfinite(sample_rate) or sample_rate <= 0:
        return PitchEstimate.unvoiced()

    buffer = np.asarray(samples, dtype=np.float64).reshape(-1)
    if buffer.size < 2 or not np.all(np.isfinite(buffer)):
        return PitchEstimate.unvoiced()

    x = buffer - np.mean(buffer)
    energy = float(np.mean(x * x))
    if energy < ENERGY_THRESHOLD:
        return PitchEstimate.unvoiced()
    rms_norm = math.sqrt(energy)

    min_period, max_period = period_bounds(sample_rate)
    # Periods must also stay strictly below half the window length.
    upper = min(max_period, int(math.ceil(buffer.size / 2.0)))
    periods = np.arange(min_period, upper)
    if periods.size == 0:
        return PitchEstimate.unvoiced()

    scores = normalized_autocorrelation(x, periods, rms_norm)
    best_index = int(np.argmax(scores))
    best = float(scores[best_index])
    second = float(np.max(np.delete(scores, best_index))) if scores.size > 1 else -math.inf
    best_period = int(periods[best_index])

    if best < CORRELATION_THRESHOLD or best_period == 0:
        return PitchEstimate.unvoiced()

    frequency = sample_rate / best_period
    if not math.isfinite(frequency) or frequency < MIN_FREQUENCY_HZ or frequency > MAX_FREQUENCY_HZ:
        return PitchEstimate.unvoiced()

    correlation_strength = min(1.0, best * 2.0)
    peak_clarity = min(1.0, (best - second) / best) if second > 0 else 1.0
    confidence = min(0.95, correlation_strength * 0.6 + peak_clarity * 0.4)
    return PitchEstimate(
        frequency=float(frequency),
        confidence=max(0.1, min(1.0, confidence)),
    )


__all__ = [
    "CORRELATION_THRESHOLD",
    "ENERGY_THRESHOLD",
    "MAX_FREQUENCY_HZ",
    "MIN_FREQUENCY_HZ",
    "detect_pitch",
    "normalized_autocorrelation",
    "period_bounds",
]
