"""Small numeric helpers shared by the pitch tracking pipeline."""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")


def hz_to_midi(freq: Optional[float]) -> Optional[float]:
    """Convert a frequency in Hz into a (fractional) MIDI note number."""
    if freq is None or not freq > 0 or not math.isfinite(freq):
        return None
    return 69.0 + 12.0 * math.log2(freq / 440.0)


def midi_to_note_name(midi: float) -> str:
    """Return the note name for ``midi`` rounded to the nearest semitone, e.g. ``A3``."""
    note = int(round(midi))
    return f"{NOTE_NAMES[note % 12]}{(note - 12) // 12}"


def peak_and_rms(samples: np.ndarray) -> tuple[float, float]:
    """Return the peak absolute amplitude and RMS energy of ``samples``."""
    if samples.size == 0:
        return 0.0, 0.0
    x = samples.astype(np.float64, copy=False)
    return float(np.max(np.abs(x))), float(np.sqrt(np.mean(x * x)))


class RingBuffer:
    """Fixed-capacity float ring with explicit head/length indices.

    The storage is allocated once; pushing past capacity overwrites the
    oldest value. ``values()`` returns the contents ordered oldest to newest.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("RingBuffer capacity must be at least 1.")
        self.capacity = int(capacity)
        self._data = np.zeros(self.capacity, dtype=np.float64)
        self._head = 0  # next write position
        self._length = 0

    def __len__(self) -> int:
        return self._length

    def push(self, value: float) -> None:
        self._data[self._head] = value
        self._head = (self._head + 1) % self.capacity
        self._length = min(self._length + 1, self.capacity)

    def extend(self, values: np.ndarray) -> None:
        n = int(values.size)
        if n == 0:
            return
        if n >= self.capacity:
            self._data[:] = values[-self.capacity :]
            self._head = 0
            self._length = self.capacity
            return
        first = min(n, self.capacity - self._head)
        self._data[self._head : self._head + first] = values[:first]
        if first < n:
            self._data[: n - first] = values[first:]
        self._head = (self._head + n) % self.capacity
        self._length = min(self._length + n, self.capacity)

    def values(self, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Copy the buffered values (oldest first) into ``out`` or a new array."""
        n = self._length
        if out is None:
            out = np.empty(n, dtype=self._data.dtype)
        start = (self._head - n) % self.capacity
        first = min(n, self.capacity - start)
        out[:first] = self._data[start : start + first]
        if first < n:
            out[first:n] = self._data[: n - first]
        return out[:n]

    def latest(self, count: int) -> np.ndarray:
        """Return the most recent ``count`` values, oldest first."""
        values = self.values()
        return values[-count:] if count > 0 else values[:0]

    def clear(self) -> None:
        self._head = 0
        self._length = 0


__all__ = [
    "NOTE_NAMES",
    "hz_to_midi",
    "midi_to_note_name",
    "peak_and_rms",
    "RingBuffer",
]
