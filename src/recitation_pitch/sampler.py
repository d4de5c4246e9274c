"""Fixed-length analysis windows taken from the conditioned stream."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .audio_sources import AudioSource
from .filter_chain import FilterChain
from .utils import RingBuffer, peak_and_rms

DEFAULT_BLOCK_SIZE = 8192


@dataclass(frozen=True)
class Frame:
    # Owned by the sampler and overwritten by the next get_window() call.
    samples: np.ndarray
    sample_rate: int
    peak: float
    rms: float


class AudioConditioner:
    """Host-agnostic access to the latest analysis window."""

    def get_window(self) -> Frame:  # pragma: no cover - interface method
        raise NotImplementedError

    def close(self) -> None:
        pass


class FrameSampler(AudioConditioner):
    """Drains a source through a :class:`FilterChain` into a one-block ring.

    ``get_window`` never waits for audio. When nothing new has arrived the
    previous window is returned again, so consecutive windows may overlap.
    Until a full block has been captured the oldest samples are zeros.
    """

    def __init__(
        self,
        source: AudioSource,
        chain: FilterChain,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ) -> None:
        if block_size < 2:
            raise ValueError("block_size must be at least 2 samples.")
        self.source = source
        self.chain = chain
        self.block_size = int(block_size)
        self.sample_rate = int(chain.samplerate)
        self._ring = RingBuffer(self.block_size)
        self._ring.extend(np.zeros(self.block_size))
        self._window = np.zeros(self.block_size, dtype=np.float64)
        self.samples_seen = 0

    def feed(self, samples: np.ndarray) -> None:
        """Condition ``samples`` and append them to the analysis ring."""
        if samples.size == 0:
            return
        conditioned = self.chain.process(samples)
        self._ring.extend(conditioned)
        self.samples_seen += int(conditioned.size)

    def get_window(self) -> Frame:
        self.feed(self.source.read_available())
        window = self._ring.values(out=self._window)
        peak, rms = peak_and_rms(window)
        return Frame(samples=window, sample_rate=self.sample_rate, peak=peak, rms=rms)

    def close(self) -> None:
        self._ring.clear()
        self.chain.reset()


__all__ = ["AudioConditioner", "DEFAULT_BLOCK_SIZE", "Frame", "FrameSampler"]
