"""Fixed high-pass/low-pass conditioning applied before pitch analysis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy import signal

HIGHPASS_HZ = 60.0
LOWPASS_HZ = 4000.0


class FilterChainError(ValueError):
    """Raised when the conditioning filters cannot be built for a stream."""


@dataclass
class FilterStage:
    """One second-order Butterworth section with state carried between chunks."""

    kind: str
    cutoff_hz: float
    sos: np.ndarray
    zi: np.ndarray

    def process(self, samples: np.ndarray) -> np.ndarray:
        out, self.zi = signal.sosfilt(self.sos, samples, zi=self.zi)
        return out

    def reset(self) -> None:
        self.zi = np.zeros_like(self.zi)


def _build_stage(kind: str, cutoff_hz: float, samplerate: int) -> FilterStage:
    nyquist = samplerate / 2.0
    if not np.isfinite(cutoff_hz) or cutoff_hz <= 0.0 or cutoff_hz >= nyquist:
        raise FilterChainError(
            f"{kind} cutoff {cutoff_hz:.1f} Hz is invalid for a {samplerate} Hz stream."
        )
    # A second-order Butterworth section has Q = 1/sqrt(2).
    sos = signal.butter(2, cutoff_hz, btype=kind, fs=samplerate, output="sos")
    zi = np.zeros((sos.shape[0], 2), dtype=np.float64)
    return FilterStage(kind=kind, cutoff_hz=float(cutoff_hz), sos=sos, zi=zi)


class FilterChain:
    """Ordered high-pass then low-pass pipeline; not reconfigurable once built."""

    def __init__(
        self,
        samplerate: int,
        highpass_hz: float = HIGHPASS_HZ,
        lowpass_hz: float = LOWPASS_HZ,
    ) -> None:
        if samplerate <= 0:
            raise FilterChainError("samplerate must be positive.")
        if lowpass_hz <= highpass_hz:
            raise FilterChainError("lowpass cutoff must lie above the highpass cutoff.")
        self.samplerate = int(samplerate)
        self._stages: tuple[FilterStage, ...] = (
            _build_stage("highpass", highpass_hz, self.samplerate),
            _build_stage("lowpass", lowpass_hz, self.samplerate),
        )

    @property
    def stages(self) -> Sequence[FilterStage]:
        return self._stages

    def process(self, samples: np.ndarray) -> np.ndarray:
        """Condition ``samples``; consecutive calls behave like one long call."""
        x = np.asarray(samples, dtype=np.float64).reshape(-1)
        if x.size == 0:
            return np.zeros(0, dtype=np.float32)
        for stage in self._stages:
            x = stage.process(x)
        return x.astype(np.float32)

    def reset(self) -> None:
        for stage in self._stages:
            stage.reset()


__all__ = ["FilterChain", "FilterChainError", "FilterStage", "HIGHPASS_HZ", "LOWPASS_HZ"]
