"""Audio source abstractions feeding the pitch tracker."""
from __future__ import annotations

import queue
import threading
from typing import Optional

import numpy as np

try:  # Optional dependency
    import sounddevice as sd
except Exception:  # pragma: no cover - PortAudio may be absent in CI
    sd = None  # type: ignore[assignment]


class AudioSource:
    """Abstract audio stream interface.

    ``read_available`` must never block: it returns whatever audio arrived
    since the previous call, possibly an empty array.
    """

    samplerate: int

    def start(self) -> None:  # pragma: no cover - interface method
        raise NotImplementedError

    def read_available(self) -> np.ndarray:  # pragma: no cover - interface method
        raise NotImplementedError

    def stop(self) -> None:  # pragma: no cover - interface method
        raise NotImplementedError


class MicSource(AudioSource):
    """Audio source backed by a sounddevice input stream."""

    def __init__(self, samplerate: int, hop: int, device: Optional[str] = None) -> None:
        if sd is None:
            raise RuntimeError("sounddevice is not available. Install it or use --demo.")

        self.samplerate = samplerate
        self.hop = hop
        self.device = device
        self.q: "queue.Queue[np.ndarray]" = queue.Queue(maxsize=256)
        self.stream = None
        self.dropped_chunks = 0
        self._lock = threading.Lock()

    def _callback(self, indata, frames, time_info, status):  # pragma: no cover - sounddevice callback
        if indata.ndim == 2 and indata.shape[1] > 1:
            mono = indata.mean(axis=1).copy()
        else:
            mono = indata[:, 0].copy() if indata.ndim == 2 else indata.copy()
        try:
            self.q.put_nowait(mono)
        except queue.Full:
            with self._lock:
                self.dropped_chunks += 1

    def start(self) -> None:
        if sd is None:  # pragma: no cover - checked in __init__
            raise RuntimeError("sounddevice is not available.")
        self.stream = sd.InputStream(
            channels=1,
            samplerate=self.samplerate,
            blocksize=self.hop,
            device=self.device,
            callback=self._callback,
            dtype="float32",
        )
        self.stream.start()

    def read_available(self) -> np.ndarray:
        chunks = []
        while True:
            try:
                chunks.append(self.q.get_nowait())
            except queue.Empty:
                break
        if not chunks:
            return np.zeros(0, dtype=np.float32)
        return np.concatenate(chunks).astype(np.float32, copy=False)

    def stop(self) -> None:
        stream, self.stream = self.stream, None
        if stream is not None:  # pragma: no cover - depends on audio backend
            stream.stop()
            stream.close()


class ArraySource(AudioSource):
    """Plays back an in-memory signal, ``hop`` samples per read."""

    def __init__(self, audio: np.ndarray, samplerate: int, hop: int) -> None:
        if hop < 1:
            raise ValueError("hop must be at least 1 sample.")
        self.audio = np.asarray(audio, dtype=np.float32).reshape(-1)
        self.samplerate = samplerate
        self.hop = hop
        self.position = 0
        self.started = False

    def start(self) -> None:
        self.started = True

    def read_available(self) -> np.ndarray:
        if not self.started:
            return np.zeros(0, dtype=np.float32)
        chunk = self.audio[self.position : self.position + self.hop]
        self.position += chunk.size
        return chunk

    @property
    def exhausted(self) -> bool:
        return self.position >= self.audio.size

    def stop(self) -> None:
        self.started = False


class DemoSource(AudioSource):
    """Synthetic recitation-like voice used when no microphone is available.

    A harmonic tone glides around 200 Hz in phrases separated by short pauses.
    """

    phrase_sec = 2.0
    pause_sec = 0.5

    def __init__(self, samplerate: int, hop: int, seed: Optional[int] = None) -> None:
        self.samplerate = samplerate
        self.hop = hop
        self.t = 0
        self._phase = 0.0
        self._rng = np.random.default_rng(seed)

    def start(self) -> None:
        pass

    def read_available(self) -> np.ndarray:
        n = self.hop
        sr = self.samplerate
        t = (self.t + np.arange(n)) / sr
        cycle = self.phrase_sec + self.pause_sec
        pos = np.mod(t, cycle)
        f0 = 200.0 + 40.0 * np.sin(2 * np.pi * t / self.phrase_sec)
        phase = self._phase + 2 * np.pi * np.cumsum(f0) / sr
        self._phase = float(phase[-1] % (2 * np.pi))
        voice = (
            0.5 * np.sin(phase)
            + 0.25 * np.sin(2 * phase + 0.3)
            + 0.1 * np.sin(3 * phase + 0.7)
        )
        gate = (pos < self.phrase_sec).astype(np.float64)
        noise = 0.002 * self._rng.standard_normal(n)
        self.t += n
        return (0.4 * voice * gate + noise).astype(np.float32)

    def stop(self) -> None:
        pass


__all__ = ["AudioSource", "MicSource", "ArraySource", "DemoSource", "sd"]
