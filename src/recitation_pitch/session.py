"""Session lifecycle and timing authority for live pitch tracking."""

from __future__ import annotations

import enum
import logging
import time
from typing import Callable, Optional

from .audio_sources import AudioSource
from .config import FilterOptions, TrackerConfig
from .driver import Driver
from .estimator import detect_pitch
from .filter_chain import FilterChain
from .policy import filter_pitch
from .results import PitchPoint
from .sampler import FrameSampler
from .stabilizer import TemporalStabilizer

logger = logging.getLogger(__name__)

PitchCallback = Callable[[PitchPoint], None]

DIAGNOSTIC_EVERY_TICKS = 60


class SessionState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class SessionStateError(RuntimeError):
    """Raised when a lifecycle call does not match the session state."""


class SessionStartError(RuntimeError):
    """Raised once when the audio graph cannot be built or started."""


class PitchTracker:
    """Runs the sample → estimate → gate → stabilize pipeline once per tick.

    A tracker is single-use: Idle → Running → Stopped. Every tick emits exactly
    one :class:`PitchPoint`, voiced or not, so consumers see an unbroken
    timeline measured from the instant :meth:`start` succeeded.
    """

    def __init__(
        self,
        driver: Driver,
        clock: Callable[[], float] = time.monotonic,
        config: Optional[TrackerConfig] = None,
    ) -> None:
        self.driver = driver
        self.clock = clock
        self.config = config if config is not None else TrackerConfig()
        self.options: FilterOptions = self.config.filter
        self._state = SessionState.IDLE
        self._start_time = 0.0
        self._source: Optional[AudioSource] = None
        self._sampler: Optional[FrameSampler] = None
        self._stabilizer: Optional[TemporalStabilizer] = None
        self._on_update: Optional[PitchCallback] = None
        self._ticks = 0

    @property
    def state(self) -> SessionState:
        return self._state

    def set_filter_options(self, **overrides) -> FilterOptions:
        """Replace the filter options; takes effect from the next tick."""
        self.options = self.options.merged(**overrides)
        return self.options

    def start(
        self,
        source: AudioSource,
        on_update: PitchCallback,
        options: Optional[FilterOptions] = None,
    ) -> None:
        if self._state is SessionState.RUNNING:
            raise SessionStateError("Pitch tracker is already running.")
        if self._state is SessionState.STOPPED:
            raise SessionStateError("A stopped pitch tracker cannot be restarted.")

        if options is not None:
            self.options = options
        cfg = self.config
        samplerate = int(getattr(source, "samplerate", cfg.samplerate))

        try:
            chain = FilterChain(samplerate, cfg.highpass_hz, cfg.lowpass_hz)
            sampler = FrameSampler(source, chain, cfg.block_size)
            source.start()
        except Exception as exc:
            raise SessionStartError(f"Could not start pitch tracking: {exc}") from exc

        self._source = source
        self._sampler = sampler
        self._stabilizer = TemporalStabilizer(cfg.stabilizer_window, cfg.pitch_buffer_size)
        self._on_update = on_update
        self._ticks = 0
        self._start_time = self.clock()
        self._state = SessionState.RUNNING
        self.driver.schedule(self._tick)
        logger.info(
            "Pitch tracking started at %d Hz (block %d, filtering %s)",
            samplerate,
            cfg.block_size,
            "on" if self.options.enabled else "off",
        )

    def _tick(self) -> None:
        if self._state is not SessionState.RUNNING:
            return
        sampler, stabilizer = self._sampler, self._stabilizer
        if sampler is None or stabilizer is None:
            return

        # Clock is read before any processing.
        now = self.clock() - self._start_time
        frame = sampler.get_window()
        estimate = detect_pitch(frame.samples, frame.sample_rate, frame.peak, frame.rms)
        point = PitchPoint(
            time=now, frequency=estimate.frequency, confidence=estimate.confidence
        )
        options = self.options
        point = filter_pitch(point, options)
        point = stabilizer.process(point, options)

        self._ticks += 1
        if self._ticks % DIAGNOSTIC_EVERY_TICKS == 0:
            logger.debug(
                "t=%.2fs peak=%.4f rms=%.4f freq=%s",
                now,
                frame.peak,
                frame.rms,
                "null" if point.frequency is None else f"{point.frequency:.1f}",
            )

        callback = self._on_update
        if callback is None:
            return
        try:
            callback(point)
        except Exception:  # noqa: BLE001
            logger.exception("Pitch update callback failed at t=%.3fs", now)

    def stop(self) -> None:
        if self._state is SessionState.IDLE:
            logger.warning("stop() called on a pitch tracker that was never started")
            return
        if self._state is SessionState.STOPPED:
            return

        self._state = SessionState.STOPPED
        self.driver.cancel()
        source, self._source = self._source, None
        sampler, self._sampler = self._sampler, None
        if self._stabilizer is not None:
            self._stabilizer.reset()
        self._stabilizer = None
        self._on_update = None
        if sampler is not None:
            sampler.close()
        if source is not None:
            try:
                source.stop()
            except Exception:  # noqa: BLE001
                logger.exception("Failed to stop the audio source cleanly")
        logger.info("Pitch tracking stopped after %d ticks", self._ticks)

    def is_active(self) -> bool:
        return self._state is SessionState.RUNNING

    def get_current_time(self) -> float:
        if self._state is not SessionState.RUNNING:
            return 0.0
        return self.clock() - self._start_time


__all__ = [
    "PitchCallback",
    "PitchTracker",
    "SessionStartError",
    "SessionState",
    "SessionStateError",
]
