"""Scheduling primitives that fire the tracker's tick."""

from __future__ import annotations

import time
from typing import Callable, Optional

TickFn = Callable[[], None]


class Driver:
    """Host scheduling primitive injected into :class:`PitchTracker`."""

    def schedule(self, tick_fn: TickFn) -> None:  # pragma: no cover - interface method
        raise NotImplementedError

    def cancel(self) -> None:  # pragma: no cover - interface method
        raise NotImplementedError


class ManualDriver(Driver):
    """Deterministic driver: ticks fire only when :meth:`step` is called.

    ``now`` is a clock that advances by ``interval`` per fired tick and can be
    passed to the tracker so emitted times are exact multiples of the interval.
    """

    def __init__(self, interval: float = 1.0 / 60.0) -> None:
        self.interval = float(interval)
        self.ticks = 0
        self._tick_fn: Optional[TickFn] = None

    @property
    def scheduled(self) -> bool:
        return self._tick_fn is not None

    def now(self) -> float:
        return self.ticks * self.interval

    def schedule(self, tick_fn: TickFn) -> None:
        self._tick_fn = tick_fn

    def cancel(self) -> None:
        self._tick_fn = None

    def step(self, count: int = 1) -> int:
        """Fire up to ``count`` ticks; returns how many actually ran."""
        fired = 0
        for _ in range(count):
            if self._tick_fn is None:
                break
            self.ticks += 1
            self._tick_fn()
            fired += 1
        return fired


class SleepDriver(Driver):
    """Cooperative fixed-cadence loop running in the calling thread."""

    def __init__(
        self,
        interval: float = 1.0 / 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive.")
        self.interval = float(interval)
        self._clock = clock
        self._sleep = sleep
        self._tick_fn: Optional[TickFn] = None

    def schedule(self, tick_fn: TickFn) -> None:
        self._tick_fn = tick_fn

    def cancel(self) -> None:
        self._tick_fn = None

    def run(self, duration: Optional[float] = None) -> int:
        """Fire ticks until cancelled or ``duration`` seconds have elapsed."""
        start = self._clock()
        next_tick = start
        fired = 0
        while self._tick_fn is not None:
            if duration is not None and self._clock() - start >= duration:
                break
            self._tick_fn()
            fired += 1
            next_tick += self.interval
            delay = next_tick - self._clock()
            if delay > 0:
                self._sleep(delay)
            else:
                # Behind schedule: resynchronise.
                next_tick = self._clock()
        return fired


__all__ = ["Driver", "ManualDriver", "SleepDriver", "TickFn"]
