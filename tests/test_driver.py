from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from recitation_pitch.driver import ManualDriver, SleepDriver


class _FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def test_manual_driver_counts_ticks_and_clock():
    driver = ManualDriver(interval=0.5)
    fired = []
    assert driver.step() == 0
    driver.schedule(lambda: fired.append(driver.now()))
    assert driver.step(3) == 3
    assert fired == [0.5, 1.0, 1.5]
    driver.cancel()
    assert driver.step(2) == 0


def test_manual_driver_stops_when_tick_cancels():
    driver = ManualDriver()
    driver.schedule(driver.cancel)
    assert driver.step(5) == 1


def test_sleep_driver_paces_ticks():
    clock = _FakeClock()
    driver = SleepDriver(interval=0.25, clock=clock, sleep=clock.sleep)
    driver.schedule(lambda: None)
    assert driver.run(duration=1.0) == 4
    assert clock.sleeps == [0.25, 0.25, 0.25, 0.25]


def test_sleep_driver_resynchronises_when_behind():
    clock = _FakeClock()
    driver = SleepDriver(interval=0.25, clock=clock, sleep=clock.sleep)

    def slow_tick():
        clock.now += 0.5

    driver.schedule(slow_tick)
    assert driver.run(duration=1.0) == 2
    assert clock.sleeps == []


def test_sleep_driver_stops_on_cancel():
    clock = _FakeClock()
    driver = SleepDriver(interval=0.25, clock=clock, sleep=clock.sleep)
    count = []

    def tick():
        count.append(1)
        if len(count) == 3:
            driver.cancel()

    driver.schedule(tick)
    assert driver.run() == 3


def test_sleep_driver_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        SleepDriver(interval=0.0)
