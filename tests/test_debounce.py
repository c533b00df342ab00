from __future__ import annotations

import unittest

from sharpie.debounce import DebounceTimer


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class DebounceTimerTests(unittest.TestCase):
    def test_rearming_moves_deadline(self) -> None:
        clock = FakeClock()
        timer = DebounceTimer(window_seconds=0.5, monotonic=clock)

        timer.arm()
        clock.now = 0.1
        timer.arm()

        clock.now = 0.5
        self.assertFalse(timer.due())
        clock.now = 0.6
        self.assertTrue(timer.due())
        self.assertFalse(timer.due())
        self.assertFalse(timer.pending)

    def test_cancel_disarms(self) -> None:
        clock = FakeClock()
        timer = DebounceTimer(monotonic=clock)

        timer.arm()
        timer.cancel()
        clock.now = 10.0

        self.assertFalse(timer.due())

    def test_negative_window_fires_immediately(self) -> None:
        clock = FakeClock()
        timer = DebounceTimer(window_seconds=-1.0, monotonic=clock)

        timer.arm()

        self.assertTrue(timer.due())


if __name__ == "__main__":
    unittest.main()
