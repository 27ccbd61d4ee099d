from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone

from skypost.clock import FixedClock, IncreasingClock, SystemClock

_T0 = datetime(2025, 1, 2, 12, 34, 56, 789000, tzinfo=timezone.utc)
_MS = timedelta(milliseconds=1)


class TestIncreasingClock(unittest.TestCase):
    def test_stuck_parent_still_increases(self) -> None:
        clock = IncreasingClock(FixedClock(_T0))
        self.assertEqual([clock.now() for _ in range(3)], [_T0, _T0 + _MS, _T0 + 2 * _MS])

    def test_follows_parent_when_it_moves_ahead(self) -> None:
        parent = FixedClock(_T0)
        clock = IncreasingClock(parent)
        clock.now()
        parent.time = _T0 + timedelta(seconds=5)
        self.assertEqual(clock.now(), _T0 + timedelta(seconds=5))

    def test_parent_going_backwards(self) -> None:
        parent = FixedClock(_T0)
        clock = IncreasingClock(parent)
        clock.now()
        parent.time = _T0 - timedelta(hours=1)
        self.assertEqual(clock.now(), _T0 + _MS)

    def test_system_clock_is_utc(self) -> None:
        self.assertEqual(SystemClock().now().utcoffset(), timedelta(0))


if __name__ == "__main__":
    unittest.main()
