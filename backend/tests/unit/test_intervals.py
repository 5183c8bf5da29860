"""Tests for the half-open interval model."""
from datetime import datetime, timedelta, timezone

import pytest

from booking_core.scheduling.errors import InvalidIntervalError
from booking_core.scheduling.intervals import Interval, overlaps


def at(hour, minute=0):
    return datetime(2030, 5, 6, hour, minute, tzinfo=timezone.utc)


class TestInterval:
    """Construction and helpers."""

    def test_rejects_start_equal_to_end(self):
        with pytest.raises(InvalidIntervalError):
            Interval(at(9), at(9))

    def test_rejects_start_after_end(self):
        with pytest.raises(InvalidIntervalError):
            Interval(at(10), at(9))

    def test_rejects_mixed_aware_and_naive_endpoints(self):
        with pytest.raises(InvalidIntervalError):
            Interval(at(9), datetime(2030, 5, 6, 10, 0))

    def test_from_duration(self):
        interval = Interval.from_duration(at(9, 30), 45)
        assert interval.end == at(10, 15)
        assert interval.duration_minutes == 45

    def test_contains_is_half_open(self):
        interval = Interval(at(9), at(10))
        assert interval.contains(at(9))
        assert interval.contains(at(9, 59))
        assert not interval.contains(at(10))


class TestOverlaps:
    """Overlap test on half-open intervals."""

    def test_touching_intervals_do_not_overlap(self):
        assert not overlaps(Interval(at(9), at(10)), Interval(at(10), at(11)))

    def test_partial_overlap(self):
        assert overlaps(Interval(at(9), at(10)), Interval(at(9, 30), at(11)))

    def test_containment_overlaps(self):
        assert overlaps(Interval(at(9), at(12)), Interval(at(10), at(11)))

    def test_identical_intervals_overlap(self):
        assert overlaps(Interval(at(9), at(10)), Interval(at(9), at(10)))

    def test_disjoint_intervals(self):
        assert not overlaps(Interval(at(9), at(10)), Interval(at(11), at(12)))

    def test_overlap_is_symmetric(self):
        starts = [at(9) + timedelta(minutes=15 * i) for i in range(12)]
        intervals = [Interval.from_duration(s, d) for s in starts for d in (15, 30, 60)]
        for a in intervals:
            for b in intervals:
                assert overlaps(a, b) == overlaps(b, a)

    def test_compares_instants_across_zones(self):
        utc = Interval(at(9), at(10))
        plus_two = timezone(timedelta(hours=2))
        # 10:00-11:00 at +02:00 is 08:00-09:00 UTC.
        shifted = Interval(
            datetime(2030, 5, 6, 10, 0, tzinfo=plus_two),
            datetime(2030, 5, 6, 11, 0, tzinfo=plus_two),
        )
        assert not overlaps(utc, shifted)
        assert utc.overlaps(Interval(at(8, 30), at(9, 1)))
