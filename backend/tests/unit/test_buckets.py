"""Tests for slot-claim bucketing."""
from datetime import datetime, time, timezone

import pytest

from booking_core.scheduling.buckets import slot_buckets
from booking_core.scheduling.intervals import Interval
from booking_core.scheduling.types import BusinessHours
from tests.helpers import DAY, booked


def utc(hour, minute=0):
    return datetime(2030, 5, 6, hour, minute, tzinfo=timezone.utc)


class TestSlotBuckets:

    def test_aligned_interval_claims_each_covered_bucket(self, business_hours):
        buckets = slot_buckets(booked("10:00", "11:00").interval, business_hours)
        assert buckets == [utc(10, 0), utc(10, 30)]

    def test_touching_intervals_share_no_bucket(self, business_hours):
        first = set(slot_buckets(booked("10:00", "10:30").interval, business_hours))
        second = set(slot_buckets(booked("10:30", "11:30").interval, business_hours))
        assert not first & second

    def test_overlapping_intervals_share_a_bucket(self, business_hours):
        first = set(slot_buckets(booked("10:00", "11:00").interval, business_hours))
        second = set(slot_buckets(booked("10:45", "11:15").interval, business_hours))
        assert first & second

    def test_unaligned_start_is_floored_to_grid(self, business_hours):
        assert slot_buckets(booked("10:10", "10:20").interval, business_hours) == [utc(10, 0)]

    def test_buckets_follow_local_grid(self):
        """Half-hour offset zones must not shift hourly buckets."""
        hours = BusinessHours(time(9, 0), time(17, 0), 60, timezone="Asia/Kolkata")
        # 09:00-10:00 IST is 03:30-04:30 UTC; 10:00-11:00 IST is 04:30-05:30 UTC.
        first = slot_buckets(booked("03:30", "04:30").interval, hours)
        second = slot_buckets(booked("04:30", "05:30").interval, hours)
        assert first == [utc(3, 30)]
        assert second == [utc(4, 30)]
        assert DAY == first[0].date()

    @pytest.mark.parametrize(
        "opening, step, first, second",
        [
            (time(8, 30), 60, ("08:30", "09:30"), ("09:30", "10:30")),
            (time(9, 10), 30, ("09:10", "09:40"), ("09:40", "10:10")),
        ],
    )
    def test_grid_starts_at_opening_time(self, opening, step, first, second):
        """Should keep touching slots apart when opening is off the midnight grid."""
        hours = BusinessHours(opening, time(17, 0), step, timezone="UTC")

        first_buckets = slot_buckets(booked(*first).interval, hours)
        second_buckets = slot_buckets(booked(*second).interval, hours)

        assert first_buckets == [utc(opening.hour, opening.minute)]
        assert not set(first_buckets) & set(second_buckets)

    def test_start_before_opening_floors_onto_grid(self):
        hours = BusinessHours(time(9, 10), time(17, 0), 30, timezone="UTC")
        assert slot_buckets(booked("08:50", "09:20").interval, hours) == [utc(8, 40), utc(9, 10)]

    def test_naive_interval_is_business_wall_clock(self):
        hours = BusinessHours(time(9, 0), time(17, 0), 60, timezone="Asia/Kolkata")
        naive = Interval(datetime(2030, 5, 6, 9, 0), datetime(2030, 5, 6, 10, 0))
        assert slot_buckets(naive, hours) == [utc(3, 30)]
