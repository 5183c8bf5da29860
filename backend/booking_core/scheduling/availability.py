"""Free slot calculation.

Pure functions only: no I/O and no shared state, so they are safe to call
from any number of concurrent requests. Callers fetch the day's booked
intervals themselves and must re-fetch on every call since bookings change
between calls.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, List, Sequence
from zoneinfo import ZoneInfo

from booking_core.scheduling.errors import InvalidDurationError
from booking_core.scheduling.intervals import Interval, overlaps
from booking_core.scheduling.types import BookedInterval, BusinessHours


def _require_positive_duration(service_duration_minutes: int) -> None:
    if service_duration_minutes is None or service_duration_minutes <= 0:
        raise InvalidDurationError(
            f"Service duration must be a positive number of minutes, got {service_duration_minutes}"
        )


def anchor(day: date, start_time: time, tz: ZoneInfo) -> datetime:
    """Attach a wall-clock time on ``day`` to the business time zone."""
    return datetime.combine(day, start_time.replace(tzinfo=None), tzinfo=tz)


def to_business_zone(value: datetime, tz: ZoneInfo) -> datetime:
    """Express ``value`` in the business zone; naive values are business wall-clock time."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def _in_business_zone(booked: BookedInterval, tz: ZoneInfo) -> Interval:
    return Interval(to_business_zone(booked.start, tz), to_business_zone(booked.end, tz))


def candidate_start_times(business_hours: BusinessHours, service_duration_minutes: int) -> Iterator[time]:
    """Yield every grid start time whose service still ends by closing time."""
    _require_positive_duration(service_duration_minutes)

    # Any date works here; only wall-clock arithmetic matters.
    base = date(2000, 1, 1)
    cursor = datetime.combine(base, business_hours.opening_time)
    closing = datetime.combine(base, business_hours.closing_time)
    duration = timedelta(minutes=service_duration_minutes)

    while cursor + duration <= closing:
        yield cursor.time()
        cursor += business_hours.granularity


def is_slot_free(
    day: date,
    start_time: time,
    service_duration_minutes: int,
    booked_intervals: Iterable[BookedInterval],
    business_hours: BusinessHours,
) -> bool:
    """Check a single candidate start against the day's booked intervals.

    Does not check that ``start_time`` sits on the slot grid or inside
    business hours; ``compute_free_slots`` does.
    """
    _require_positive_duration(service_duration_minutes)
    tz = business_hours.tz
    candidate = Interval.from_duration(anchor(day, start_time, tz), service_duration_minutes)
    return not any(overlaps(candidate, _in_business_zone(b, tz)) for b in booked_intervals)


def compute_free_slots(
    day: date,
    service_duration_minutes: int,
    booked_intervals: Sequence[BookedInterval],
    business_hours: BusinessHours,
) -> List[time]:
    """Return the bookable start times for ``day`` in ascending order.

    ``booked_intervals`` must already be restricted to the same business and
    day; no filtering happens here. A candidate ``[start, start + duration)``
    is bookable iff it ends no later than closing time and overlaps none of
    the booked intervals.

    Args:
        day: Calendar date the candidates are anchored on.
        service_duration_minutes: Length of the requested service (> 0).
        booked_intervals: Existing reservations for that business and day.
        business_hours: Opening hours, slot grid and time zone.

    Raises:
        InvalidDurationError: ``service_duration_minutes`` is zero or negative.
    """
    _require_positive_duration(service_duration_minutes)
    tz = business_hours.tz
    taken = [_in_business_zone(b, tz) for b in booked_intervals]

    free: List[time] = []
    for start_time in candidate_start_times(business_hours, service_duration_minutes):
        candidate = Interval.from_duration(anchor(day, start_time, tz), service_duration_minutes)
        if not any(overlaps(candidate, t) for t in taken):
            free.append(start_time)
    return free
