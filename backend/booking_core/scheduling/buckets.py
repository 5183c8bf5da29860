from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List

from booking_core.scheduling.availability import to_business_zone
from booking_core.scheduling.intervals import Interval
from booking_core.scheduling.types import BusinessHours


def slot_buckets(interval: Interval, business_hours: BusinessHours) -> List[datetime]:
    """Return the UTC start of every slot-grid bucket ``interval`` touches.

    Buckets step from the opening time on the interval's local start day,
    the same origin ``candidate_start_times`` uses. Two intervals that
    overlap always share at least one bucket, and two grid-aligned intervals
    that merely touch never do. These are the uniqueness keys the stores
    claim for a conditional interval write.
    """
    tz = business_hours.tz
    step = business_hours.slot_granularity_minutes

    local_start = to_business_zone(interval.start, tz)
    local_end = to_business_zone(interval.end, tz)

    origin = datetime.combine(local_start.date(), business_hours.opening_time, tzinfo=tz)
    # Wall-clock minutes; negative before opening, floored onto the same grid.
    minutes_in = int((local_start.replace(tzinfo=None) - origin.replace(tzinfo=None)).total_seconds() // 60)
    cursor = origin + timedelta(minutes=(minutes_in // step) * step)

    buckets: List[datetime] = []
    while cursor < local_end:
        buckets.append(cursor.astimezone(timezone.utc))
        cursor += timedelta(minutes=step)
    return buckets
