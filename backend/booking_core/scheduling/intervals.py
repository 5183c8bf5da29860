from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from booking_core.scheduling.errors import InvalidIntervalError


def _is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


@dataclass(frozen=True)
class Interval:
    """Half-open time range ``[start, end)``.

    Touching ranges do not overlap: ``[09:00, 10:00)`` and ``[10:00, 11:00)``
    can both be booked.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if _is_aware(self.start) != _is_aware(self.end):
            raise InvalidIntervalError("Interval endpoints must both be timezone-aware or both naive")
        if self.start >= self.end:
            raise InvalidIntervalError(
                f"Interval start must be before end (start={self.start.isoformat()}, end={self.end.isoformat()})"
            )

    @classmethod
    def from_duration(cls, start: datetime, minutes: int) -> "Interval":
        return cls(start=start, end=start + timedelta(minutes=minutes))

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def overlaps(self, other: "Interval") -> bool:
        return overlaps(self, other)


def overlaps(a: Interval, b: Interval) -> bool:
    return a.start < b.end and b.start < a.end
