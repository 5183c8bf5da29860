from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from booking_core.scheduling.errors import InvalidDurationError, InvalidIntervalError
from booking_core.scheduling.intervals import Interval


@dataclass(frozen=True)
class BusinessHours:
    """Opening hours of a single business.

    ``closing_time`` is the latest moment an appointment may *end*, not the
    latest moment one may start. All times are wall-clock times in
    ``timezone``.
    """

    opening_time: time
    closing_time: time
    slot_granularity_minutes: int
    timezone: str = "UTC"

    def __post_init__(self) -> None:
        if self.opening_time >= self.closing_time:
            raise InvalidIntervalError("Opening time must be before closing time")
        if self.slot_granularity_minutes <= 0:
            raise InvalidDurationError("Slot granularity must be a positive number of minutes")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise InvalidIntervalError(f"Unknown business timezone: {self.timezone}") from e

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def granularity(self) -> timedelta:
        return timedelta(minutes=self.slot_granularity_minutes)


@dataclass(frozen=True)
class BookedInterval:
    """A committed reservation of a time range for one business."""

    owner_id: str
    appointment_id: Optional[str]
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        # Validates start < end.
        Interval(self.start, self.end)

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)


@dataclass
class Appointment:
    id: str
    owner_id: str
    customer_user_id: str
    service_id: str
    service_name: str
    price_in_cents: int
    duration_minutes: int
    start: datetime
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration_minutes)

    def with_id(self, appointment_id: str) -> "Appointment":
        return replace(self, id=appointment_id)


@dataclass
class BookingRequest:
    owner_id: str
    customer_user_id: str
    service_id: str
    service_name: str
    service_duration_minutes: int
    requested_date: date
    requested_time: time
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    price_in_cents: int = 0


@dataclass
class CustomerBookings:
    upcoming: List[Appointment] = field(default_factory=list)
    past: List[Appointment] = field(default_factory=list)
