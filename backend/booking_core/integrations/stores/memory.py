from __future__ import annotations

import asyncio
import uuid
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from booking_core.scheduling.availability import to_business_zone
from booking_core.scheduling.buckets import slot_buckets
from booking_core.scheduling.errors import SlotConflictError, StoreError
from booking_core.scheduling.types import Appointment, BookedInterval, BusinessHours


class InMemorySlotStore:
    """Process-local slot store gateway.

    Holds everything in dicts guarded by one ``asyncio.Lock``; the slot
    claims mirror the SQL store's unique (owner_id, bucket_start) index.
    Data does not survive a restart.
    """

    name = "memory"

    def __init__(self, hours_for: Callable[[str], BusinessHours]):
        self.hours_for = hours_for
        self.appointments: Dict[str, Appointment] = {}
        self.intervals: List[BookedInterval] = []
        self.claims: Dict[Tuple[str, datetime], Optional[str]] = {}
        self._lock = asyncio.Lock()

    def new_appointment_id(self) -> str:
        return str(uuid.uuid4())

    def _on_day(self, owner_id: str, day: date, start: datetime) -> bool:
        return to_business_zone(start, self.hours_for(owner_id).tz).date() == day

    async def fetch_booked_intervals_for_day(self, owner_id: str, day: date) -> List[BookedInterval]:
        tz = self.hours_for(owner_id).tz
        async with self._lock:
            matches = [
                b for b in self.intervals
                if b.owner_id == owner_id
                and to_business_zone(b.start, tz).date() <= day <= to_business_zone(b.end, tz).date()
            ]
        return sorted(matches, key=lambda b: to_business_zone(b.start, tz))

    async def write_booked_interval(self, interval: BookedInterval) -> None:
        buckets = slot_buckets(interval.interval, self.hours_for(interval.owner_id))
        keys = [(interval.owner_id, bucket) for bucket in buckets]
        async with self._lock:
            if any(key in self.claims for key in keys):
                raise SlotConflictError(
                    f"Time range {interval.start.isoformat()}-{interval.end.isoformat()} is already reserved"
                )
            for key in keys:
                self.claims[key] = interval.appointment_id
            self.intervals.append(interval)

    async def delete_booked_interval(self, appointment_id: str) -> None:
        async with self._lock:
            self.intervals = [b for b in self.intervals if b.appointment_id != appointment_id]
            self.claims = {k: v for k, v in self.claims.items() if v != appointment_id}

    async def write_appointment(self, appointment_id: str, appointment: Appointment) -> Appointment:
        async with self._lock:
            if appointment_id in self.appointments:
                raise StoreError(f"Appointment {appointment_id} already exists")
            stored = replace(appointment, id=appointment_id, created_at=datetime.now(timezone.utc))
            self.appointments[appointment_id] = stored
        return stored

    async def delete_appointment(self, appointment_id: str) -> None:
        async with self._lock:
            self.appointments.pop(appointment_id, None)

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return self.appointments.get(appointment_id)

    async def fetch_appointments_for_day(self, owner_id: str, day: date) -> List[Appointment]:
        return sorted(
            (a for a in self.appointments.values() if a.owner_id == owner_id and self._on_day(owner_id, day, a.start)),
            key=lambda a: a.start,
        )

    async def fetch_appointments_for_customer(self, customer_user_id: str) -> List[Appointment]:
        return [a for a in self.appointments.values() if a.customer_user_id == customer_user_id]
