from __future__ import annotations

from datetime import date
from typing import List, Optional, Protocol

from booking_core.scheduling.types import Appointment, BookedInterval


class SlotStoreGateway(Protocol):
    """Persistence collaborator for appointments and booked intervals.

    Implementations raise ``StoreError`` (or a subclass) for any backend
    failure. Timeouts and retries of the underlying store belong here, never
    in the scheduling core.
    """

    name: str

    async def fetch_booked_intervals_for_day(self, owner_id: str, day: date) -> List[BookedInterval]:
        ...

    def new_appointment_id(self) -> str:
        ...

    async def write_appointment(self, appointment_id: str, appointment: Appointment) -> Appointment:
        """Persist ``appointment`` under ``appointment_id``.

        Returns the stored record with its server-assigned ``created_at``.
        """
        ...

    async def write_booked_interval(self, interval: BookedInterval) -> None:
        """Conditionally persist ``interval``.

        Raises ``SlotConflictError`` and writes nothing when the interval
        overlaps a slot bucket already claimed for the same owner.
        """
        ...

    async def delete_booked_interval(self, appointment_id: str) -> None:
        ...

    async def delete_appointment(self, appointment_id: str) -> None:
        ...

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        ...

    async def fetch_appointments_for_day(self, owner_id: str, day: date) -> List[Appointment]:
        ...

    async def fetch_appointments_for_customer(self, customer_user_id: str) -> List[Appointment]:
        ...
