from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, time, timezone
from typing import List, Optional

from booking_core.scheduling.availability import compute_free_slots
from booking_core.scheduling.errors import (
    InvalidDurationError,
    PartialBookingFailure,
    ValidationError,
)
from booking_core.scheduling.gateway import SlotStoreGateway
from booking_core.scheduling.orchestrator import BookingOrchestrator, HoursLookup, store_call
from booking_core.scheduling.types import Appointment, BookingRequest, CustomerBookings

logger = logging.getLogger(__name__)

RESOLVE_RETRY = "retry"
RESOLVE_RELEASE = "release"


class SchedulingService:
    """Scheduling API exposed to the UI and other collaborators.

    Every call re-reads current state from the gateway; nothing is cached
    between calls.
    """

    def __init__(
        self,
        gateway: SlotStoreGateway,
        hours_for: HoursLookup,
        default_owner_id: Optional[str] = None,
    ):
        self.gateway = gateway
        self.hours_for = hours_for
        self.default_owner_id = default_owner_id
        self.orchestrator = BookingOrchestrator(gateway, hours_for)

    def resolve_owner_id(self, owner_id: Optional[str]) -> str:
        """Return the caller's owner id, or the configured default when blank."""
        if owner_id and owner_id.strip():
            return owner_id.strip()
        if self.default_owner_id:
            return self.default_owner_id
        raise ValidationError("missing required id")

    async def get_available_slots(
        self,
        owner_id: Optional[str],
        day: date,
        service_duration_minutes: int,
    ) -> List[time]:
        owner_id = self.resolve_owner_id(owner_id)
        if service_duration_minutes is None or service_duration_minutes <= 0:
            raise InvalidDurationError(
                f"Service duration must be a positive number of minutes, got {service_duration_minutes}"
            )
        business_hours = self.hours_for(owner_id)
        booked = await store_call(
            "fetch booked intervals",
            lambda: self.gateway.fetch_booked_intervals_for_day(owner_id, day),
        )
        slots = compute_free_slots(day, service_duration_minutes, booked, business_hours)
        logger.debug(f"{len(slots)} free slots for owner {owner_id} on {day} ({service_duration_minutes} min)")
        return slots

    async def create_booking(self, request: BookingRequest) -> Appointment:
        request = replace(request, owner_id=self.resolve_owner_id(request.owner_id))
        return await self.orchestrator.reserve(request)

    async def cancel_booking(self, appointment_id: str) -> None:
        await self.orchestrator.cancel(appointment_id)

    async def get_schedule_for_date(self, owner_id: Optional[str], day: date) -> List[Appointment]:
        """An owner's appointments on ``day``, earliest first."""
        owner_id = self.resolve_owner_id(owner_id)
        appointments = await store_call(
            "fetch appointments for day",
            lambda: self.gateway.fetch_appointments_for_day(owner_id, day),
        )
        return sorted(appointments, key=lambda a: a.start)

    async def get_customer_bookings(
        self,
        customer_user_id: str,
        now: Optional[datetime] = None,
    ) -> CustomerBookings:
        """Split a customer's appointments into upcoming and past.

        Upcoming appointments (start >= now) come soonest first, past ones
        most recent first.
        """
        if not customer_user_id or not customer_user_id.strip():
            raise ValidationError("missing required id")
        now = now or datetime.now(timezone.utc)

        appointments = await store_call(
            "fetch appointments for customer",
            lambda: self.gateway.fetch_appointments_for_customer(customer_user_id),
        )
        upcoming = sorted((a for a in appointments if a.start >= now), key=lambda a: a.start)
        past = sorted((a for a in appointments if a.start < now), key=lambda a: a.start, reverse=True)
        return CustomerBookings(upcoming=upcoming, past=past)

    async def resolve_partial_booking(self, failure: PartialBookingFailure, strategy: str = RESOLVE_RELEASE) -> None:
        """Reconcile an orphaned appointment left by ``PartialBookingFailure``.

        ``retry`` writes the missing interval once more; if that fails the
        appointment is still orphaned and the ``StoreError`` propagates.
        ``release`` deletes the orphaned appointment.
        """
        appointment_id = failure.appointment_id
        if strategy == RESOLVE_RETRY:
            await store_call(
                "retry booked interval",
                lambda: self.gateway.write_booked_interval(failure.interval),
            )
            logger.warning(f"Reconciled partial booking {appointment_id} by writing its interval")
        elif strategy == RESOLVE_RELEASE:
            await store_call("delete appointment", lambda: self.gateway.delete_appointment(appointment_id))
            logger.warning(f"Reconciled partial booking {appointment_id} by deleting the orphaned appointment")
        else:
            raise ValidationError(f"Unknown reconciliation strategy: {strategy}")
