from __future__ import annotations

import logging
from datetime import timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from booking_core.scheduling.availability import anchor, compute_free_slots
from booking_core.scheduling.errors import (
    AppointmentNotFoundError,
    InconsistentCancellationFailure,
    PartialBookingFailure,
    SchedulingError,
    SlotUnavailableError,
    StoreError,
    TimeConversionError,
    ValidationError,
)
from booking_core.scheduling.gateway import SlotStoreGateway
from booking_core.scheduling.intervals import Interval
from booking_core.scheduling.types import Appointment, BookedInterval, BookingRequest, BusinessHours

logger = logging.getLogger(__name__)

HoursLookup = Callable[[str], BusinessHours]


class ReservationStage(str, Enum):
    """Last step a reservation completed before it failed."""

    VALIDATED = "validated"
    SLOT_CONFIRMED = "slot_confirmed"
    ID_ALLOCATED = "id_allocated"
    APPOINTMENT_WRITTEN = "appointment_written"


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


async def store_call(what: str, call: Callable[[], Awaitable[Any]]) -> Any:
    """Await a gateway call, folding unexpected exceptions into ``StoreError``."""
    try:
        return await call()
    except SchedulingError:
        raise
    except Exception as e:
        raise StoreError(f"Store failure during {what}: {e}") from e


def validate_request(request: BookingRequest) -> None:
    """Reject a booking request without touching the store."""
    if _blank(request.owner_id) or _blank(request.customer_user_id) or _blank(request.service_id):
        raise ValidationError("missing required id")
    if _blank(request.customer_name) or _blank(request.customer_phone):
        raise ValidationError("missing customer contact info")
    if request.requested_date is None or request.requested_time is None:
        raise ValidationError("missing requested date or time")
    duration = request.service_duration_minutes
    if not isinstance(duration, int) or isinstance(duration, bool) or duration <= 0:
        raise ValidationError("service duration must be a positive number of minutes")


def requested_interval(request: BookingRequest, business_hours: BusinessHours) -> Interval:
    """Combine the requested date and time into an interval in the business zone.

    Raises:
        TimeConversionError: the wall-clock time does not exist in the
            business zone, or the end falls outside the representable range.
    """
    tz = business_hours.tz
    try:
        start = anchor(request.requested_date, request.requested_time, tz)
        # Wall-clock times skipped by a DST transition do not survive a UTC round trip.
        round_trip = start.astimezone(timezone.utc).astimezone(tz)
        if round_trip.replace(tzinfo=None) != start.replace(tzinfo=None):
            raise TimeConversionError(
                f"{request.requested_date} {request.requested_time} does not exist in {business_hours.timezone}"
            )
        return Interval.from_duration(start, request.service_duration_minutes)
    except TimeConversionError:
        raise
    except (AttributeError, TypeError, ValueError, OverflowError) as e:
        raise TimeConversionError(f"Invalid requested date/time: {e}") from e


class BookingOrchestrator:
    """Creates and cancels appointments together with their booked intervals.

    A reservation is two writes against the store: the appointment record,
    then the booked interval that blocks the slot. They are not one atomic
    transaction, so a failure of the second write is reported as
    ``PartialBookingFailure`` and never repaired here. The interval write is
    conditional on the store side, which is what prevents double booking
    when two requests race past the availability check.
    """

    def __init__(self, gateway: SlotStoreGateway, hours_for: HoursLookup):
        self.gateway = gateway
        self.hours_for = hours_for

    async def reserve(self, request: BookingRequest) -> Appointment:
        validate_request(request)
        business_hours = self.hours_for(request.owner_id)
        candidate = requested_interval(request, business_hours)
        stage = ReservationStage.VALIDATED

        try:
            booked = await store_call(
                "fetch booked intervals",
                lambda: self.gateway.fetch_booked_intervals_for_day(request.owner_id, request.requested_date),
            )
            free = compute_free_slots(
                request.requested_date,
                request.service_duration_minutes,
                booked,
                business_hours,
            )
            if request.requested_time.replace(tzinfo=None) not in free:
                logger.warning(
                    f"Rejected booking for owner {request.owner_id}: "
                    f"{candidate.start.isoformat()} is not a free slot"
                )
                raise SlotUnavailableError(
                    f"{request.requested_date} {request.requested_time.strftime('%H:%M')} is not available"
                )
            stage = ReservationStage.SLOT_CONFIRMED

            try:
                appointment_id = self.gateway.new_appointment_id()
            except Exception as e:
                raise StoreError(f"Store failure during new appointment id: {e}") from e
            stage = ReservationStage.ID_ALLOCATED
            appointment = Appointment(
                id=appointment_id,
                owner_id=request.owner_id,
                customer_user_id=request.customer_user_id,
                service_id=request.service_id,
                service_name=request.service_name,
                price_in_cents=request.price_in_cents,
                duration_minutes=request.service_duration_minutes,
                start=candidate.start,
                customer_name=request.customer_name.strip(),
                customer_phone=request.customer_phone.strip(),
                customer_email=(request.customer_email or "").strip() or None,
            )

            stored = await store_call(
                "write appointment",
                lambda: self.gateway.write_appointment(appointment_id, appointment),
            )
            stage = ReservationStage.APPOINTMENT_WRITTEN
        except SchedulingError as e:
            e.stage = stage
            if isinstance(e, StoreError):
                logger.error(f"Booking for owner {request.owner_id} aborted before any write completed: {e}")
            raise

        interval = BookedInterval(
            owner_id=request.owner_id,
            appointment_id=appointment_id,
            start=candidate.start,
            end=candidate.end,
        )
        try:
            await store_call("write booked interval", lambda: self.gateway.write_booked_interval(interval))
        except StoreError as e:
            logger.critical(
                f"PARTIAL BOOKING: appointment {appointment_id} for owner {request.owner_id} was written "
                f"but its interval {candidate.start.isoformat()}-{candidate.end.isoformat()} was not: {e}"
            )
            failure = PartialBookingFailure(
                f"Appointment {appointment_id} was created but its time slot could not be reserved",
                appointment=stored,
                interval=interval,
                cause=e,
            )
            failure.stage = stage
            raise failure from e

        logger.info(
            f"Booked appointment {appointment_id} for owner {request.owner_id} "
            f"at {candidate.start.isoformat()} ({request.service_duration_minutes} min)"
        )
        return stored

    async def cancel(self, appointment_id: str) -> None:
        """Delete the booked interval first, then the appointment record.

        If the interval cannot be deleted the appointment is left untouched.
        If the interval is gone but the appointment survives, the state is
        reported as ``InconsistentCancellationFailure``; calling ``cancel``
        again completes it.
        """
        if _blank(appointment_id):
            raise ValidationError("missing required id")

        existing = await store_call("get appointment", lambda: self.gateway.get_appointment(appointment_id))
        if existing is None:
            raise AppointmentNotFoundError(f"Appointment {appointment_id} not found")

        try:
            await store_call(
                "delete booked interval",
                lambda: self.gateway.delete_booked_interval(appointment_id),
            )
        except StoreError:
            logger.error(f"Failed to release slot for appointment {appointment_id}; cancellation halted")
            raise

        try:
            await store_call("delete appointment", lambda: self.gateway.delete_appointment(appointment_id))
        except StoreError as e:
            logger.critical(
                f"INCONSISTENT CANCELLATION: slot for appointment {appointment_id} was released "
                f"but the appointment record could not be deleted: {e}"
            )
            raise InconsistentCancellationFailure(
                f"Appointment {appointment_id} slot was released but the record remains",
                appointment_id=appointment_id,
                cause=e,
            ) from e

        logger.info(f"Cancelled appointment {appointment_id} for owner {existing.owner_id}")
