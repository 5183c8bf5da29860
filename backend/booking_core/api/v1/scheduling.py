from __future__ import annotations

import logging
from datetime import date, datetime, time
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from booking_core.core.config import get_settings
from booking_core.integrations.stores.registry import resolve_store
from booking_core.scheduling.errors import (
    AppointmentNotFoundError,
    InconsistentCancellationFailure,
    PartialBookingFailure,
    SchedulingError,
    SlotConflictError,
    SlotUnavailableError,
    StoreError,
)
from booking_core.scheduling.service import SchedulingService
from booking_core.scheduling.types import Appointment, BookingRequest


logger = logging.getLogger(__name__)

router = APIRouter(tags=["scheduling"])


class _BaseArgs(BaseModel):
    """Common base for request bodies; unknown fields are ignored."""

    class Config:
        extra = "ignore"


class CreateBookingArgs(_BaseArgs):
    owner_id: Optional[str] = None
    customer_user_id: str
    service_id: str
    service_name: str
    service_duration_minutes: int
    date: str
    time: str
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    price_in_cents: int = 0


@lru_cache
def get_scheduling_service() -> SchedulingService:
    settings = get_settings()
    return SchedulingService(
        gateway=resolve_store(settings),
        hours_for=settings.hours_for,
        default_owner_id=settings.default_owner_id,
    )


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid date format; expected YYYY-MM-DD")


def _parse_time(value: str) -> time:
    # Support "HH:MM" and "HH:MM:SS" 24h formats
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    raise HTTPException(status_code=400, detail="Invalid time format; expected HH:MM (24h)")


def _appointment_to_dict(appointment: Appointment) -> Dict[str, Any]:
    return {
        "id": appointment.id,
        "owner_id": appointment.owner_id,
        "customer_user_id": appointment.customer_user_id,
        "service_id": appointment.service_id,
        "service_name": appointment.service_name,
        "price_in_cents": appointment.price_in_cents,
        "duration_minutes": appointment.duration_minutes,
        "start": appointment.start.isoformat(),
        "end": appointment.end.isoformat(),
        "customer_name": appointment.customer_name,
        "customer_phone": appointment.customer_phone,
        "customer_email": appointment.customer_email,
        "created_at": appointment.created_at.isoformat() if appointment.created_at else None,
    }


def _http_error(e: SchedulingError) -> HTTPException:
    """Map a scheduling error to an HTTP error.

    Partial and inconsistent failures keep their own error codes so callers
    can alert on them instead of retrying.
    """
    detail: Dict[str, Any] = {"error": e.code, "message": str(e)}
    if isinstance(e, PartialBookingFailure):
        detail["appointment_id"] = e.appointment_id
        return HTTPException(status_code=500, detail=detail)
    if isinstance(e, InconsistentCancellationFailure):
        detail["appointment_id"] = e.appointment_id
        return HTTPException(status_code=500, detail=detail)
    if isinstance(e, AppointmentNotFoundError):
        return HTTPException(status_code=404, detail=detail)
    if isinstance(e, (SlotUnavailableError, SlotConflictError)):
        return HTTPException(status_code=409, detail=detail)
    if isinstance(e, StoreError):
        detail["message"] = "Temporary storage problem, please retry."
        return HTTPException(status_code=503, detail=detail)
    return HTTPException(status_code=400, detail=detail)


@router.get("/owners/{owner_id}/availability")
async def get_available_slots(
    owner_id: str,
    date: str = Query(...),
    duration_minutes: int = Query(...),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Bookable start times for one business on one day."""
    day = _parse_date(date)
    try:
        slots = await service.get_available_slots(owner_id, day, duration_minutes)
    except SchedulingError as e:
        raise _http_error(e)

    return {
        "owner_id": owner_id,
        "date": day.isoformat(),
        "duration_minutes": duration_minutes,
        "slots": [slot.strftime("%H:%M") for slot in slots],
    }


@router.get("/owners/{owner_id}/schedule")
async def get_schedule(
    owner_id: str,
    date: str = Query(...),
    service: SchedulingService = Depends(get_scheduling_service),
):
    day = _parse_date(date)
    try:
        appointments = await service.get_schedule_for_date(owner_id, day)
    except SchedulingError as e:
        raise _http_error(e)
    return {"owner_id": owner_id, "date": day.isoformat(), "appointments": [_appointment_to_dict(a) for a in appointments]}


@router.post("/bookings", status_code=201)
async def create_booking(
    args: CreateBookingArgs,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Reserve a slot and create the appointment.

    A 500 with error ``partial_booking_failure`` means the appointment
    exists but does not hold its slot; it needs reconciliation, not a retry.
    """
    request = BookingRequest(
        owner_id=args.owner_id or "",
        customer_user_id=args.customer_user_id,
        service_id=args.service_id,
        service_name=args.service_name,
        service_duration_minutes=args.service_duration_minutes,
        requested_date=_parse_date(args.date),
        requested_time=_parse_time(args.time),
        customer_name=args.customer_name,
        customer_phone=args.customer_phone,
        customer_email=args.customer_email,
        price_in_cents=args.price_in_cents,
    )
    try:
        appointment = await service.create_booking(request)
    except SchedulingError as e:
        raise _http_error(e)
    return _appointment_to_dict(appointment)


@router.delete("/bookings/{appointment_id}")
async def cancel_booking(
    appointment_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        await service.cancel_booking(appointment_id)
    except SchedulingError as e:
        raise _http_error(e)
    return {"appointment_id": appointment_id, "status": "cancelled"}


@router.get("/customers/{customer_user_id}/bookings")
async def get_customer_bookings(
    customer_user_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        bookings = await service.get_customer_bookings(customer_user_id)
    except SchedulingError as e:
        raise _http_error(e)
    upcoming: List[Dict[str, Any]] = [_appointment_to_dict(a) for a in bookings.upcoming]
    past: List[Dict[str, Any]] = [_appointment_to_dict(a) for a in bookings.past]
    return {"customer_user_id": customer_user_id, "upcoming": upcoming, "past": past}
