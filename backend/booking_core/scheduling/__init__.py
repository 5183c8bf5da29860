from booking_core.scheduling.availability import compute_free_slots, is_slot_free
from booking_core.scheduling.errors import (
    AppointmentNotFoundError,
    InconsistentCancellationFailure,
    InvalidDurationError,
    InvalidIntervalError,
    PartialBookingFailure,
    SchedulingError,
    SlotConflictError,
    SlotUnavailableError,
    StoreError,
    TimeConversionError,
    ValidationError,
)
from booking_core.scheduling.gateway import SlotStoreGateway
from booking_core.scheduling.intervals import Interval, overlaps
from booking_core.scheduling.orchestrator import BookingOrchestrator, ReservationStage
from booking_core.scheduling.service import SchedulingService
from booking_core.scheduling.types import (
    Appointment,
    BookedInterval,
    BookingRequest,
    BusinessHours,
    CustomerBookings,
)

__all__ = [
    "Appointment",
    "AppointmentNotFoundError",
    "BookedInterval",
    "BookingOrchestrator",
    "BookingRequest",
    "BusinessHours",
    "CustomerBookings",
    "InconsistentCancellationFailure",
    "Interval",
    "InvalidDurationError",
    "InvalidIntervalError",
    "PartialBookingFailure",
    "ReservationStage",
    "SchedulingError",
    "SchedulingService",
    "SlotConflictError",
    "SlotStoreGateway",
    "SlotUnavailableError",
    "StoreError",
    "TimeConversionError",
    "ValidationError",
    "compute_free_slots",
    "is_slot_free",
    "overlaps",
]
