from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from booking_core.scheduling.types import Appointment, BookedInterval


class SchedulingError(Exception):
    """Base class for every error raised by the scheduling core."""

    code = "scheduling_error"
    # Last reservation stage reached when the error was raised, if any.
    stage = None


class ValidationError(SchedulingError):
    """Bad input. Raised before the store is ever contacted."""

    code = "validation_error"


class TimeConversionError(SchedulingError):
    """A date/time combination that cannot be represented in the business zone."""

    code = "time_conversion_error"


class InvalidIntervalError(SchedulingError):
    code = "invalid_interval"


class InvalidDurationError(SchedulingError):
    code = "invalid_duration"


class SlotUnavailableError(SchedulingError):
    """The requested start is off-grid, outside business hours, or already taken."""

    code = "slot_unavailable"


class StoreError(SchedulingError):
    """Wraps any failure reported by a slot store gateway."""

    code = "store_error"


class SlotConflictError(StoreError):
    """A conditional interval write lost against an overlapping reservation."""

    code = "slot_conflict"


class AppointmentNotFoundError(StoreError):
    code = "appointment_not_found"


class PartialBookingFailure(SchedulingError):
    """The appointment record was written but its booked interval was not.

    The appointment exists without blocking the slot it claims. Callers must
    reconcile it explicitly (retry the interval write or delete the
    appointment); a plain client retry cannot fix it.
    """

    code = "partial_booking_failure"

    def __init__(
        self,
        message: str,
        *,
        appointment: "Appointment",
        interval: "BookedInterval",
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.appointment = appointment
        self.interval = interval
        self.cause = cause

    @property
    def appointment_id(self) -> str:
        return self.appointment.id


class InconsistentCancellationFailure(SchedulingError):
    """The booked interval was deleted but the appointment record was not."""

    code = "inconsistent_cancellation"

    def __init__(self, message: str, *, appointment_id: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.appointment_id = appointment_id
        self.cause = cause
