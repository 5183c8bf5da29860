from booking_core.models.appointment import Appointment
from booking_core.models.booked_interval import BookedInterval, SlotClaim

__all__ = ["Appointment", "BookedInterval", "SlotClaim"]
