"""Test doubles and builders shared across the test suite."""
from dataclasses import replace
from datetime import date, datetime, time, timezone

from booking_core.scheduling.errors import StoreError
from booking_core.scheduling.types import BookedInterval, BookingRequest

DAY = date(2030, 5, 6)
CREATED_AT = datetime(2030, 5, 1, 12, 0, tzinfo=timezone.utc)


class RecordingGateway:
    """In-memory gateway that records every call and can be told to fail.

    ``fail_on`` maps a method name to the exception it should raise.
    """

    name = "recording"

    def __init__(self, booked=None, fail_on=None):
        self.booked = list(booked or [])
        self.appointments = {}
        self.fail_on = dict(fail_on or {})
        self.calls = []
        self._next_id = 0

    def _record(self, method):
        self.calls.append(method)
        if method in self.fail_on:
            raise self.fail_on[method]

    async def fetch_booked_intervals_for_day(self, owner_id, day):
        self._record("fetch_booked_intervals_for_day")
        return [b for b in self.booked if b.owner_id == owner_id]

    def new_appointment_id(self):
        self._record("new_appointment_id")
        self._next_id += 1
        return f"appt-{self._next_id}"

    async def write_appointment(self, appointment_id, appointment):
        self._record("write_appointment")
        stored = replace(appointment, id=appointment_id, created_at=CREATED_AT)
        self.appointments[appointment_id] = stored
        return stored

    async def write_booked_interval(self, interval):
        self._record("write_booked_interval")
        self.booked.append(interval)

    async def delete_booked_interval(self, appointment_id):
        self._record("delete_booked_interval")
        self.booked = [b for b in self.booked if b.appointment_id != appointment_id]

    async def delete_appointment(self, appointment_id):
        self._record("delete_appointment")
        self.appointments.pop(appointment_id, None)

    async def get_appointment(self, appointment_id):
        self._record("get_appointment")
        return self.appointments.get(appointment_id)

    async def fetch_appointments_for_day(self, owner_id, day):
        self._record("fetch_appointments_for_day")
        return [a for a in self.appointments.values() if a.owner_id == owner_id and a.start.date() == day]

    async def fetch_appointments_for_customer(self, customer_user_id):
        self._record("fetch_appointments_for_customer")
        return [a for a in self.appointments.values() if a.customer_user_id == customer_user_id]


def store_failure(method="write"):
    return StoreError(f"simulated {method} failure")


def booked(start, end, owner_id="owner-1", appointment_id=None, day=DAY):
    """Booked interval between two "HH:MM" wall-clock times in UTC on ``day``."""
    return BookedInterval(
        owner_id=owner_id,
        appointment_id=appointment_id,
        start=datetime.combine(day, time.fromisoformat(start), tzinfo=timezone.utc),
        end=datetime.combine(day, time.fromisoformat(end), tzinfo=timezone.utc),
    )


def make_request(**overrides):
    fields = dict(
        owner_id="owner-1",
        customer_user_id="user-1",
        service_id="svc-1",
        service_name="Haircut",
        service_duration_minutes=60,
        requested_date=DAY,
        requested_time=time(11, 0),
        customer_name="Alex Doe",
        customer_phone="5550105555",
        customer_email="alex@example.com",
        price_in_cents=4500,
    )
    fields.update(overrides)
    return BookingRequest(**fields)


