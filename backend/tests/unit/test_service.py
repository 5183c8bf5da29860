"""Tests for the scheduling service API."""
from datetime import datetime, time, timezone

import pytest

from booking_core.scheduling.errors import (
    InvalidDurationError,
    PartialBookingFailure,
    StoreError,
    ValidationError,
)
from booking_core.scheduling.service import RESOLVE_RELEASE, RESOLVE_RETRY, SchedulingService
from tests.helpers import DAY, RecordingGateway, booked, make_request, store_failure


@pytest.fixture
def service(gateway, hours_for):
    return SchedulingService(gateway, hours_for)


class TestAvailableSlots:

    async def test_fetches_fresh_state_every_call(self, service, gateway):
        first = await service.get_available_slots("owner-1", DAY, 60)
        gateway.booked.append(booked("09:00", "10:00"))
        second = await service.get_available_slots("owner-1", DAY, 60)

        assert time(9, 0) in first
        assert time(9, 0) not in second
        assert gateway.calls.count("fetch_booked_intervals_for_day") == 2

    async def test_rejects_bad_duration_before_fetching(self, service, gateway):
        with pytest.raises(InvalidDurationError):
            await service.get_available_slots("owner-1", DAY, 0)
        assert gateway.calls == []

    async def test_store_failure_propagates(self, hours_for):
        gateway = RecordingGateway(fail_on={"fetch_booked_intervals_for_day": store_failure("fetch")})
        with pytest.raises(StoreError):
            await SchedulingService(gateway, hours_for).get_available_slots("owner-1", DAY, 30)


class TestOwnerDefault:

    async def test_blank_owner_without_default(self, service, gateway):
        with pytest.raises(ValidationError):
            await service.get_available_slots("", DAY, 30)
        assert gateway.calls == []

    async def test_blank_owner_uses_configured_default(self, gateway, hours_for):
        gateway.booked.append(booked("09:00", "10:00", owner_id="biz-default"))
        service = SchedulingService(gateway, hours_for, default_owner_id="biz-default")

        slots = await service.get_available_slots("  ", DAY, 60)
        assert time(9, 0) not in slots

        appointment = await service.create_booking(make_request(owner_id=""))
        assert appointment.owner_id == "biz-default"

    async def test_explicit_owner_is_never_replaced(self, gateway, hours_for):
        service = SchedulingService(gateway, hours_for, default_owner_id="biz-default")
        appointment = await service.create_booking(make_request(owner_id="owner-7"))
        assert appointment.owner_id == "owner-7"


class TestBookAndCancel:

    async def test_booked_slot_disappears_and_returns_after_cancel(self, service):
        appointment = await service.create_booking(make_request(requested_time=time(10, 0)))
        assert time(10, 0) not in await service.get_available_slots("owner-1", DAY, 60)

        await service.cancel_booking(appointment.id)
        assert time(10, 0) in await service.get_available_slots("owner-1", DAY, 60)

    async def test_schedule_for_date_is_ordered(self, service):
        await service.create_booking(make_request(requested_time=time(14, 0)))
        await service.create_booking(make_request(requested_time=time(9, 0)))

        schedule = await service.get_schedule_for_date("owner-1", DAY)
        assert [a.start.time() for a in schedule] == [time(9, 0), time(14, 0)]


class TestCustomerBookings:

    async def test_splits_upcoming_and_past(self, service):
        for hour in (9, 11, 13, 15):
            await service.create_booking(make_request(requested_time=time(hour, 0)))
        now = datetime.combine(DAY, time(12, 0), tzinfo=timezone.utc)

        bookings = await service.get_customer_bookings("user-1", now=now)

        assert [a.start.hour for a in bookings.upcoming] == [13, 15]
        assert [a.start.hour for a in bookings.past] == [11, 9]

    async def test_appointment_starting_now_is_upcoming(self, service):
        appointment = await service.create_booking(make_request(requested_time=time(9, 0)))
        bookings = await service.get_customer_bookings("user-1", now=appointment.start)
        assert bookings.upcoming == [appointment]

    async def test_only_that_customer(self, service):
        await service.create_booking(make_request(customer_user_id="user-2"))
        bookings = await service.get_customer_bookings("user-1", now=datetime.now(timezone.utc))
        assert bookings.upcoming == [] and bookings.past == []

    async def test_blank_customer(self, service, gateway):
        with pytest.raises(ValidationError):
            await service.get_customer_bookings(" ")
        assert gateway.calls == []


class TestResolvePartialBooking:

    async def _partial(self, gateway, hours_for):
        gateway.fail_on["write_booked_interval"] = store_failure()
        service = SchedulingService(gateway, hours_for)
        with pytest.raises(PartialBookingFailure) as exc_info:
            await service.create_booking(make_request())
        gateway.fail_on.clear()
        return service, exc_info.value

    async def test_release_deletes_orphan(self, gateway, hours_for):
        service, failure = await self._partial(gateway, hours_for)

        await service.resolve_partial_booking(failure, RESOLVE_RELEASE)

        assert gateway.appointments == {}
        assert gateway.booked == []

    async def test_retry_writes_missing_interval(self, gateway, hours_for):
        service, failure = await self._partial(gateway, hours_for)

        await service.resolve_partial_booking(failure, RESOLVE_RETRY)

        [interval] = gateway.booked
        assert interval.appointment_id == failure.appointment_id
        assert time(11, 0) not in await service.get_available_slots("owner-1", DAY, 60)

    async def test_unknown_strategy(self, gateway, hours_for):
        service, failure = await self._partial(gateway, hours_for)
        with pytest.raises(ValidationError):
            await service.resolve_partial_booking(failure, "shrug")
