from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Callable, List, Optional, Tuple

from sqlalchemy import and_, delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from booking_core.models import Appointment as AppointmentRow
from booking_core.models import BookedInterval as BookedIntervalRow
from booking_core.models import SlotClaim
from booking_core.scheduling.availability import to_business_zone
from booking_core.scheduling.buckets import slot_buckets
from booking_core.scheduling.errors import SlotConflictError, StoreError
from booking_core.scheduling.types import Appointment, BookedInterval, BusinessHours

logger = logging.getLogger(__name__)


def to_db_datetime(value: datetime, tz: tzinfo = timezone.utc) -> datetime:
    """Naive UTC column value. Naive input is wall-clock time in ``tz``."""
    return to_business_zone(value, tz).astimezone(timezone.utc).replace(tzinfo=None)


def from_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def day_bounds(day: date, business_hours: BusinessHours) -> Tuple[datetime, datetime]:
    """UTC column values for local midnight of ``day`` and of the next day."""
    tz = business_hours.tz
    start = datetime.combine(day, time(0, 0), tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time(0, 0), tzinfo=tz)
    return to_db_datetime(start), to_db_datetime(end)


def _appointment_from_row(row: AppointmentRow) -> Appointment:
    return Appointment(
        id=row.id,
        owner_id=row.owner_id,
        customer_user_id=row.customer_user_id,
        service_id=row.service_id,
        service_name=row.service_name,
        price_in_cents=row.price_in_cents,
        duration_minutes=row.duration_minutes,
        start=from_db_datetime(row.start_at),
        customer_name=row.customer_name,
        customer_phone=row.customer_phone,
        customer_email=row.customer_email,
        created_at=from_db_datetime(row.created_at),
    )


def _interval_from_row(row: BookedIntervalRow) -> BookedInterval:
    return BookedInterval(
        owner_id=row.owner_id,
        appointment_id=row.appointment_id,
        start=from_db_datetime(row.start_at),
        end=from_db_datetime(row.end_at),
    )


class SqlAlchemySlotStore:
    """Slot store gateway backed by the SQL database.

    Each call runs in its own session and transaction. The booked interval
    and its slot claims are inserted together, so a conflicting claim rolls
    the whole interval write back.
    """

    name = "sql"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        hours_for: Callable[[str], BusinessHours],
    ):
        self.session_factory = session_factory
        self.hours_for = hours_for

    # ==================== BOOKED INTERVALS ====================

    async def fetch_booked_intervals_for_day(self, owner_id: str, day: date) -> List[BookedInterval]:
        day_start, day_end = day_bounds(day, self.hours_for(owner_id))
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(BookedIntervalRow)
                    .where(
                        BookedIntervalRow.owner_id == owner_id,
                        BookedIntervalRow.start_at < day_end,
                        BookedIntervalRow.end_at > day_start,
                    )
                    .order_by(BookedIntervalRow.start_at)
                )
                return [_interval_from_row(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to fetch booked intervals: {e}") from e

    async def write_booked_interval(self, interval: BookedInterval) -> None:
        business_hours = self.hours_for(interval.owner_id)
        buckets = slot_buckets(interval.interval, business_hours)
        async with self.session_factory() as session:
            try:
                session.add(
                    BookedIntervalRow(
                        owner_id=interval.owner_id,
                        appointment_id=interval.appointment_id,
                        start_at=to_db_datetime(interval.start, business_hours.tz),
                        end_at=to_db_datetime(interval.end, business_hours.tz),
                    )
                )
                session.add_all(
                    SlotClaim(
                        owner_id=interval.owner_id,
                        bucket_start=to_db_datetime(bucket),
                        appointment_id=interval.appointment_id,
                    )
                    for bucket in buckets
                )
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                logger.warning(
                    f"Slot claim collision for owner {interval.owner_id} at {interval.start.isoformat()}"
                )
                raise SlotConflictError(
                    f"Time range {interval.start.isoformat()}-{interval.end.isoformat()} is already reserved"
                ) from e
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreError(f"Failed to write booked interval: {e}") from e

    async def delete_booked_interval(self, appointment_id: str) -> None:
        async with self.session_factory() as session:
            try:
                await session.execute(delete(SlotClaim).where(SlotClaim.appointment_id == appointment_id))
                await session.execute(
                    delete(BookedIntervalRow).where(BookedIntervalRow.appointment_id == appointment_id)
                )
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreError(f"Failed to delete booked interval: {e}") from e

    # ==================== APPOINTMENTS ====================

    def new_appointment_id(self) -> str:
        return str(uuid.uuid4())

    async def write_appointment(self, appointment_id: str, appointment: Appointment) -> Appointment:
        async with self.session_factory() as session:
            try:
                row = AppointmentRow(
                    id=appointment_id,
                    owner_id=appointment.owner_id,
                    customer_user_id=appointment.customer_user_id,
                    service_id=appointment.service_id,
                    service_name=appointment.service_name,
                    price_in_cents=appointment.price_in_cents,
                    duration_minutes=appointment.duration_minutes,
                    start_at=to_db_datetime(appointment.start, self.hours_for(appointment.owner_id).tz),
                    customer_name=appointment.customer_name,
                    customer_phone=appointment.customer_phone,
                    customer_email=appointment.customer_email,
                )
                session.add(row)
                await session.commit()
                await session.refresh(row)
                return _appointment_from_row(row)
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreError(f"Failed to write appointment: {e}") from e

    async def delete_appointment(self, appointment_id: str) -> None:
        async with self.session_factory() as session:
            try:
                await session.execute(delete(AppointmentRow).where(AppointmentRow.id == appointment_id))
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StoreError(f"Failed to delete appointment: {e}") from e

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        try:
            async with self.session_factory() as session:
                row = await session.get(AppointmentRow, appointment_id)
                return _appointment_from_row(row) if row else None
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to get appointment: {e}") from e

    async def fetch_appointments_for_day(self, owner_id: str, day: date) -> List[Appointment]:
        day_start, day_end = day_bounds(day, self.hours_for(owner_id))
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(AppointmentRow)
                    .where(
                        and_(
                            AppointmentRow.owner_id == owner_id,
                            AppointmentRow.start_at >= day_start,
                            AppointmentRow.start_at < day_end,
                        )
                    )
                    .order_by(AppointmentRow.start_at)
                )
                return [_appointment_from_row(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to fetch appointments: {e}") from e

    async def fetch_appointments_for_customer(self, customer_user_id: str) -> List[Appointment]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(AppointmentRow)
                    .where(AppointmentRow.customer_user_id == customer_user_id)
                    .order_by(AppointmentRow.start_at.desc())
                )
                return [_appointment_from_row(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to fetch customer appointments: {e}") from e
