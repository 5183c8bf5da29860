from sqlalchemy import Column, String, Integer, DateTime, Index, UniqueConstraint
from booking_core.core.database import Base, utcnow

class BookedInterval(Base):
    __tablename__ = "booked_intervals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String, nullable=False)
    appointment_id = Column(String(36), nullable=True)

    # Naive UTC, half-open [start_at, end_at)
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_booked_intervals_owner_start", "owner_id", "start_at"),
        Index("idx_booked_intervals_appointment", "appointment_id"),
    )

    def __repr__(self):
        return f"<BookedInterval(owner={self.owner_id}, appointment={self.appointment_id}, {self.start_at}-{self.end_at})>"


class SlotClaim(Base):
    """One row per slot-grid bucket held by a booked interval.

    The unique (owner_id, bucket_start) constraint is what turns the interval
    write into a conditional write: a second overlapping interval for the
    same owner cannot claim any shared bucket.
    """

    __tablename__ = "slot_claims"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String, nullable=False)
    bucket_start = Column(DateTime, nullable=False)
    appointment_id = Column(String(36), nullable=True)

    __table_args__ = (
        UniqueConstraint("owner_id", "bucket_start", name="uq_slot_claims_owner_bucket"),
        Index("idx_slot_claims_appointment", "appointment_id"),
    )
