from sqlalchemy import Column, String, Integer, BigInteger, DateTime, Index
from booking_core.core.database import Base, utcnow

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True)
    owner_id = Column(String, nullable=False)
    customer_user_id = Column(String, nullable=False)

    # Service snapshot at booking time
    service_id = Column(String, nullable=False)
    service_name = Column(String, nullable=False)
    price_in_cents = Column(BigInteger, nullable=False, default=0)
    duration_minutes = Column(Integer, nullable=False)

    # Naive UTC; the end is derived from duration_minutes
    start_at = Column(DateTime, nullable=False)

    # Customer Info
    customer_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=False)
    customer_email = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_appointments_owner_start", "owner_id", "start_at"),
        Index("idx_appointments_customer_start", "customer_user_id", "start_at"),
    )

    def __repr__(self):
        return f"<Appointment(id={self.id}, owner={self.owner_id}, start={self.start_at})>"
