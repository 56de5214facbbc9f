import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from autoclaim.core.db import Base

class Claim(Base):
    __tablename__ = "claims"
    __table_args__ = (
        # at most one claim per booking
        UniqueConstraint("booking_id", name="uq_claims_booking_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    booking_id = Column(UUID(as_uuid=True), ForeignKey("bookings.id"), nullable=False)

    delay_minutes = Column(Integer, nullable=False)
    eligible_cash_amount = Column(Numeric(10, 2), nullable=True)
    eligible_voucher_amount = Column(Numeric(10, 2), nullable=True)
    currency = Column(Text, nullable=False, default="EUR")

    status = Column(Text, nullable=False, index=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
