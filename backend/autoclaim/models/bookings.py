import uuid
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from autoclaim.core.db import Base

class Booking(Base):
    __tablename__ = "bookings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    pnr = Column(Text, nullable=False)
    tcn = Column(Text, nullable=False)
    train_number = Column(Text, nullable=False)
    journey_date = Column(Date, nullable=False, index=True)
    passenger_name = Column(Text, nullable=False)
    origin = Column(Text, nullable=False)
    destination = Column(Text, nullable=False)
    coach = Column(Text, nullable=True)
    seat = Column(Text, nullable=True)

    ticket_price = Column(Numeric(10, 2), nullable=True)
    ticket_currency = Column(Text, nullable=False, default="EUR")

    # set by the delay sweep
    train_id = Column(UUID(as_uuid=True), ForeignKey("trains.id"), nullable=True)
    final_delay_minutes = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
