import uuid
from sqlalchemy import Column, Date, DateTime, Integer, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from autoclaim.core.db import Base

class Train(Base):
    __tablename__ = "trains"
    __table_args__ = (
        UniqueConstraint("trip_id", "service_date", name="uq_trains_trip_service_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # "{train_number}-{MMDD}"; carries no year, so unique only with service_date
    trip_id = Column(Text, nullable=False)
    train_number = Column(Text, nullable=False, index=True)
    service_date = Column(Date, nullable=False, index=True)

    scheduled_departure = Column(DateTime(timezone=True), nullable=False)
    scheduled_arrival = Column(DateTime(timezone=True), nullable=False)
    actual_arrival = Column(DateTime(timezone=True), nullable=True)
    delay_minutes = Column(Integer, nullable=True)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
