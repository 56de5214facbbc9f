import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Index, Text
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.sql import func
from autoclaim.core.db import Base

class ClaimEventRecord(Base):
    """Append-only record of every claim event the bus delivered."""

    __tablename__ = "claim_event_log"
    __table_args__ = (
        Index("ix_claim_event_log_claim_occurred", "claim_id", "occurred_at"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    claim_id = Column(UUID(as_uuid=True), ForeignKey("claims.id"), nullable=False)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    # claim.created | claim.submitted | claim.status-changed | claim.deadline-approaching
    event_type = Column(Text, nullable=False, index=True)
    occurred_at = Column(DateTime(timezone=True), nullable=False)
    payload = Column(JSONB, nullable=False, default=dict)
    recorded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
