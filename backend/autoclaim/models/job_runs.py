import uuid
from sqlalchemy import Column, DateTime, Integer, Text
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.sql import func
from autoclaim.core.db import Base

class JobRun(Base):
    """One row per trigger run (feed_poll, delay_sweep, claim_deadlines)."""

    __tablename__ = "job_runs"

    run_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    job_name = Column(Text, nullable=False, index=True)
    # running -> success | fail
    status = Column(Text, nullable=False, default="running")
    started_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)

    items_processed = Column(Integer, nullable=False, default=0)
    items_failed = Column(Integer, nullable=False, default=0)
    error = Column(Text, nullable=True)

    # CLI args on start, result counts merged in on success
    meta = Column(JSONB, nullable=False, default=dict)
