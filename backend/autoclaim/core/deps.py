from functools import lru_cache
from typing import Generator, Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from autoclaim.claims.events import ClaimEventBus
from autoclaim.claims.service import ClaimService
from autoclaim.core.config import AutoclaimConfig, load_config
from autoclaim.core.db import SessionLocal
from autoclaim.eligibility.service import EligibilityEvaluator
from autoclaim.notifications.observers import EventLogNotifier, LoggingNotifier
from autoclaim.stores.interfaces import ClaimRepository
from autoclaim.stores.sqlalchemy_store import SqlAlchemyClaimRepository


@lru_cache
def get_config() -> AutoclaimConfig:
    return load_config()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_repository(db: Session = Depends(get_db)) -> ClaimRepository:
    return SqlAlchemyClaimRepository(db)


def get_event_bus(db: Session = Depends(get_db)) -> ClaimEventBus:
    return ClaimEventBus([LoggingNotifier(), EventLogNotifier(db)])


def get_claim_service(
    repository: ClaimRepository = Depends(get_repository),
    events: ClaimEventBus = Depends(get_event_bus),
    config: AutoclaimConfig = Depends(get_config),
) -> ClaimService:
    return ClaimService(repository, events, deadline_warning_days=config.deadline_warning_days)


def get_eligibility_evaluator(config: AutoclaimConfig = Depends(get_config)) -> EligibilityEvaluator:
    return EligibilityEvaluator(exchange_rate=config.eur_to_gbp_rate)


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> UUID:
    # identity comes from the fronting gateway; no authentication here
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="X-User-Id must be a UUID")
