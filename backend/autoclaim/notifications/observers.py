"""
Shipped claim event observers.

LoggingNotifier writes one log line per event. EventLogNotifier appends the
event to the claim_event_log table inside the caller's session; the caller owns
the commit. Anything heavier (mail, queues) plugs in as another Notifier.
"""

import logging

from sqlalchemy.orm import Session

from autoclaim.claims.events import ClaimEvent, event_payload
from autoclaim.models.event_log import ClaimEventRecord

logger = logging.getLogger(__name__)


class LoggingNotifier:
    def __init__(self, level: int = logging.INFO):
        self.level = level

    def notify(self, event: ClaimEvent) -> None:
        logger.log(self.level, "%s claim=%s user=%s", event.event_type, event.claim_id, event.user_id)


class EventLogNotifier:
    def __init__(self, db: Session):
        self.db = db

    def notify(self, event: ClaimEvent) -> None:
        self.db.add(
            ClaimEventRecord(
                claim_id=event.claim_id,
                user_id=event.user_id,
                event_type=event.event_type,
                occurred_at=event.timestamp,
                payload=event_payload(event),
            )
        )
        self.db.flush()
