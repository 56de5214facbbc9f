"""
Claim events and the in-process bus that fans them out.

Observers are handed to the bus when it is built; delivery is synchronous
and in registration order. A failing observer is logged and skipped, the
rest still receive the event. The bus neither retries nor stores events.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Union
from uuid import UUID

from .lifecycle import ClaimStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimCreated:
    claim_id: UUID
    user_id: UUID
    booking_id: UUID
    timestamp: datetime
    status: ClaimStatus
    eligible_cash_amount: Decimal
    eligible_voucher_amount: Decimal

    event_type = "claim.created"


@dataclass(frozen=True)
class ClaimSubmitted:
    claim_id: UUID
    user_id: UUID
    timestamp: datetime
    submitted_at: datetime

    event_type = "claim.submitted"


@dataclass(frozen=True)
class ClaimStatusChanged:
    claim_id: UUID
    user_id: UUID
    timestamp: datetime
    previous_status: ClaimStatus
    new_status: ClaimStatus

    event_type = "claim.status-changed"


@dataclass(frozen=True)
class ClaimDeadlineApproaching:
    claim_id: UUID
    user_id: UUID
    timestamp: datetime
    deadline: date
    days_remaining: int

    event_type = "claim.deadline-approaching"


ClaimEvent = Union[ClaimCreated, ClaimSubmitted, ClaimStatusChanged, ClaimDeadlineApproaching]


def event_payload(event: ClaimEvent) -> dict:
    """JSON-friendly dict of an event (UUIDs/dates as strings, enums as values)."""
    out = {}
    for k, v in asdict(event).items():
        if isinstance(v, (UUID, Decimal)):
            v = str(v)
        elif isinstance(v, (datetime, date)):
            v = v.isoformat()
        elif isinstance(v, ClaimStatus):
            v = v.value
        out[k] = v
    out["event_type"] = event.event_type
    return out


class Notifier(Protocol):
    def notify(self, event: ClaimEvent) -> None: ...


class ClaimEventBus:
    def __init__(self, observers: Optional[Iterable[Notifier]] = None):
        self._observers: tuple[Notifier, ...] = tuple(observers or ())

    @property
    def observers(self) -> tuple[Notifier, ...]:
        return self._observers

    def emit(self, event: ClaimEvent) -> int:
        """Deliver to every observer; returns how many accepted it."""
        delivered = 0
        for observer in self._observers:
            try:
                observer.notify(event)
            except Exception:
                logger.exception(
                    "Observer %s failed on %s for claim %s",
                    type(observer).__name__,
                    event.event_type,
                    event.claim_id,
                )
                continue
            delivered += 1
        return delivered
