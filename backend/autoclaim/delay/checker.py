"""
Completion and delay evaluation for a single train run.

A journey counts as complete once the feed has reported an actual arrival
and the buffer past scheduled arrival has elapsed; before that the
numbers are still moving and nothing downstream may run.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from autoclaim.domain.records import Train
from autoclaim.utils.dates import as_utc, whole_minutes_between

DEFAULT_COMPLETION_BUFFER = timedelta(minutes=60)


class JourneyStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class JourneyEvaluation:
    status: JourneyStatus
    delay_minutes: Optional[int] = None
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status is JourneyStatus.COMPLETED


def arrival_delay_minutes(scheduled_arrival: datetime, actual_arrival: datetime) -> int:
    """Whole minutes late, rounded down; early arrivals count as 0."""
    return max(0, whole_minutes_between(scheduled_arrival, actual_arrival))


def evaluate(
    train: Train,
    now: datetime,
    buffer: timedelta = DEFAULT_COMPLETION_BUFFER,
) -> JourneyEvaluation:
    now = as_utc(now)
    if now < as_utc(train.scheduled_departure):
        return JourneyEvaluation(JourneyStatus.SCHEDULED)

    if train.actual_arrival is None or now < as_utc(train.scheduled_arrival) + buffer:
        return JourneyEvaluation(JourneyStatus.IN_PROGRESS)

    return JourneyEvaluation(
        JourneyStatus.COMPLETED,
        delay_minutes=arrival_delay_minutes(train.scheduled_arrival, train.actual_arrival),
        completed_at=as_utc(train.actual_arrival),
    )
