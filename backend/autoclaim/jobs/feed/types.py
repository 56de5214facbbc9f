from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class FeedTrip:
    trip_id: str                     # canonical "{train_number}-{MMDD}"
    train_number: str                # canonical 4 digits
    service_date: date

    scheduled_departure: datetime    # UTC
    scheduled_arrival: datetime      # UTC
    actual_arrival: Optional[datetime]

    delay_minutes: Optional[int]     # None until actual arrival is reported
