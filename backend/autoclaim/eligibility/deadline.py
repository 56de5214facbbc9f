from __future__ import annotations

from datetime import date, datetime

from autoclaim.utils.dates import add_months, as_utc, hours_after, utc_date, utc_midnight

from .types import CLAIM_DEADLINE_MONTHS, CLAIM_WINDOW_HOURS


def claim_deadline(journey_date: date) -> date:
    """Last day a claim may be filed: journey date + 3 calendar months."""
    return add_months(utc_date(journey_date), CLAIM_DEADLINE_MONTHS)


def days_until_deadline(journey_date: date, now: datetime) -> int:
    """Whole calendar days from today (UTC) to the deadline; negative once it has passed."""
    return (claim_deadline(journey_date) - utc_date(now)).days


def is_deadline_expired(journey_date: date, now: datetime) -> bool:
    return utc_date(now) > claim_deadline(journey_date)


def claim_window_opens_at(journey_date: date, completed_at: datetime | None = None) -> datetime:
    # no completion time recorded: count from the start of the journey day
    start = completed_at if completed_at is not None else utc_midnight(utc_date(journey_date))
    return hours_after(start, CLAIM_WINDOW_HOURS)


def is_claim_window_open(journey_date: date, now: datetime, completed_at: datetime | None = None) -> bool:
    return as_utc(now) >= claim_window_opens_at(journey_date, completed_at)
