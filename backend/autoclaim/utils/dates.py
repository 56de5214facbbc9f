"""
UTC-only calendar arithmetic.

Every date-sensitive rule in the pipeline (trip ids, claim window, deadline,
days remaining) goes through these helpers so that nothing depends on the
host timezone.
"""

from datetime import date, datetime, time, timedelta

import pytz
from dateutil.relativedelta import relativedelta

UTC = pytz.utc


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """
    Naive datetimes are taken to already be UTC; aware ones are converted.
    """
    if value.tzinfo is None:
        return UTC.localize(value)
    return value.astimezone(UTC)


def utc_midnight(d: date) -> datetime:
    return UTC.localize(datetime.combine(d, time.min))


def utc_date(value: datetime | date) -> date:
    if isinstance(value, datetime):
        return as_utc(value).date()
    return value


def is_same_day(a: datetime | date, b: datetime | date) -> bool:
    """Calendar-day equality in UTC, never a timestamp comparison."""
    return utc_date(a) == utc_date(b)


def add_months(d: date, months: int) -> date:
    """
    Calendar-month addition, clamped at month end (31 Jan + 1 month = 28/29 Feb).
    """
    return d + relativedelta(months=months)


def whole_minutes_between(start: datetime, end: datetime) -> int:
    """Floor of the elapsed minutes; negative when end precedes start."""
    seconds = (as_utc(end) - as_utc(start)).total_seconds()
    return int(seconds // 60)


def hours_after(value: datetime, hours: int) -> datetime:
    return as_utc(value) + timedelta(hours=hours)
