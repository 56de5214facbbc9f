"""
Feed payload -> FeedTrip records.

Expected shape:
  {"trips": [{"trip_id"?, "train_number", "service_date",
              "scheduled_departure", "scheduled_arrival", "actual_arrival"?}]}

Times are ISO-8601; naive values are taken as UTC. Records that cannot be
read are skipped and counted, never fatal for the batch.
"""

import logging
from datetime import date, datetime
from typing import Any, Optional

from dateutil.parser import isoparse

from autoclaim.delay.checker import arrival_delay_minutes
from autoclaim.matching.normalizer import Region, build_trip_id, normalize_train_number
from autoclaim.utils.dates import as_utc

from .types import FeedTrip

logger = logging.getLogger(__name__)


def _ts(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    return as_utc(isoparse(str(value)))


def parse_trip(raw: dict, *, region: Region = Region.UK) -> FeedTrip:
    number = normalize_train_number(str(raw["train_number"]), region)
    service_date: date = isoparse(str(raw["service_date"])).date()

    scheduled_departure = _ts(raw["scheduled_departure"])
    scheduled_arrival = _ts(raw["scheduled_arrival"])
    if scheduled_departure is None or scheduled_arrival is None:
        raise ValueError("scheduled times are required")
    actual_arrival = _ts(raw.get("actual_arrival"))

    trip_id = build_trip_id(number, service_date, region)
    if raw.get("trip_id") and raw["trip_id"] != trip_id:
        logger.debug("Feed trip_id %r rewritten to %r", raw["trip_id"], trip_id)

    return FeedTrip(
        trip_id=trip_id,
        train_number=number,
        service_date=service_date,
        scheduled_departure=scheduled_departure,
        scheduled_arrival=scheduled_arrival,
        actual_arrival=actual_arrival,
        delay_minutes=arrival_delay_minutes(scheduled_arrival, actual_arrival) if actual_arrival else None,
    )


def parse_feed(payload: dict, *, region: Region = Region.UK) -> tuple[list[FeedTrip], int]:
    """Returns (trips, skipped)."""
    trips: list[FeedTrip] = []
    skipped = 0

    for raw in payload.get("trips") or []:
        try:
            trips.append(parse_trip(raw, region=region))
        except (KeyError, TypeError, ValueError) as e:
            skipped += 1
            logger.warning("Skipping malformed feed record %r: %s", raw, e)

    return trips, skipped
