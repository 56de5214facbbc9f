from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Union

from autoclaim.domain.records import Booking, Train
from autoclaim.stores.interfaces import ClaimRepository
from autoclaim.utils.dates import is_same_day

from .normalizer import Region, build_trip_id, normalize_train_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Matched:
    train: Train


@dataclass(frozen=True)
class NotFound:
    reason: str = "not_found"


@dataclass(frozen=True)
class Ambiguous:
    candidates: tuple[Train, ...] = field(default_factory=tuple)


MatchResult = Union[Matched, NotFound, Ambiguous]


class JourneyMatcher:
    """
    Link a booking to the train run it was made for.

    Lookup by canonical trip id first. Trip ids carry no year, so a hit is
    only accepted when its service date is the booking's journey day.
    Otherwise fall back to train number + service date.
    """

    def __init__(self, repository: ClaimRepository, *, region: Region = Region.UK):
        self.repository = repository
        self.region = region

    def match(self, booking: Booking) -> MatchResult:
        try:
            number = normalize_train_number(booking.train_number, self.region)
        except ValueError:
            logger.warning("Booking %s has unusable train number %r", booking.id, booking.train_number)
            return NotFound(reason="bad_train_number")

        trip_id = build_trip_id(number, booking.journey_date, self.region)
        train = self.repository.find_train_by_trip_id(trip_id)
        if train is not None and is_same_day(train.service_date, booking.journey_date):
            return Matched(train)

        candidates = self.repository.find_trains_by_number_and_date(number, booking.journey_date)
        if not candidates:
            return NotFound()
        if len(candidates) > 1:
            logger.warning("Booking %s matches %d trains for %s", booking.id, len(candidates), trip_id)
            return Ambiguous(tuple(candidates))
        return Matched(candidates[0])
