"""
Field extraction strategies.

Each booking field is pulled out of the cleaned email text by a
FieldExtractor. A field can be backed by several pattern families; adding a
new confirmation template means registering another extractor, the parser
itself does not change.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from datetime import date
from typing import Callable, Optional, Sequence

from . import patterns
from .stations import normalize_station

logger = logging.getLogger(__name__)


class FieldExtractor(ABC):
    name: str

    @abstractmethod
    def extract(self, text: str) -> Optional[object]:
        """Return the field value, or None when this strategy finds nothing."""
        raise NotImplementedError


class RegexFieldExtractor(FieldExtractor):
    """Ordered regex chain: the first pattern that matches wins."""

    def __init__(
        self,
        name: str,
        chain: Sequence[re.Pattern],
        *,
        transform: Callable[[str], str] = str.strip,
    ):
        self.name = name
        self.chain = tuple(chain)
        self.transform = transform

    def extract(self, text: str) -> Optional[str]:
        for pattern in self.chain:
            m = pattern.search(text)
            if m and m.group(1):
                value = self.transform(m.group(1))
                if value:
                    return value
        return None


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        logger.debug("Discarding impossible date %04d-%02d-%02d", year, month, day)
        return None


def _dmy_long(m: re.Match) -> Optional[date]:
    return _safe_date(int(m.group(3)), patterns.MONTHS[m.group(2).lower()], int(m.group(1)))


def _mdy_long(m: re.Match) -> Optional[date]:
    return _safe_date(int(m.group(3)), patterns.MONTHS[m.group(1).lower()], int(m.group(2)))


def _iso(m: re.Match) -> Optional[date]:
    return _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def _dmy_numeric(m: re.Match) -> Optional[date]:
    return _safe_date(int(m.group(3)), int(m.group(2)), int(m.group(1)))


# Fixed priority: long day-month-year, long month-day-year, ISO, DD/MM/YYYY, DD-MM-YYYY
DATE_FORMATS: tuple[tuple[re.Pattern, Callable[[re.Match], Optional[date]]], ...] = (
    (patterns.DATE_DMY_LONG, _dmy_long),
    (patterns.DATE_MDY_LONG, _mdy_long),
    (patterns.DATE_ISO, _iso),
    (patterns.DATE_DMY_SLASH, _dmy_numeric),
    (patterns.DATE_DMY_DASH, _dmy_numeric),
)


class DateFieldExtractor(FieldExtractor):
    def __init__(self, name: str = "journey_date", formats=DATE_FORMATS):
        self.name = name
        self.formats = formats

    def extract(self, text: str) -> Optional[date]:
        for pattern, build in self.formats:
            m = pattern.search(text)
            if not m:
                continue
            d = build(m)
            if d is not None:
                return d
        return None


class StationFieldExtractor(RegexFieldExtractor):
    """Departs/Arrives lines, mapped through the station alias table."""

    def __init__(self, name: str, pattern: re.Pattern):
        super().__init__(name, [pattern], transform=lambda raw: normalize_station(raw) if raw.strip() else "")


def default_extractors() -> dict[str, FieldExtractor]:
    return {
        "pnr": RegexFieldExtractor("pnr", [patterns.PNR_PATTERN], transform=lambda v: v.strip().upper()),
        "tcn": RegexFieldExtractor("tcn", [patterns.TCN_PATTERN], transform=lambda v: v.strip().upper()),
        "train_number": RegexFieldExtractor(
            "train_number", [patterns.TRAIN_NUMBER_PATTERN, patterns.TRAIN_NUMBER_ALT_PATTERN]
        ),
        "journey_date": DateFieldExtractor(),
        "passenger_name": RegexFieldExtractor(
            "passenger_name", [patterns.PASSENGER_PATTERN, patterns.PASSENGER_ALT_PATTERN]
        ),
        "origin": StationFieldExtractor("origin", patterns.DEPARTS_PATTERN),
        "destination": StationFieldExtractor("destination", patterns.ARRIVES_PATTERN),
        "coach": RegexFieldExtractor("coach", [patterns.COACH_PATTERN]),
        "seat": RegexFieldExtractor("seat", [patterns.SEAT_PATTERN]),
    }
