"""
Train number normalisation.

Regional booking systems disagree on how a train number is written: UK
systems encode the zero in 9007 as the letter O ("9O07"), EU systems use
the digit. Every lookup goes through the canonical 4-digit form.
"""

from datetime import date
from enum import Enum

from autoclaim.utils.dates import utc_date


class Region(str, Enum):
    UK = "UK"
    EU = "EU"


# letter -> digit substitutions applied per region
SUBSTITUTIONS: dict[Region, dict[str, str]] = {
    Region.UK: {"O": "0"},
    Region.EU: {},
}


def normalize_train_number(raw: str, region: Region = Region.UK) -> str:
    value = (raw or "").strip().upper()
    for letter, digit in SUBSTITUTIONS[region].items():
        value = value.replace(letter, digit)
    if not value.isdigit() or len(value) > 4:
        raise ValueError(f"Not a train number: {raw!r}")
    return value.zfill(4)


def format_service_date(d: date) -> str:
    d = utc_date(d)
    return f"{d.month:02d}{d.day:02d}"


def build_trip_id(train_number: str, service_date: date, region: Region = Region.UK) -> str:
    """'9O07' on 5 Jan -> '9007-0105'"""
    return f"{normalize_train_number(train_number, region)}-{format_service_date(service_date)}"


def parse_trip_id(trip_id: str) -> tuple[str, int, int]:
    number, sep, mmdd = (trip_id or "").strip().partition("-")
    if not sep or len(mmdd) != 4 or not mmdd.isdigit():
        raise ValueError(f"Bad trip id: {trip_id!r}")
    month, day = int(mmdd[:2]), int(mmdd[2:])
    if not (1 <= month <= 12 and 1 <= day <= 31):
        raise ValueError(f"Bad trip id: {trip_id!r}")
    return normalize_train_number(number), month, day
