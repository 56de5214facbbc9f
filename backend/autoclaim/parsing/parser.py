"""
Booking confirmation extractor.

extract() never raises for bad input: every failure comes back as a
ParseError naming the first missing or malformed field.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Mapping, Optional

from autoclaim.utils.dates import utc_date, utcnow

from . import patterns
from .fields import DATE_FORMATS, FieldExtractor, default_extractors
from .preprocess import preprocess_email
from .types import ParsedBooking, ParseError, ParseErrorCode, ParseResult
from .validator import first_invalid_field

logger = logging.getLogger(__name__)

# (field, missing code, invalid code, labelled pattern used to tell them apart)
REQUIRED_FIELDS: tuple[tuple[str, ParseErrorCode, Optional[ParseErrorCode], Optional[re.Pattern]], ...] = (
    ("pnr", ParseErrorCode.MISSING_PNR, ParseErrorCode.INVALID_PNR, patterns.PNR_LABELLED),
    ("tcn", ParseErrorCode.MISSING_TCN, ParseErrorCode.INVALID_TCN, patterns.TCN_LABELLED),
    ("train_number", ParseErrorCode.MISSING_TRAIN_NUMBER, ParseErrorCode.INVALID_TRAIN_NUMBER, patterns.TRAIN_NUMBER_LABELLED),
    ("journey_date", ParseErrorCode.MISSING_DATE, ParseErrorCode.INVALID_DATE, None),
    ("passenger_name", ParseErrorCode.MISSING_PASSENGER, None, None),
    ("origin", ParseErrorCode.MISSING_ORIGIN, None, None),
    ("destination", ParseErrorCode.MISSING_DESTINATION, None, None),
)

_LABELS = {
    "pnr": "booking reference",
    "tcn": "ticket control number",
    "train_number": "train number",
    "journey_date": "journey date",
    "passenger_name": "passenger name",
    "origin": "departure station",
    "destination": "arrival station",
}


def _first_date_like(text: str) -> Optional[str]:
    for pattern, _ in DATE_FORMATS:
        m = pattern.search(text)
        if m:
            return m.group(0)
    return None


def _absent(field: str, text: str, missing: ParseErrorCode, invalid: Optional[ParseErrorCode], labelled) -> ParseError:
    label = _LABELS[field]
    raw: Optional[str] = None
    if field == "journey_date":
        raw = _first_date_like(text)
    elif labelled is not None:
        m = labelled.search(text)
        raw = m.group(1) if m else None

    if raw is not None and invalid is not None:
        return ParseError(invalid, f"Found a {label} but it is not valid: {raw!r}", field=field, raw_value=raw)
    return ParseError(missing, f"Could not find the {label} in the email", field=field)


def extract(
    text: Optional[str],
    now: Optional[datetime] = None,
    extractors: Optional[Mapping[str, FieldExtractor]] = None,
) -> ParseResult:
    if text is None or not text.strip():
        return ParseError(ParseErrorCode.EMPTY_INPUT, "Email body is empty")

    clean = preprocess_email(text)
    extractors = extractors or default_extractors()

    values = {name: ex.extract(clean) for name, ex in extractors.items()}

    for field, missing, invalid, labelled in REQUIRED_FIELDS:
        if not values.get(field):
            logger.debug("Extraction stopped at %s", field)
            return _absent(field, clean, missing, invalid, labelled)

    today = utc_date(now or utcnow())
    failure = first_invalid_field(values, today=today)
    if failure is not None:
        field, message = failure
        raw = values.get(field)
        return ParseError(
            ParseErrorCode.VALIDATION_FAILED,
            f"Invalid {_LABELS.get(field, field)}: {message}",
            field=field,
            raw_value=None if raw is None else str(raw),
        )

    return ParsedBooking(
        pnr=values["pnr"],
        tcn=values["tcn"],
        train_number=values["train_number"],
        journey_date=values["journey_date"],
        passenger_name=values["passenger_name"],
        origin=values["origin"],
        destination=values["destination"],
        coach=values.get("coach"),
        seat=values.get("seat"),
    )
