"""
Regex patterns for booking confirmation emails.

Each field has a primary pattern and, where confirmation templates vary,
a fallback tried only when the primary misses.
"""

import re

_MONTHS = "January|February|March|April|May|June|July|August|September|October|November|December"
_NAME_END = r"(?=[ \t]*(?:$|\n|\b(?:coach|seat|class|train|date|departs|arrives)\b))"

# 6 alphanumerics after "booking reference", "collection reference" or "reference"
PNR_PATTERN = re.compile(
    r"(?:booking[ \t]*reference|collection[ \t]*reference|reference)[ \t]*:?[ \t]*([A-Z0-9]{6})\b",
    re.IGNORECASE,
)

# IV + 9 digits, or 15 + 9 digits
TCN_PATTERN = re.compile(r"\b(IV\d{9}|15\d{9})\b", re.IGNORECASE)

TRAIN_NUMBER_PATTERN = re.compile(r"(?:eurostar|train|service)[:\s#]*(\d{4})\b", re.IGNORECASE)
# bare 4 digits followed on the same line by "from"/"departs"
TRAIN_NUMBER_ALT_PATTERN = re.compile(r"\b(\d{4})\b(?=[ \t]*(?:from|departs|departing))", re.IGNORECASE)

DATE_DMY_LONG = re.compile(rf"\b(\d{{1,2}})(?:st|nd|rd|th)?\s+({_MONTHS})\s+(\d{{4}})\b", re.IGNORECASE)
DATE_MDY_LONG = re.compile(rf"\b({_MONTHS})\s+(\d{{1,2}})(?:st|nd|rd|th)?,?\s+(\d{{4}})\b", re.IGNORECASE)
DATE_ISO = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
DATE_DMY_SLASH = re.compile(r"\b(\d{1,2})/(\d{1,2})/(\d{4})\b")
DATE_DMY_DASH = re.compile(r"\b(\d{1,2})-(\d{1,2})-(\d{4})\b")

MONTHS = {
    name.lower(): index
    for index, name in enumerate(_MONTHS.split("|"), start=1)
}

COACH_PATTERN = re.compile(r"\bcoach[:\s]*(\d{1,2})\b", re.IGNORECASE)
SEAT_PATTERN = re.compile(r"\bseat[:\s]*(\d{1,3})\b", re.IGNORECASE)

# A name ends at end of line or at a whole-word field label (Coach, Seat, ...).
PASSENGER_PATTERN = re.compile(
    r"\b(?:passenger|name|traveller)[:\s]*"
    r"((?:(?:mr|mrs|ms|miss|dr|prof)\.?[ \t]+)?[a-z]+(?:[ \t]+[a-z]+)+?)"
    + _NAME_END,
    re.IGNORECASE,
)
PASSENGER_ALT_PATTERN = re.compile(
    r"\b((?:mr|mrs|ms|miss|dr|prof)\.?[ \t]+[a-z]+(?:[ \t]+[a-z]+)+?)" + _NAME_END,
    re.IGNORECASE,
)

DEPARTS_PATTERN = re.compile(r"departs?[:\s]*([A-Za-z\s\-/]+?)(?:[ \t]+\d{1,2}[:\d]*|[ \t]*$)", re.IGNORECASE | re.MULTILINE)
ARRIVES_PATTERN = re.compile(r"arrives?[:\s]*([A-Za-z\s\-/]+?)(?:[ \t]+\d{1,2}[:\d]*|[ \t]*$)", re.IGNORECASE | re.MULTILINE)

# Labelled values that are present but do not have the expected shape.
# Only consulted after the strict pattern misses, to tell INVALID_* from MISSING_*.
PNR_LABELLED = re.compile(r"(?:booking|collection)[ \t]*reference[ \t]*:?[ \t]*([A-Za-z0-9]+)", re.IGNORECASE)
TCN_LABELLED = re.compile(r"(?:ticket[ \t]*(?:control[ \t]*)?number|tcn)[ \t]*:?[ \t]*([A-Za-z0-9]+)", re.IGNORECASE)
TRAIN_NUMBER_LABELLED = re.compile(r"train[ \t]*(?:number|no\.?)[ \t]*:?[ \t#]*([A-Za-z0-9]+)", re.IGNORECASE)
