"""
Carrier portal form data.

Derived from a booking and its claim on every request; never stored.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from autoclaim.domain.records import Booking, Claim
from autoclaim.eligibility.calculator import format_compensation_amount
from autoclaim.eligibility.types import Currency
from autoclaim.parsing.stations import station_display_name
from autoclaim.utils.dates import utc_date

CLAIM_PORTAL_URL = "https://www.eurostar.com/uk-en/travel-info/service-information/delay-compensation"


@dataclass(frozen=True)
class ClaimFormData:
    pnr: str
    tcn: str
    first_name: str
    last_name: str
    email: str
    train_number: str
    journey_date: str            # DD/MM/YYYY
    origin: str
    destination: str
    delay_minutes: int
    eligible_cash_amount: Decimal
    eligible_voucher_amount: Decimal
    currency: Currency = Currency.EUR

    def to_dict(self) -> dict:
        return {**asdict(self), "currency": self.currency.value}


@dataclass(frozen=True)
class FormValidation:
    valid: bool
    missing_fields: tuple[str, ...]


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def parse_passenger_name(full_name: str) -> tuple[str, str]:
    """
    "john smith"           -> ("John", "Smith")
    "Mary Jane WATSON"     -> ("Mary", "Jane Watson")
    "Cher"                 -> ("Cher", "")
    """
    parts = (full_name or "").split()
    if not parts:
        return "", ""
    first, rest = parts[0], parts[1:]
    return _capitalize(first), " ".join(_capitalize(p) for p in rest)


def format_journey_date(d: date) -> str:
    d = utc_date(d)
    return f"{d.day:02d}/{d.month:02d}/{d.year:04d}"


def get_station_display_name(code_or_name: str) -> str:
    return station_display_name(code_or_name)


def build_claim_form_data(booking: Booking, claim: Claim, email: Optional[str]) -> ClaimFormData:
    first, last = parse_passenger_name(booking.passenger_name)
    return ClaimFormData(
        pnr=booking.pnr,
        tcn=booking.tcn,
        first_name=first,
        last_name=last,
        email=email or "",
        train_number=booking.train_number,
        journey_date=format_journey_date(booking.journey_date),
        origin=get_station_display_name(booking.origin),
        destination=get_station_display_name(booking.destination),
        delay_minutes=claim.delay_minutes,
        eligible_cash_amount=claim.eligible_cash_amount or Decimal("0.00"),
        eligible_voucher_amount=claim.eligible_voucher_amount or Decimal("0.00"),
        currency=claim.currency,
    )


_REQUIRED_TEXT = ("pnr", "tcn", "first_name", "email", "train_number", "journey_date", "origin", "destination")


def validate_form_data(form: ClaimFormData) -> FormValidation:
    """Lists every missing field, not just the first. last_name may be empty."""
    missing = [name for name in _REQUIRED_TEXT if not getattr(form, name)]
    if form.delay_minutes <= 0:
        missing.append("delay_minutes")
    return FormValidation(valid=not missing, missing_fields=tuple(missing))


def format_for_clipboard(form: ClaimFormData) -> str:
    lines = [
        "=== Eurostar Delay Compensation Claim ===",
        "",
        f"Booking Reference (PNR): {form.pnr}",
        f"Ticket Control Number: {form.tcn}",
        "",
        "--- Passenger Details ---",
        f"First Name: {form.first_name}",
        f"Last Name: {form.last_name}",
        f"Email: {form.email}",
        "",
        "--- Journey Details ---",
        f"Train Number: {form.train_number}",
        f"Journey Date: {form.journey_date}",
        f"From: {form.origin}",
        f"To: {form.destination}",
        "",
        "--- Delay Information ---",
        f"Delay: {form.delay_minutes} minutes",
        "",
        "--- Compensation Eligible ---",
        f"Cash: {format_compensation_amount(form.eligible_cash_amount, form.currency)}",
        f"Voucher: {format_compensation_amount(form.eligible_voucher_amount, form.currency)}",
        "",
        "Submit your claim at:",
        CLAIM_PORTAL_URL,
    ]
    return "\n".join(lines)
