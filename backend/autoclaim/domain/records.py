"""Domain records handed between pipeline stages and the repository.

These are plain frozen values; the SQLAlchemy tables live in autoclaim.models.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from autoclaim.claims.lifecycle import ClaimStatus
from autoclaim.eligibility.types import Currency


@dataclass(frozen=True)
class Train:
    id: UUID
    trip_id: str
    train_number: str
    service_date: date
    scheduled_departure: datetime
    scheduled_arrival: datetime
    actual_arrival: Optional[datetime] = None
    delay_minutes: Optional[int] = None


@dataclass(frozen=True)
class Booking:
    id: UUID
    user_id: UUID
    pnr: str
    tcn: str
    train_number: str
    journey_date: date
    passenger_name: str
    origin: str
    destination: str
    coach: Optional[str] = None
    seat: Optional[str] = None
    train_id: Optional[UUID] = None
    final_delay_minutes: Optional[int] = None
    ticket_price: Optional[Decimal] = None
    ticket_currency: Currency = Currency.EUR
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Claim:
    id: UUID
    booking_id: UUID
    delay_minutes: int
    eligible_cash_amount: Optional[Decimal]
    eligible_voucher_amount: Optional[Decimal]
    status: ClaimStatus
    currency: Currency = Currency.EUR
    submitted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewClaim:
    """Claim values computed by the pipeline before the row exists."""

    booking_id: UUID
    delay_minutes: int
    eligible_cash_amount: Decimal
    eligible_voucher_amount: Decimal
    currency: Currency
    status: ClaimStatus
