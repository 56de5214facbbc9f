from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class Currency(str, Enum):
    EUR = "EUR"
    GBP = "GBP"


class EligibilityReason(str, Enum):
    ELIGIBLE = "eligible"
    INSUFFICIENT_DELAY = "insufficient_delay"
    CLAIM_WINDOW_NOT_OPEN = "claim_window_not_open"
    DEADLINE_EXPIRED = "deadline_expired"
    BELOW_MINIMUM_PAYOUT = "below_minimum_payout"


MINIMUM_DELAY_MINUTES = 60
CLAIM_WINDOW_HOURS = 24
CLAIM_DEADLINE_MONTHS = 3
DEFAULT_EUR_TO_GBP_RATE = Decimal("0.85")

# minimum cash payout per currency
MINIMUM_PAYOUT: dict[Currency, Decimal] = {
    Currency.EUR: Decimal("4.00"),
    Currency.GBP: Decimal("4.00"),
}


@dataclass(frozen=True)
class CompensationTier:
    name: str
    min_delay_minutes: int               # inclusive
    max_delay_minutes: Optional[int]     # exclusive, None = unbounded
    cash_percentage: Decimal
    voucher_percentage: Decimal

    def covers(self, delay_minutes: int) -> bool:
        return self.min_delay_minutes <= delay_minutes and (
            self.max_delay_minutes is None or delay_minutes < self.max_delay_minutes
        )


@dataclass(frozen=True)
class CompensationResult:
    eligible: bool
    cash_amount: Decimal
    voucher_amount: Decimal
    tier: Optional[CompensationTier]
    currency: Currency
    ticket_price: Decimal
    delay_minutes: int


@dataclass(frozen=True)
class ClaimCandidate:
    """Inputs the eligibility checks need beyond the booking itself."""

    delay_minutes: int
    ticket_price: Decimal
    currency: Currency = Currency.EUR
    completed_at: Optional[datetime] = None


@dataclass(frozen=True)
class EligibilityStatus:
    eligible: bool
    reason: EligibilityReason
    failed_checks: tuple[EligibilityReason, ...]
    compensation: CompensationResult
    deadline: date
    days_until_deadline: int
    claim_window_open: bool
    claim_window_opens_at: datetime

    @property
    def only_waiting_for_window(self) -> bool:
        return self.failed_checks == (EligibilityReason.CLAIM_WINDOW_NOT_OPEN,)
