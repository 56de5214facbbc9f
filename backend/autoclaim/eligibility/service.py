from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from autoclaim.domain.records import Booking
from autoclaim.utils.dates import as_utc

from .calculator import calculate_compensation
from .deadline import claim_deadline, claim_window_opens_at, days_until_deadline, is_deadline_expired
from .types import (
    DEFAULT_EUR_TO_GBP_RATE,
    MINIMUM_DELAY_MINUTES,
    ClaimCandidate,
    EligibilityReason,
    EligibilityStatus,
)

logger = logging.getLogger(__name__)


class EligibilityEvaluator:
    """
    Aggregates the claim rules into one verdict.

    Every check runs so failed_checks lists all violations; reason is the
    first one in this order:
      1. insufficient_delay     delay < 60 minutes
      2. claim_window_not_open  now < completion + 24h
      3. deadline_expired       today is past journey date + 3 months
      4. below_minimum_payout   cash amount under the currency minimum
                                (only when the delay itself qualifies)
    """

    def __init__(self, *, exchange_rate: Decimal = DEFAULT_EUR_TO_GBP_RATE):
        self.exchange_rate = exchange_rate

    def check(self, booking: Booking, candidate: ClaimCandidate, now: datetime) -> EligibilityStatus:
        now = as_utc(now)
        failed: list[EligibilityReason] = []

        delay_ok = candidate.delay_minutes >= MINIMUM_DELAY_MINUTES
        if not delay_ok:
            failed.append(EligibilityReason.INSUFFICIENT_DELAY)

        opens_at = claim_window_opens_at(booking.journey_date, candidate.completed_at)
        window_open = now >= opens_at
        if not window_open:
            failed.append(EligibilityReason.CLAIM_WINDOW_NOT_OPEN)

        if is_deadline_expired(booking.journey_date, now):
            failed.append(EligibilityReason.DEADLINE_EXPIRED)

        compensation = calculate_compensation(
            candidate.delay_minutes,
            candidate.ticket_price,
            currency=candidate.currency,
            ticket_currency=booking.ticket_currency,
            exchange_rate=self.exchange_rate,
        )
        if delay_ok and not compensation.eligible:
            failed.append(EligibilityReason.BELOW_MINIMUM_PAYOUT)

        status = EligibilityStatus(
            eligible=not failed,
            reason=failed[0] if failed else EligibilityReason.ELIGIBLE,
            failed_checks=tuple(failed),
            compensation=compensation,
            deadline=claim_deadline(booking.journey_date),
            days_until_deadline=days_until_deadline(booking.journey_date, now),
            claim_window_open=window_open,
            claim_window_opens_at=opens_at,
        )
        logger.debug("Booking %s eligibility: %s %s", booking.id, status.reason.value, [r.value for r in failed])
        return status

    def can_claim_now(self, booking: Booking, now: datetime, completed_at: Optional[datetime] = None) -> bool:
        """Timing only: window open and deadline not passed."""
        now = as_utc(now)
        return now >= claim_window_opens_at(booking.journey_date, completed_at) and not is_deadline_expired(
            booking.journey_date, now
        )


def format_time_until_deadline(days: int) -> str:
    if days < 0:
        return f"Expired {abs(days)} days ago"
    if days == 0:
        return "Expires today"
    if days == 1:
        return "Expires tomorrow"
    if days < 7:
        return f"{days} days remaining"

    weeks = days // 7
    if weeks < 4:
        return f"{weeks} week{'s' if weeks > 1 else ''} remaining"

    months = max(1, days // 30)
    return f"{months} month{'s' if months > 1 else ''} remaining"


def candidate_for_booking(
    booking: Booking,
    delay_minutes: int,
    *,
    default_ticket_price: Decimal,
    completed_at: Optional[datetime] = None,
) -> ClaimCandidate:
    """Claim inputs for a booking; the configured default stands in for an unknown fare."""
    price = booking.ticket_price if booking.ticket_price is not None else default_ticket_price
    return ClaimCandidate(
        delay_minutes=delay_minutes,
        ticket_price=price,
        currency=booking.ticket_currency,
        completed_at=completed_at,
    )
