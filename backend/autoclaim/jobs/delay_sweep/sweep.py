"""
Delay sweep: match -> evaluate -> record delay -> eligibility -> claim.

Safe to re-run at any time. A booking leaves the awaiting set once its
final delay is recorded, and claim creation is an insert-if-absent keyed
on the booking, so a repeated or concurrent sweep never opens a second claim.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, Protocol

from autoclaim.claims.lifecycle import ClaimStatus
from autoclaim.claims.service import ClaimService
from autoclaim.core.errors import InvalidStatusTransitionError
from autoclaim.delay.checker import DEFAULT_COMPLETION_BUFFER, evaluate
from autoclaim.domain.records import Booking
from autoclaim.eligibility.service import EligibilityEvaluator, candidate_for_booking
from autoclaim.matching.matcher import Ambiguous, JourneyMatcher, Matched
from autoclaim.stores.interfaces import ClaimRepository
from autoclaim.utils.dates import utc_date

logger = logging.getLogger(__name__)


class Transaction(Protocol):
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class _NoTransaction:
    def commit(self) -> None:
        pass

    def rollback(self) -> None:
        pass


@dataclass(frozen=True)
class SweepSettings:
    lookback_days: int = 1
    completion_buffer: timedelta = DEFAULT_COMPLETION_BUFFER
    default_ticket_price: Decimal = Decimal("100")


class DelaySweep:
    def __init__(
        self,
        repository: ClaimRepository,
        claims: ClaimService,
        evaluator: EligibilityEvaluator,
        *,
        settings: SweepSettings = SweepSettings(),
        transaction: Optional[Transaction] = None,
    ):
        self.repository = repository
        self.claims = claims
        self.evaluator = evaluator
        self.matcher = JourneyMatcher(repository)
        self.settings = settings
        self.tx = transaction or _NoTransaction()

    def run(self, now: datetime) -> dict:
        counts: Counter = Counter()
        today = utc_date(now)
        since = today - timedelta(days=self.settings.lookback_days)

        bookings = self.repository.find_bookings_awaiting_evaluation(since, today)
        logger.info("Delay sweep: %d bookings awaiting evaluation (%s..%s)", len(bookings), since, today)

        for booking in bookings:
            try:
                counts[self.evaluate_booking(booking, now)] += 1
                self.tx.commit()
            except Exception:
                self.tx.rollback()
                counts["failed"] += 1
                logger.exception("Delay sweep failed for booking %s", booking.id)

        promoted = self.promote_pending(now)

        result = dict(counts)
        result.update({"processed": len(bookings), "failed": counts["failed"], "promoted": promoted})
        return result

    def evaluate_booking(self, booking: Booking, now: datetime) -> str:
        """Returns an outcome label for the run summary."""
        match = self.matcher.match(booking)
        if isinstance(match, Ambiguous):
            return "ambiguous"
        if not isinstance(match, Matched):
            return "not_found"

        journey = evaluate(match.train, now, self.settings.completion_buffer)
        if not journey.is_completed:
            return journey.status.value

        self.repository.record_journey_outcome(booking.id, match.train.id, journey.delay_minutes)

        candidate = candidate_for_booking(
            booking,
            journey.delay_minutes,
            default_ticket_price=self.settings.default_ticket_price,
            completed_at=journey.completed_at,
        )
        eligibility = self.evaluator.check(booking, candidate, now)
        claim = self.claims.open_claim(booking, eligibility, now)
        if claim is None:
            logger.info("Booking %s not claimable: %s", booking.id, eligibility.reason.value)
            return "not_eligible"
        return f"claim_{claim.status.value}"

    def promote_pending(self, now: datetime) -> int:
        """Move pending claims to eligible once their 24h window has opened."""
        promoted = 0
        for claim in self.repository.find_claims_by_status([ClaimStatus.PENDING]):
            booking = self.repository.get_booking(claim.booking_id)
            if booking is None:
                continue
            train = self.repository.get_train(booking.train_id) if booking.train_id else None
            candidate = candidate_for_booking(
                booking,
                claim.delay_minutes,
                default_ticket_price=self.settings.default_ticket_price,
                completed_at=train.actual_arrival if train else None,
            )
            if not self.evaluator.check(booking, candidate, now).eligible:
                continue
            try:
                self.claims.update_status(claim.id, ClaimStatus.ELIGIBLE, now)
                self.tx.commit()
            except InvalidStatusTransitionError:
                self.tx.rollback()
                logger.info("Claim %s changed status before promotion", claim.id)
                continue
            promoted += 1
        return promoted
