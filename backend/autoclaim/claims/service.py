from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from autoclaim.core.errors import ClaimDeadlinePassedError, ClaimNotFoundError, InvalidStatusTransitionError
from autoclaim.domain.records import Booking, Claim, NewClaim
from autoclaim.eligibility.deadline import claim_deadline, days_until_deadline, is_deadline_expired
from autoclaim.eligibility.types import EligibilityStatus
from autoclaim.stores.interfaces import ClaimRepository
from autoclaim.utils.dates import as_utc

from .events import (
    ClaimCreated,
    ClaimDeadlineApproaching,
    ClaimEventBus,
    ClaimStatusChanged,
    ClaimSubmitted,
)
from .form_data import CLAIM_PORTAL_URL, ClaimFormData, FormValidation, build_claim_form_data, validate_form_data
from .lifecycle import OPEN_STATUSES, ClaimStatus, ensure_transition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimWithFormData:
    claim: Claim
    booking: Booking
    form_data: ClaimFormData
    validation: FormValidation
    claim_portal_url: str = CLAIM_PORTAL_URL


@dataclass(frozen=True)
class ClaimPage:
    items: list[ClaimWithFormData]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class ClaimService:
    """
    Owns every claim write: creation and status transitions go through here
    so that each one is checked against the lifecycle table and emits exactly
    one event.
    """

    def __init__(self, repository: ClaimRepository, events: ClaimEventBus, *, deadline_warning_days: int = 2):
        self.repository = repository
        self.events = events
        self.deadline_warning_days = deadline_warning_days

    # Creation

    def open_claim(self, booking: Booking, eligibility: EligibilityStatus, now: datetime) -> Optional[Claim]:
        """
        Create the booking's claim if it qualifies.

        Fully eligible bookings get an `eligible` claim; bookings whose only
        failed check is the 24h window get a `pending` one that a later sweep
        promotes. Anything else gets no claim. Calling this again for the same
        booking returns the existing claim and emits nothing.
        """
        if eligibility.eligible:
            status = ClaimStatus.ELIGIBLE
        elif eligibility.only_waiting_for_window:
            status = ClaimStatus.PENDING
        else:
            return None

        comp = eligibility.compensation
        claim, created = self.repository.upsert_claim(
            NewClaim(
                booking_id=booking.id,
                delay_minutes=comp.delay_minutes,
                eligible_cash_amount=comp.cash_amount,
                eligible_voucher_amount=comp.voucher_amount,
                currency=comp.currency,
                status=status,
            )
        )
        if created:
            logger.info("Opened %s claim %s for booking %s", status.value, claim.id, booking.id)
            self.events.emit(
                ClaimCreated(
                    claim_id=claim.id,
                    user_id=booking.user_id,
                    booking_id=booking.id,
                    timestamp=as_utc(now),
                    status=claim.status,
                    eligible_cash_amount=claim.eligible_cash_amount,
                    eligible_voucher_amount=claim.eligible_voucher_amount,
                )
            )
        return claim

    # Transitions

    def _load(self, claim_id: UUID, user_id: Optional[UUID] = None) -> tuple[Claim, Booking]:
        claim = self.repository.get_claim(claim_id)
        booking = self.repository.get_booking(claim.booking_id) if claim is not None else None
        if claim is None or booking is None or (user_id is not None and booking.user_id != user_id):
            raise ClaimNotFoundError(str(claim_id))
        return claim, booking

    def _transition(self, claim: Claim, target: ClaimStatus, now: datetime) -> Claim:
        ensure_transition(claim.status, target)
        updated = self.repository.transition_claim_status(claim.id, claim.status, target, as_utc(now))
        if updated is None:
            # another writer moved it first
            current = self.repository.get_claim(claim.id)
            raise InvalidStatusTransitionError(
                current.status.value if current is not None else claim.status.value,
                target.value,
            )
        return updated

    def mark_submitted(self, claim_id: UUID, now: datetime, *, user_id: Optional[UUID] = None) -> Claim:
        claim, booking = self._load(claim_id, user_id)
        if claim.status in OPEN_STATUSES and is_deadline_expired(booking.journey_date, now):
            # the deadlines job has not expired it yet
            raise ClaimDeadlinePassedError(str(claim.id), claim_deadline(booking.journey_date).isoformat())
        updated = self._transition(claim, ClaimStatus.SUBMITTED, now)
        self.events.emit(
            ClaimSubmitted(
                claim_id=updated.id,
                user_id=booking.user_id,
                timestamp=as_utc(now),
                submitted_at=updated.submitted_at or as_utc(now),
            )
        )
        logger.info("Claim %s marked submitted", updated.id)
        return updated

    def update_status(
        self,
        claim_id: UUID,
        target: ClaimStatus,
        now: datetime,
        *,
        user_id: Optional[UUID] = None,
    ) -> Claim:
        if target is ClaimStatus.SUBMITTED:
            return self.mark_submitted(claim_id, now, user_id=user_id)

        claim, booking = self._load(claim_id, user_id)
        previous = claim.status
        updated = self._transition(claim, target, now)
        self.events.emit(
            ClaimStatusChanged(
                claim_id=updated.id,
                user_id=booking.user_id,
                timestamp=as_utc(now),
                previous_status=previous,
                new_status=updated.status,
            )
        )
        logger.info("Claim %s moved %s -> %s", updated.id, previous.value, updated.status.value)
        return updated

    # Deadline housekeeping

    def expire_overdue(self, now: datetime) -> int:
        expired = 0
        for claim in self.repository.find_claims_by_status(OPEN_STATUSES):
            booking = self.repository.get_booking(claim.booking_id)
            if booking is None or not is_deadline_expired(booking.journey_date, now):
                continue
            try:
                self.update_status(claim.id, ClaimStatus.EXPIRED, now)
            except InvalidStatusTransitionError:
                logger.info("Claim %s changed status before it could expire", claim.id)
                continue
            expired += 1
        return expired

    def flag_deadline_approaching(self, now: datetime) -> int:
        flagged = 0
        for claim in self.repository.find_claims_by_status(OPEN_STATUSES):
            booking = self.repository.get_booking(claim.booking_id)
            if booking is None:
                continue
            days = days_until_deadline(booking.journey_date, now)
            if not 0 <= days <= self.deadline_warning_days:
                continue
            self.events.emit(
                ClaimDeadlineApproaching(
                    claim_id=claim.id,
                    user_id=booking.user_id,
                    timestamp=as_utc(now),
                    deadline=claim_deadline(booking.journey_date),
                    days_remaining=days,
                )
            )
            flagged += 1
        return flagged

    # Reads

    def _with_form_data(self, claim: Claim, booking: Booking) -> ClaimWithFormData:
        form = build_claim_form_data(booking, claim, self.repository.get_user_email(booking.user_id))
        return ClaimWithFormData(claim=claim, booking=booking, form_data=form, validation=validate_form_data(form))

    def get_claim_with_form_data(self, claim_id: UUID, *, user_id: Optional[UUID] = None) -> ClaimWithFormData:
        claim, booking = self._load(claim_id, user_id)
        return self._with_form_data(claim, booking)

    def list_user_claims(
        self,
        user_id: UUID,
        *,
        status: Optional[ClaimStatus] = None,
        page: int = 1,
        limit: int = 20,
    ) -> ClaimPage:
        claims, total = self.repository.list_claims(user_id, status=status, offset=(page - 1) * limit, limit=limit)
        items = []
        for claim in claims:
            booking = self.repository.get_booking(claim.booking_id)
            if booking is None:
                logger.warning("Claim %s has no booking", claim.id)
                continue
            items.append(self._with_form_data(claim, booking))
        return ClaimPage(items=items, page=page, limit=limit, total=total)
