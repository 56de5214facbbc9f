"""Repository interface for the claim pipeline.

Pipeline stages only see this interface; SQL lives in the implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID

from autoclaim.claims.lifecycle import ClaimStatus
from autoclaim.domain.records import Booking, Claim, NewClaim, Train
from autoclaim.eligibility.types import Currency
from autoclaim.parsing.types import ParsedBooking


class ClaimRepository(ABC):
    # Trains

    @abstractmethod
    def find_train_by_trip_id(self, trip_id: str) -> Optional[Train]:
        """Return the most recent train run stored under a canonical trip id."""
        ...

    @abstractmethod
    def get_train(self, train_id: UUID) -> Optional[Train]:
        ...

    @abstractmethod
    def find_trains_by_number_and_date(self, train_number: str, service_date: date) -> list[Train]:
        ...

    # Bookings

    @abstractmethod
    def add_booking(
        self,
        user_id: UUID,
        parsed: ParsedBooking,
        *,
        ticket_price: Optional[Decimal] = None,
        ticket_currency: Currency = Currency.EUR,
    ) -> Booking:
        ...

    @abstractmethod
    def get_booking(self, booking_id: UUID) -> Optional[Booking]:
        ...

    @abstractmethod
    def list_bookings(self, user_id: UUID, *, offset: int, limit: int) -> tuple[list[Booking], int]:
        """Return one page of the user's bookings (newest journey first) and the total count."""
        ...

    @abstractmethod
    def find_bookings_awaiting_evaluation(self, since: date, until: date) -> list[Booking]:
        """Bookings with no final delay yet whose journey date is in [since, until]."""
        ...

    @abstractmethod
    def record_journey_outcome(self, booking_id: UUID, train_id: UUID, final_delay_minutes: int) -> None:
        ...

    # Claims

    @abstractmethod
    def upsert_claim(self, claim: NewClaim) -> tuple[Claim, bool]:
        """
        Insert the claim unless the booking already has one.
        Returns the stored claim and whether this call created it.
        """
        ...

    @abstractmethod
    def transition_claim_status(
        self,
        claim_id: UUID,
        expected: ClaimStatus,
        target: ClaimStatus,
        at: datetime,
    ) -> Optional[Claim]:
        """
        Move the claim to target only if it is still in expected.
        Returns the updated claim, or None when the status had already changed.
        """
        ...

    @abstractmethod
    def get_claim(self, claim_id: UUID) -> Optional[Claim]:
        ...

    @abstractmethod
    def get_claim_for_booking(self, booking_id: UUID) -> Optional[Claim]:
        ...

    @abstractmethod
    def list_claims(
        self,
        user_id: UUID,
        *,
        status: Optional[ClaimStatus] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Claim], int]:
        ...

    @abstractmethod
    def find_claims_by_status(self, statuses: Iterable[ClaimStatus]) -> list[Claim]:
        ...

    # Users

    @abstractmethod
    def get_user_email(self, user_id: UUID) -> Optional[str]:
        ...
