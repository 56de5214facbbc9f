"""
Shared fixtures: an in-memory repository, a capturing notifier and
factories for trains and bookings.
"""

from dataclasses import replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID, uuid4

import pytest

from autoclaim.claims.events import ClaimEventBus
from autoclaim.claims.lifecycle import ClaimStatus
from autoclaim.claims.service import ClaimService
from autoclaim.domain.records import Booking, Claim, NewClaim, Train
from autoclaim.eligibility.service import EligibilityEvaluator
from autoclaim.eligibility.types import Currency
from autoclaim.matching.normalizer import build_trip_id
from autoclaim.parsing.types import ParsedBooking
from autoclaim.stores.interfaces import ClaimRepository
from autoclaim.utils.dates import UTC

JOURNEY_DATE = date(2026, 1, 5)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=UTC)


class InMemoryClaimRepository(ClaimRepository):
    def __init__(self):
        self.trains: dict[UUID, Train] = {}
        self.bookings: dict[UUID, Booking] = {}
        self.claims: dict[UUID, Claim] = {}
        self.emails: dict[UUID, str] = {}

    # test helpers

    def put_train(self, train: Train) -> Train:
        self.trains[train.id] = train
        return train

    def put_booking(self, booking: Booking) -> Booking:
        self.bookings[booking.id] = booking
        return booking

    # ClaimRepository

    def find_train_by_trip_id(self, trip_id: str) -> Optional[Train]:
        matches = [t for t in self.trains.values() if t.trip_id == trip_id]
        return max(matches, key=lambda t: t.service_date, default=None)

    def get_train(self, train_id: UUID) -> Optional[Train]:
        return self.trains.get(train_id)

    def find_trains_by_number_and_date(self, train_number: str, service_date: date) -> list[Train]:
        return [t for t in self.trains.values() if t.train_number == train_number and t.service_date == service_date]

    def add_booking(self, user_id, parsed: ParsedBooking, *, ticket_price=None, ticket_currency=Currency.EUR) -> Booking:
        booking = Booking(
            id=uuid4(),
            user_id=user_id,
            pnr=parsed.pnr,
            tcn=parsed.tcn,
            train_number=parsed.train_number,
            journey_date=parsed.journey_date,
            passenger_name=parsed.passenger_name,
            origin=parsed.origin,
            destination=parsed.destination,
            coach=parsed.coach,
            seat=parsed.seat,
            ticket_price=ticket_price,
            ticket_currency=ticket_currency,
            created_at=utc(2026, 1, 1),
        )
        return self.put_booking(booking)

    def get_booking(self, booking_id: UUID) -> Optional[Booking]:
        return self.bookings.get(booking_id)

    def list_bookings(self, user_id: UUID, *, offset: int, limit: int):
        mine = sorted(
            (b for b in self.bookings.values() if b.user_id == user_id),
            key=lambda b: b.journey_date,
            reverse=True,
        )
        return mine[offset:offset + limit], len(mine)

    def find_bookings_awaiting_evaluation(self, since: date, until: date) -> list[Booking]:
        return [
            b for b in self.bookings.values()
            if b.final_delay_minutes is None and since <= b.journey_date <= until
        ]

    def record_journey_outcome(self, booking_id: UUID, train_id: UUID, final_delay_minutes: int) -> None:
        self.bookings[booking_id] = replace(
            self.bookings[booking_id], train_id=train_id, final_delay_minutes=final_delay_minutes
        )

    def upsert_claim(self, claim: NewClaim):
        existing = self.get_claim_for_booking(claim.booking_id)
        if existing is not None:
            return existing, False
        stored = Claim(
            id=uuid4(),
            booking_id=claim.booking_id,
            delay_minutes=claim.delay_minutes,
            eligible_cash_amount=claim.eligible_cash_amount,
            eligible_voucher_amount=claim.eligible_voucher_amount,
            status=claim.status,
            currency=claim.currency,
        )
        self.claims[stored.id] = stored
        return stored, True

    def transition_claim_status(self, claim_id, expected, target, at):
        claim = self.claims.get(claim_id)
        if claim is None or claim.status is not expected:
            return None
        updated = replace(
            claim,
            status=target,
            updated_at=at,
            submitted_at=at if target is ClaimStatus.SUBMITTED else claim.submitted_at,
        )
        self.claims[claim_id] = updated
        return updated

    def get_claim(self, claim_id: UUID) -> Optional[Claim]:
        return self.claims.get(claim_id)

    def get_claim_for_booking(self, booking_id: UUID) -> Optional[Claim]:
        return next((c for c in self.claims.values() if c.booking_id == booking_id), None)

    def list_claims(self, user_id, *, status=None, offset=0, limit=20):
        mine = [
            c for c in self.claims.values()
            if self.bookings[c.booking_id].user_id == user_id and (status is None or c.status is status)
        ]
        return mine[offset:offset + limit], len(mine)

    def find_claims_by_status(self, statuses: Iterable[ClaimStatus]) -> list[Claim]:
        wanted = set(statuses)
        return [c for c in self.claims.values() if c.status in wanted]

    def get_user_email(self, user_id: UUID) -> Optional[str]:
        return self.emails.get(user_id)


class CapturingNotifier:
    def __init__(self):
        self.events = []

    def notify(self, event) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [e.event_type for e in self.events]


@pytest.fixture
def repo():
    return InMemoryClaimRepository()


@pytest.fixture
def notifier():
    return CapturingNotifier()


@pytest.fixture
def claim_service(repo, notifier):
    return ClaimService(repo, ClaimEventBus([notifier]))


@pytest.fixture
def evaluator():
    return EligibilityEvaluator()


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def make_booking(repo, user_id):
    def _make(**overrides) -> Booking:
        fields = dict(
            id=uuid4(),
            user_id=user_id,
            pnr="ABC123",
            tcn="IV123456789",
            train_number="9007",
            journey_date=JOURNEY_DATE,
            passenger_name="Mr John Smith",
            origin="London St Pancras",
            destination="Paris Gare du Nord",
            ticket_price=Decimal("100"),
        )
        fields.update(overrides)
        return repo.put_booking(Booking(**fields))

    return _make


@pytest.fixture
def make_train(repo):
    def _make(*, number="9007", service_date=JOURNEY_DATE, delay=None, trip_id=None, **overrides) -> Train:
        scheduled_departure = utc(service_date.year, service_date.month, service_date.day, 10, 1)
        scheduled_arrival = utc(service_date.year, service_date.month, service_date.day, 13, 17)
        actual = None
        if delay is not None:
            actual = scheduled_arrival + timedelta(minutes=delay)
        fields = dict(
            id=uuid4(),
            trip_id=trip_id or build_trip_id(number, service_date),
            train_number=number,
            service_date=service_date,
            scheduled_departure=scheduled_departure,
            scheduled_arrival=scheduled_arrival,
            actual_arrival=actual,
            delay_minutes=delay,
        )
        fields.update(overrides)
        return repo.put_train(Train(**fields))

    return _make
