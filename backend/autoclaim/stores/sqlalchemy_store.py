"""
PostgreSQL implementation of ClaimRepository.

Writes are flushed, not committed; the request or job that owns the session
decides when to commit.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from autoclaim.claims.lifecycle import ClaimStatus
from autoclaim.domain.records import Booking, Claim, NewClaim, Train
from autoclaim.eligibility.types import Currency
from autoclaim.models.bookings import Booking as BookingRow
from autoclaim.models.claims import Claim as ClaimRow
from autoclaim.models.trains import Train as TrainRow
from autoclaim.models.users import User as UserRow
from autoclaim.parsing.types import ParsedBooking

from .interfaces import ClaimRepository


def _train(row: TrainRow) -> Train:
    return Train(
        id=row.id,
        trip_id=row.trip_id,
        train_number=row.train_number,
        service_date=row.service_date,
        scheduled_departure=row.scheduled_departure,
        scheduled_arrival=row.scheduled_arrival,
        actual_arrival=row.actual_arrival,
        delay_minutes=row.delay_minutes,
    )


def _booking(row: BookingRow) -> Booking:
    return Booking(
        id=row.id,
        user_id=row.user_id,
        pnr=row.pnr,
        tcn=row.tcn,
        train_number=row.train_number,
        journey_date=row.journey_date,
        passenger_name=row.passenger_name,
        origin=row.origin,
        destination=row.destination,
        coach=row.coach,
        seat=row.seat,
        train_id=row.train_id,
        final_delay_minutes=row.final_delay_minutes,
        ticket_price=row.ticket_price,
        ticket_currency=Currency(row.ticket_currency),
        created_at=row.created_at,
    )


def _claim(row: ClaimRow) -> Claim:
    return Claim(
        id=row.id,
        booking_id=row.booking_id,
        delay_minutes=row.delay_minutes,
        eligible_cash_amount=row.eligible_cash_amount,
        eligible_voucher_amount=row.eligible_voucher_amount,
        status=ClaimStatus(row.status),
        currency=Currency(row.currency),
        submitted_at=row.submitted_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlAlchemyClaimRepository(ClaimRepository):
    def __init__(self, db: Session):
        self.db = db

    # Trains

    def find_train_by_trip_id(self, trip_id: str) -> Optional[Train]:
        # rows from different years share a trip id; newest first
        row = self.db.execute(
            select(TrainRow)
            .where(TrainRow.trip_id == trip_id)
            .order_by(TrainRow.service_date.desc())
            .limit(1)
        ).scalar_one_or_none()
        return _train(row) if row is not None else None

    def get_train(self, train_id: UUID) -> Optional[Train]:
        row = self.db.get(TrainRow, train_id)
        return _train(row) if row is not None else None

    def find_trains_by_number_and_date(self, train_number: str, service_date: date) -> list[Train]:
        rows = self.db.execute(
            select(TrainRow).where(
                TrainRow.train_number == train_number,
                TrainRow.service_date == service_date,
            )
        ).scalars()
        return [_train(r) for r in rows]

    # Bookings

    def add_booking(
        self,
        user_id: UUID,
        parsed: ParsedBooking,
        *,
        ticket_price: Optional[Decimal] = None,
        ticket_currency: Currency = Currency.EUR,
    ) -> Booking:
        self.db.execute(insert(UserRow).values(id=user_id).on_conflict_do_nothing(index_elements=["id"]))
        row = BookingRow(
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
            ticket_currency=ticket_currency.value,
        )
        self.db.add(row)
        self.db.flush()
        self.db.refresh(row)
        return _booking(row)

    def get_booking(self, booking_id: UUID) -> Optional[Booking]:
        row = self.db.get(BookingRow, booking_id)
        return _booking(row) if row is not None else None

    def list_bookings(self, user_id: UUID, *, offset: int, limit: int) -> tuple[list[Booking], int]:
        total = self.db.execute(
            select(func.count()).select_from(BookingRow).where(BookingRow.user_id == user_id)
        ).scalar_one()
        rows = self.db.execute(
            select(BookingRow)
            .where(BookingRow.user_id == user_id)
            .order_by(BookingRow.journey_date.desc(), BookingRow.created_at.desc())
            .offset(offset)
            .limit(limit)
        ).scalars()
        return [_booking(r) for r in rows], int(total)

    def find_bookings_awaiting_evaluation(self, since: date, until: date) -> list[Booking]:
        rows = self.db.execute(
            select(BookingRow)
            .where(
                BookingRow.final_delay_minutes.is_(None),
                BookingRow.journey_date >= since,
                BookingRow.journey_date <= until,
            )
            .order_by(BookingRow.journey_date, BookingRow.created_at)
        ).scalars()
        return [_booking(r) for r in rows]

    def record_journey_outcome(self, booking_id: UUID, train_id: UUID, final_delay_minutes: int) -> None:
        self.db.execute(
            update(BookingRow)
            .where(BookingRow.id == booking_id)
            .values(train_id=train_id, final_delay_minutes=final_delay_minutes)
        )
        self.db.flush()

    # Claims

    def upsert_claim(self, claim: NewClaim) -> tuple[Claim, bool]:
        stmt = (
            insert(ClaimRow)
            .values(
                booking_id=claim.booking_id,
                delay_minutes=claim.delay_minutes,
                eligible_cash_amount=claim.eligible_cash_amount,
                eligible_voucher_amount=claim.eligible_voucher_amount,
                currency=claim.currency.value,
                status=claim.status.value,
            )
            .on_conflict_do_nothing(index_elements=["booking_id"])
            .returning(ClaimRow.id)
        )
        created = self.db.execute(stmt).fetchone() is not None
        row = self.db.execute(
            select(ClaimRow).where(ClaimRow.booking_id == claim.booking_id)
        ).scalar_one()
        return _claim(row), created

    def transition_claim_status(
        self,
        claim_id: UUID,
        expected: ClaimStatus,
        target: ClaimStatus,
        at: datetime,
    ) -> Optional[Claim]:
        values = {"status": target.value, "updated_at": at}
        if target is ClaimStatus.SUBMITTED:
            values["submitted_at"] = at

        # conditional on the status we read; a concurrent writer makes this a no-op
        stmt = (
            update(ClaimRow)
            .where(ClaimRow.id == claim_id, ClaimRow.status == expected.value)
            .values(**values)
            .returning(ClaimRow.id)
            .execution_options(synchronize_session=False)
        )
        if self.db.execute(stmt).fetchone() is None:
            return None
        return self.get_claim(claim_id)

    def get_claim(self, claim_id: UUID) -> Optional[Claim]:
        row = self.db.execute(
            select(ClaimRow).where(ClaimRow.id == claim_id).execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return _claim(row) if row is not None else None

    def get_claim_for_booking(self, booking_id: UUID) -> Optional[Claim]:
        row = self.db.execute(select(ClaimRow).where(ClaimRow.booking_id == booking_id)).scalar_one_or_none()
        return _claim(row) if row is not None else None

    def list_claims(
        self,
        user_id: UUID,
        *,
        status: Optional[ClaimStatus] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Claim], int]:
        where = [BookingRow.user_id == user_id]
        if status is not None:
            where.append(ClaimRow.status == status.value)

        total = self.db.execute(
            select(func.count()).select_from(ClaimRow).join(BookingRow, ClaimRow.booking_id == BookingRow.id).where(*where)
        ).scalar_one()
        rows = self.db.execute(
            select(ClaimRow)
            .join(BookingRow, ClaimRow.booking_id == BookingRow.id)
            .where(*where)
            .order_by(ClaimRow.created_at.desc())
            .offset(offset)
            .limit(limit)
        ).scalars()
        return [_claim(r) for r in rows], int(total)

    def find_claims_by_status(self, statuses: Iterable[ClaimStatus]) -> list[Claim]:
        values = [s.value for s in statuses]
        rows = self.db.execute(select(ClaimRow).where(ClaimRow.status.in_(values))).scalars()
        return [_claim(r) for r in rows]

    # Users

    def get_user_email(self, user_id: UUID) -> Optional[str]:
        return self.db.execute(select(UserRow.email).where(UserRow.id == user_id)).scalar_one_or_none()
