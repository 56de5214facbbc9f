from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from autoclaim.api.v1.routes.claims import claim_out
from autoclaim.api.v1.schemas.bookings import (
    BookingDetailOut,
    BookingImportIn,
    BookingListOut,
    BookingOut,
    CompensationOut,
    EligibilityOut,
    ParseErrorOut,
)
from autoclaim.api.v1.schemas.claims import PageMeta
from autoclaim.core.config import AutoclaimConfig
from autoclaim.core.deps import get_config, get_current_user_id, get_db, get_eligibility_evaluator, get_repository
from autoclaim.domain.records import Booking
from autoclaim.eligibility.service import EligibilityEvaluator, candidate_for_booking, format_time_until_deadline
from autoclaim.eligibility.types import Currency, EligibilityStatus
from autoclaim.parsing.parser import extract
from autoclaim.parsing.types import ParseError
from autoclaim.stores.interfaces import ClaimRepository
from autoclaim.utils.dates import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/bookings", tags=["bookings"])


def booking_out(b: Booking, model=BookingOut, **extra):
    return model(
        id=b.id,
        pnr=b.pnr,
        tcn=b.tcn,
        train_number=b.train_number,
        journey_date=b.journey_date,
        passenger_name=b.passenger_name,
        origin=b.origin,
        destination=b.destination,
        coach=b.coach,
        seat=b.seat,
        ticket_price=b.ticket_price,
        ticket_currency=b.ticket_currency.value,
        train_id=b.train_id,
        final_delay_minutes=b.final_delay_minutes,
        created_at=b.created_at,
        **extra,
    )


def eligibility_out(status: EligibilityStatus) -> EligibilityOut:
    comp = status.compensation
    return EligibilityOut(
        eligible=status.eligible,
        reason=status.reason.value,
        failed_checks=[r.value for r in status.failed_checks],
        compensation=CompensationOut(
            eligible=comp.eligible,
            cash_amount=comp.cash_amount,
            voucher_amount=comp.voucher_amount,
            tier=comp.tier.name if comp.tier else None,
            currency=comp.currency.value,
            ticket_price=comp.ticket_price,
            delay_minutes=comp.delay_minutes,
        ),
        deadline=status.deadline,
        days_until_deadline=status.days_until_deadline,
        time_until_deadline=format_time_until_deadline(status.days_until_deadline),
        claim_window_open=status.claim_window_open,
        claim_window_opens_at=status.claim_window_opens_at,
    )


@router.post(
    "",
    status_code=201,
    response_model=BookingOut,
    responses={422: {"model": ParseErrorOut}},
)
def import_booking(
    body: BookingImportIn,
    user_id: UUID = Depends(get_current_user_id),
    repository: ClaimRepository = Depends(get_repository),
    db: Session = Depends(get_db),
):
    parsed = extract(body.email_body, now=utcnow())
    if isinstance(parsed, ParseError):
        logger.info("Booking import rejected: %s field=%s", parsed.code.value, parsed.field)
        return JSONResponse(status_code=422, content=parsed.to_dict())

    booking = repository.add_booking(
        user_id,
        parsed,
        ticket_price=body.ticket_price,
        ticket_currency=Currency(body.ticket_currency),
    )
    db.commit()
    logger.info("Imported booking %s (%s, train %s on %s)", booking.id, booking.pnr, booking.train_number, booking.journey_date)
    return booking_out(booking)


@router.get("", response_model=BookingListOut)
def list_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user_id: UUID = Depends(get_current_user_id),
    repository: ClaimRepository = Depends(get_repository),
):
    bookings, total = repository.list_bookings(user_id, offset=(page - 1) * limit, limit=limit)
    return BookingListOut(
        data=[booking_out(b) for b in bookings],
        meta=PageMeta(page=page, limit=limit, total=total, total_pages=-(-total // limit)),
    )


@router.get("/{booking_id}", response_model=BookingDetailOut)
def get_booking(
    booking_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    repository: ClaimRepository = Depends(get_repository),
    evaluator: EligibilityEvaluator = Depends(get_eligibility_evaluator),
    config: AutoclaimConfig = Depends(get_config),
):
    booking = repository.get_booking(booking_id)
    if booking is None or booking.user_id != user_id:
        raise HTTPException(status_code=404, detail="Booking not found")

    eligibility = None
    if booking.final_delay_minutes is not None:
        train = repository.get_train(booking.train_id) if booking.train_id else None
        candidate = candidate_for_booking(
            booking,
            booking.final_delay_minutes,
            default_ticket_price=Decimal(config.default_ticket_price),
            completed_at=train.actual_arrival if train else None,
        )
        eligibility = eligibility_out(evaluator.check(booking, candidate, utcnow()))

    claim = repository.get_claim_for_booking(booking.id)
    return booking_out(
        booking,
        BookingDetailOut,
        eligibility=eligibility,
        claim=claim_out(claim) if claim else None,
    )
