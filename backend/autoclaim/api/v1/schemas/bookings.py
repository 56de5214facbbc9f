from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from autoclaim.api.v1.schemas.claims import ClaimOut, PageMeta


class BookingImportIn(BaseModel):
    email_body: str = Field(..., description="Raw confirmation email, HTML or plain text")
    ticket_price: Optional[Decimal] = Field(None, gt=0)
    ticket_currency: Literal["EUR", "GBP"] = "EUR"


class ParseErrorOut(BaseModel):
    code: str
    message: str
    field: Optional[str] = None
    raw_value: Optional[str] = None


class BookingOut(BaseModel):
    id: UUID
    pnr: str
    tcn: str
    train_number: str
    journey_date: date
    passenger_name: str
    origin: str
    destination: str
    coach: Optional[str] = None
    seat: Optional[str] = None
    ticket_price: Optional[Decimal] = None
    ticket_currency: str
    train_id: Optional[UUID] = None
    final_delay_minutes: Optional[int] = None
    created_at: Optional[datetime] = None


class CompensationOut(BaseModel):
    eligible: bool
    cash_amount: Decimal
    voucher_amount: Decimal
    tier: Optional[str] = None
    currency: str
    ticket_price: Decimal
    delay_minutes: int


class EligibilityOut(BaseModel):
    eligible: bool
    reason: str
    failed_checks: list[str]
    compensation: CompensationOut
    deadline: date
    days_until_deadline: int
    time_until_deadline: str
    claim_window_open: bool
    claim_window_opens_at: datetime


class BookingDetailOut(BookingOut):
    eligibility: Optional[EligibilityOut] = None
    claim: Optional[ClaimOut] = None


class BookingListOut(BaseModel):
    data: list[BookingOut]
    meta: PageMeta
