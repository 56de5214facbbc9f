from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ClaimOut(BaseModel):
    id: UUID
    booking_id: UUID
    delay_minutes: int
    eligible_cash_amount: Optional[Decimal] = None
    eligible_voucher_amount: Optional[Decimal] = None
    currency: str
    status: str
    submitted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ClaimFormDataOut(BaseModel):
    pnr: str
    tcn: str
    first_name: str
    last_name: str
    email: str
    train_number: str
    journey_date: str = Field(..., description="DD/MM/YYYY")
    origin: str
    destination: str
    delay_minutes: int
    eligible_cash_amount: Decimal
    eligible_voucher_amount: Decimal
    currency: str


class ClaimDetailOut(BaseModel):
    claim: ClaimOut
    form_data: ClaimFormDataOut
    form_valid: bool
    missing_fields: list[str]
    claim_portal_url: str
    clipboard_text: str


class PageMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ClaimListOut(BaseModel):
    data: list[ClaimDetailOut]
    meta: PageMeta
