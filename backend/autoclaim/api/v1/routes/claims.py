from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from autoclaim.api.v1.schemas.claims import ClaimDetailOut, ClaimFormDataOut, ClaimListOut, ClaimOut, PageMeta
from autoclaim.claims.form_data import format_for_clipboard
from autoclaim.claims.lifecycle import ClaimStatus
from autoclaim.claims.service import ClaimService, ClaimWithFormData
from autoclaim.core.deps import get_claim_service, get_current_user_id, get_db
from autoclaim.core.errors import ClaimDeadlinePassedError, ClaimNotFoundError, InvalidStatusTransitionError
from autoclaim.domain.records import Claim
from autoclaim.utils.dates import utcnow

router = APIRouter(prefix="/v1/claims", tags=["claims"])


def claim_out(claim: Claim) -> ClaimOut:
    return ClaimOut(
        id=claim.id,
        booking_id=claim.booking_id,
        delay_minutes=claim.delay_minutes,
        eligible_cash_amount=claim.eligible_cash_amount,
        eligible_voucher_amount=claim.eligible_voucher_amount,
        currency=claim.currency.value,
        status=claim.status.value,
        submitted_at=claim.submitted_at,
        created_at=claim.created_at,
        updated_at=claim.updated_at,
    )


def claim_detail_out(item: ClaimWithFormData) -> ClaimDetailOut:
    return ClaimDetailOut(
        claim=claim_out(item.claim),
        form_data=ClaimFormDataOut(**item.form_data.to_dict()),
        form_valid=item.validation.valid,
        missing_fields=list(item.validation.missing_fields),
        claim_portal_url=item.claim_portal_url,
        clipboard_text=format_for_clipboard(item.form_data),
    )


@router.get("", response_model=ClaimListOut)
def list_claims(
    status: Optional[str] = Query(None, description="pending|eligible|submitted|approved|rejected|expired"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user_id: UUID = Depends(get_current_user_id),
    service: ClaimService = Depends(get_claim_service),
):
    status_filter = None
    if status is not None:
        try:
            status_filter = ClaimStatus(status)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown claim status: {status}")

    result = service.list_user_claims(user_id, status=status_filter, page=page, limit=limit)
    return ClaimListOut(
        data=[claim_detail_out(item) for item in result.items],
        meta=PageMeta(page=result.page, limit=result.limit, total=result.total, total_pages=result.total_pages),
    )


@router.get("/{claim_id}", response_model=ClaimDetailOut)
def get_claim(
    claim_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: ClaimService = Depends(get_claim_service),
):
    try:
        item = service.get_claim_with_form_data(claim_id, user_id=user_id)
    except ClaimNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return claim_detail_out(item)


@router.post("/{claim_id}/submitted", response_model=ClaimOut)
def mark_submitted(
    claim_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: ClaimService = Depends(get_claim_service),
    db: Session = Depends(get_db),
):
    """The user filed the claim on the carrier portal themselves."""
    try:
        claim = service.mark_submitted(claim_id, utcnow(), user_id=user_id)
    except ClaimNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except (InvalidStatusTransitionError, ClaimDeadlinePassedError) as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=e.message)
    db.commit()
    return claim_out(claim)
