from fastapi import APIRouter

from autoclaim.eligibility.tiers import COMPENSATION_TIERS

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok", "tiers": [t.name for t in COMPENSATION_TIERS]}
