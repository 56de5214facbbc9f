"""
Claim status state machine.

    pending  -> eligible | expired
    eligible -> submitted | expired
    submitted -> approved | rejected

approved, rejected and expired are terminal. Anything off the table is
rejected, never coerced to the nearest valid status.
"""

from enum import Enum

from autoclaim.core.errors import InvalidStatusTransitionError


class ClaimStatus(str, Enum):
    PENDING = "pending"
    ELIGIBLE = "eligible"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"


TRANSITIONS: dict[ClaimStatus, frozenset[ClaimStatus]] = {
    ClaimStatus.PENDING: frozenset({ClaimStatus.ELIGIBLE, ClaimStatus.EXPIRED}),
    ClaimStatus.ELIGIBLE: frozenset({ClaimStatus.SUBMITTED, ClaimStatus.EXPIRED}),
    ClaimStatus.SUBMITTED: frozenset({ClaimStatus.APPROVED, ClaimStatus.REJECTED}),
    ClaimStatus.APPROVED: frozenset(),
    ClaimStatus.REJECTED: frozenset(),
    ClaimStatus.EXPIRED: frozenset(),
}

OPEN_STATUSES = frozenset({ClaimStatus.PENDING, ClaimStatus.ELIGIBLE})


def can_transition(current: ClaimStatus, target: ClaimStatus) -> bool:
    return target in TRANSITIONS[current]


def ensure_transition(current: ClaimStatus, target: ClaimStatus) -> None:
    if not can_transition(current, target):
        raise InvalidStatusTransitionError(current.value, target.value)


def is_terminal(status: ClaimStatus) -> bool:
    return not TRANSITIONS[status]
