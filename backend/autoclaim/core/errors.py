"""Domain errors raised by the claim lifecycle and the service layer."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    CLAIM_NOT_FOUND = "CLAIM_NOT_FOUND"
    CLAIM_DEADLINE_PASSED = "CLAIM_DEADLINE_PASSED"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    TIER_CONFIGURATION = "TIER_CONFIGURATION"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ClaimNotFoundError(DomainError):
    def __init__(self, claim_id: str) -> None:
        super().__init__(code=ErrorCode.CLAIM_NOT_FOUND, message="Claim not found")
        object.__setattr__(self, "claim_id", claim_id)


class InvalidStatusTransitionError(DomainError):
    """Raised when a claim is asked to move along an edge the lifecycle does not have."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_STATUS_TRANSITION,
            message=f"Cannot move claim from {current} to {target}",
        )
        object.__setattr__(self, "current", current)
        object.__setattr__(self, "target", target)


class TierConfigurationError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.TIER_CONFIGURATION, message=message)


class ClaimDeadlinePassedError(DomainError):
    def __init__(self, claim_id: str, deadline: str) -> None:
        super().__init__(
            code=ErrorCode.CLAIM_DEADLINE_PASSED,
            message=f"The claim deadline ({deadline}) has passed",
        )
        object.__setattr__(self, "claim_id", claim_id)
