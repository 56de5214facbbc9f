from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from autoclaim.core.errors import TierConfigurationError

from .types import MINIMUM_DELAY_MINUTES, CompensationTier

COMPENSATION_TIERS: tuple[CompensationTier, ...] = (
    CompensationTier("Standard", 60, 120, Decimal("0.25"), Decimal("0.60")),
    CompensationTier("Extended", 120, 180, Decimal("0.50"), Decimal("0.60")),
    CompensationTier("Severe", 180, None, Decimal("0.50"), Decimal("0.75")),
)


def validate_tiers(tiers: Sequence[CompensationTier]) -> None:
    """
    Tiers must start at the minimum delay, be contiguous and ordered, and end
    with an unbounded tier. Raises TierConfigurationError otherwise.
    """
    if not tiers:
        raise TierConfigurationError("No compensation tiers configured")
    if tiers[0].min_delay_minutes != MINIMUM_DELAY_MINUTES:
        raise TierConfigurationError(
            f"First tier must start at {MINIMUM_DELAY_MINUTES} minutes, got {tiers[0].min_delay_minutes}"
        )

    for prev, nxt in zip(tiers, tiers[1:]):
        if prev.max_delay_minutes is None:
            raise TierConfigurationError(f"Tier {prev.name!r} is unbounded but is not the last tier")
        if prev.max_delay_minutes != nxt.min_delay_minutes:
            raise TierConfigurationError(
                f"Tiers {prev.name!r} and {nxt.name!r} are not contiguous "
                f"({prev.max_delay_minutes} != {nxt.min_delay_minutes})"
            )

    for t in tiers:
        if t.max_delay_minutes is not None and t.max_delay_minutes <= t.min_delay_minutes:
            raise TierConfigurationError(f"Tier {t.name!r} has an empty range")
        for pct in (t.cash_percentage, t.voucher_percentage):
            if not Decimal("0") <= pct <= Decimal("1"):
                raise TierConfigurationError(f"Tier {t.name!r} has percentage {pct} outside [0, 1]")

    if tiers[-1].max_delay_minutes is not None:
        raise TierConfigurationError(f"Last tier {tiers[-1].name!r} must be unbounded")


def get_tier_for_delay(
    delay_minutes: int,
    tiers: Sequence[CompensationTier] = COMPENSATION_TIERS,
) -> Optional[CompensationTier]:
    for tier in tiers:
        if tier.covers(delay_minutes):
            return tier
    return None


validate_tiers(COMPENSATION_TIERS)
