from datetime import date
from decimal import Decimal

import pytest

from autoclaim.core.errors import TierConfigurationError
from autoclaim.eligibility.calculator import (
    calculate_compensation,
    convert_eur_to_gbp,
    convert_gbp_to_eur,
    format_compensation_amount,
    meets_minimum_payout,
)
from autoclaim.eligibility.deadline import (
    claim_deadline,
    claim_window_opens_at,
    days_until_deadline,
    is_claim_window_open,
    is_deadline_expired,
)
from autoclaim.eligibility.service import EligibilityEvaluator, candidate_for_booking, format_time_until_deadline
from autoclaim.eligibility.tiers import COMPENSATION_TIERS, get_tier_for_delay, validate_tiers
from autoclaim.eligibility.types import ClaimCandidate, CompensationTier, Currency, EligibilityReason

from conftest import JOURNEY_DATE, utc

COMPLETED_AT = utc(2026, 1, 5, 14, 47)


def tier(name, lo, hi, cash="0.25", voucher="0.60"):
    return CompensationTier(name, lo, hi, Decimal(cash), Decimal(voucher))


class TestTiers:
    @pytest.mark.parametrize(
        "delay, name",
        [
            (59, None),
            (60, "Standard"),
            (119, "Standard"),
            (120, "Extended"),
            (179, "Extended"),
            (180, "Severe"),
            (1000, "Severe"),
        ],
    )
    def test_boundaries(self, delay, name):
        found = get_tier_for_delay(delay)
        assert (found.name if found else None) == name

    def test_shipped_table_is_valid(self):
        validate_tiers(COMPENSATION_TIERS)

    @pytest.mark.parametrize(
        "tiers, fragment",
        [
            ((), "No compensation tiers"),
            ((tier("A", 30, None),), "must start at 60"),
            ((tier("A", 60, 120), tier("B", 130, None)), "not contiguous"),
            ((tier("A", 60, None), tier("B", 120, None)), "unbounded but is not the last"),
            ((tier("A", 60, 120),), "must be unbounded"),
            ((tier("A", 60, 60), tier("B", 60, None)), "empty range"),
            ((tier("A", 60, None, cash="1.5"),), "outside [0, 1]"),
        ],
    )
    def test_rejects_bad_tables(self, tiers, fragment):
        with pytest.raises(TierConfigurationError) as exc:
            validate_tiers(tiers)
        assert fragment in exc.value.message


class TestCompensation:
    def test_ninety_minutes_on_hundred_euro_ticket(self):
        result = calculate_compensation(90, Decimal("100"))

        assert result.eligible
        assert result.cash_amount == Decimal("25.00")
        assert result.voucher_amount == Decimal("60.00")
        assert result.tier.name == "Standard"
        assert result.currency is Currency.EUR

    @pytest.mark.parametrize(
        "delay, cash, voucher",
        [(120, "50.00", "60.00"), (180, "50.00", "75.00")],
    )
    def test_higher_tiers(self, delay, cash, voucher):
        result = calculate_compensation(delay, 100)
        assert (result.cash_amount, result.voucher_amount) == (Decimal(cash), Decimal(voucher))

    def test_short_delay_pays_nothing(self):
        result = calculate_compensation(59, 100)
        assert not result.eligible
        assert result.tier is None
        assert result.cash_amount == result.voucher_amount == Decimal("0.00")

    def test_rounds_half_up_to_cents(self):
        assert calculate_compensation(90, "10.01").cash_amount == Decimal("2.50")
        assert calculate_compensation(90, "10.02").cash_amount == Decimal("2.51")

    def test_payout_in_gbp(self):
        result = calculate_compensation(90, 100, currency=Currency.GBP)
        assert result.cash_amount == Decimal("21.25")
        assert result.voucher_amount == Decimal("51.00")
        assert result.currency is Currency.GBP

    def test_gbp_ticket_paid_in_gbp_is_not_converted(self):
        result = calculate_compensation(90, 100, currency=Currency.GBP, ticket_currency=Currency.GBP)
        assert result.cash_amount == Decimal("25.00")

    def test_minimum_payout(self):
        below = calculate_compensation(90, 15)
        at = calculate_compensation(90, 16)

        assert below.cash_amount == Decimal("3.75")
        assert not below.eligible and not meets_minimum_payout(below)
        assert at.cash_amount == Decimal("4.00")
        assert at.eligible and meets_minimum_payout(at)

    def test_conversion(self):
        assert convert_eur_to_gbp(100) == Decimal("85.00")
        assert convert_gbp_to_eur(85) == Decimal("100.00")
        assert convert_eur_to_gbp(100, "0.9") == Decimal("90.00")

    @pytest.mark.parametrize("amount", ["33.33", "1.00", "99.99", "12.34"])
    def test_conversion_round_trip_differs_only_by_rounding(self, amount):
        back = convert_gbp_to_eur(convert_eur_to_gbp(amount))
        assert abs(back - Decimal(amount)) <= Decimal("0.02")

    def test_rejects_non_positive_rate(self):
        with pytest.raises(ValueError):
            convert_eur_to_gbp(10, 0)

    def test_format_amount(self):
        assert format_compensation_amount(Decimal("25"), Currency.EUR) == "€25.00"
        assert format_compensation_amount("4.5", Currency.GBP) == "£4.50"


class TestDeadline:
    def test_three_calendar_months(self):
        assert claim_deadline(JOURNEY_DATE) == date(2026, 4, 5)

    def test_month_end_clamps(self):
        assert claim_deadline(date(2025, 11, 30)) == date(2026, 2, 28)

    @pytest.mark.parametrize(
        "now, days, expired",
        [
            (utc(2026, 4, 4, 23, 59), 1, False),
            (utc(2026, 4, 5, 0, 0), 0, False),
            (utc(2026, 4, 5, 23, 59), 0, False),
            (utc(2026, 4, 6, 0, 0), -1, True),
        ],
    )
    def test_days_remaining(self, now, days, expired):
        assert days_until_deadline(JOURNEY_DATE, now) == days
        assert is_deadline_expired(JOURNEY_DATE, now) is expired

    def test_window_opens_a_day_after_completion(self):
        assert claim_window_opens_at(JOURNEY_DATE, COMPLETED_AT) == utc(2026, 1, 6, 14, 47)
        assert not is_claim_window_open(JOURNEY_DATE, utc(2026, 1, 6, 14, 46), COMPLETED_AT)
        assert is_claim_window_open(JOURNEY_DATE, utc(2026, 1, 6, 14, 47), COMPLETED_AT)

    def test_window_without_completion_counts_from_journey_day(self):
        assert claim_window_opens_at(JOURNEY_DATE) == utc(2026, 1, 6)

    @pytest.mark.parametrize(
        "days, text",
        [
            (-3, "Expired 3 days ago"),
            (0, "Expires today"),
            (1, "Expires tomorrow"),
            (5, "5 days remaining"),
            (7, "1 week remaining"),
            (27, "3 weeks remaining"),
            (28, "1 month remaining"),
            (88, "2 months remaining"),
        ],
    )
    def test_format_time_until_deadline(self, days, text):
        assert format_time_until_deadline(days) == text


class TestEvaluator:
    def candidate(self, delay=90, price="100", **kw):
        return ClaimCandidate(delay_minutes=delay, ticket_price=Decimal(price), completed_at=COMPLETED_AT, **kw)

    def test_eligible(self, evaluator, make_booking):
        status = evaluator.check(make_booking(), self.candidate(), utc(2026, 1, 7))

        assert status.eligible
        assert status.reason is EligibilityReason.ELIGIBLE
        assert status.failed_checks == ()
        assert status.compensation.cash_amount == Decimal("25.00")
        assert status.deadline == date(2026, 4, 5)
        assert status.days_until_deadline == 88
        assert status.claim_window_open

    def test_waiting_for_window_only(self, evaluator, make_booking):
        status = evaluator.check(make_booking(), self.candidate(), utc(2026, 1, 6, 10, 0))

        assert not status.eligible
        assert status.reason is EligibilityReason.CLAIM_WINDOW_NOT_OPEN
        assert status.only_waiting_for_window
        assert status.claim_window_opens_at == utc(2026, 1, 6, 14, 47)

    def test_every_failure_reported_first_one_wins(self, evaluator, make_booking):
        status = evaluator.check(make_booking(), self.candidate(delay=30), utc(2026, 1, 6, 10, 0))

        assert status.reason is EligibilityReason.INSUFFICIENT_DELAY
        assert status.failed_checks == (
            EligibilityReason.INSUFFICIENT_DELAY,
            EligibilityReason.CLAIM_WINDOW_NOT_OPEN,
        )
        assert not status.only_waiting_for_window

    def test_deadline_expired(self, evaluator, make_booking):
        status = evaluator.check(make_booking(), self.candidate(), utc(2026, 5, 1))
        assert status.failed_checks == (EligibilityReason.DEADLINE_EXPIRED,)
        assert status.days_until_deadline < 0

    def test_below_minimum_payout(self, evaluator, make_booking):
        status = evaluator.check(make_booking(), self.candidate(price="10"), utc(2026, 1, 7))
        assert status.reason is EligibilityReason.BELOW_MINIMUM_PAYOUT

    def test_gbp_payout_uses_configured_rate(self, make_booking):
        evaluator = EligibilityEvaluator(exchange_rate=Decimal("0.80"))
        status = evaluator.check(
            make_booking(), self.candidate(currency=Currency.GBP), utc(2026, 1, 7)
        )
        assert status.compensation.cash_amount == Decimal("20.00")

    def test_can_claim_now(self, evaluator, make_booking):
        booking = make_booking()
        assert not evaluator.can_claim_now(booking, utc(2026, 1, 6, 14, 46), COMPLETED_AT)
        assert evaluator.can_claim_now(booking, utc(2026, 1, 6, 14, 47), COMPLETED_AT)
        assert not evaluator.can_claim_now(booking, utc(2026, 4, 6), COMPLETED_AT)

    def test_candidate_falls_back_to_default_price(self, make_booking):
        priced = candidate_for_booking(make_booking(), 90, default_ticket_price=Decimal("50"))
        unpriced = candidate_for_booking(make_booking(ticket_price=None), 90, default_ticket_price=Decimal("50"))

        assert priced.ticket_price == Decimal("100")
        assert unpriced.ticket_price == Decimal("50")
