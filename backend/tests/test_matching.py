from dataclasses import replace
from datetime import date, timedelta

import pytest

from autoclaim.delay.checker import JourneyStatus, evaluate
from autoclaim.matching.matcher import Ambiguous, JourneyMatcher, Matched, NotFound
from autoclaim.matching.normalizer import (
    Region,
    build_trip_id,
    format_service_date,
    normalize_train_number,
    parse_trip_id,
)

from conftest import JOURNEY_DATE, utc


class TestNormalizer:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("9007", "9007"),
            ("9O07", "9007"),
            ("9o07", "9007"),
            (" 9O14 ", "9014"),
            ("O7", "0007"),
            ("42", "0042"),
        ],
    )
    def test_uk_numbers(self, raw, expected):
        assert normalize_train_number(raw) == expected

    @pytest.mark.parametrize("raw", ["9007", "9O07", "42", "O7"])
    def test_idempotent(self, raw):
        once = normalize_train_number(raw)
        assert normalize_train_number(once) == once

    @pytest.mark.parametrize("raw", ["", "ES9007", "90070", "9 007"])
    def test_rejects_non_numbers(self, raw):
        with pytest.raises(ValueError):
            normalize_train_number(raw)

    def test_eu_region_has_no_letter_substitution(self):
        assert normalize_train_number("9007", Region.EU) == "9007"
        with pytest.raises(ValueError):
            normalize_train_number("9O07", Region.EU)

    def test_trip_id(self):
        assert format_service_date(date(2026, 1, 5)) == "0105"
        assert build_trip_id("9O07", date(2026, 1, 5)) == "9007-0105"
        assert build_trip_id("9007", date(2026, 12, 31)) == "9007-1231"

    def test_parse_trip_id(self):
        assert parse_trip_id("9007-0105") == ("9007", 1, 5)
        with pytest.raises(ValueError):
            parse_trip_id("9007-1305")
        with pytest.raises(ValueError):
            parse_trip_id("9007")


class TestMatcher:
    def test_matches_by_trip_id(self, repo, make_booking, make_train):
        train = make_train()
        booking = make_booking()

        result = JourneyMatcher(repo).match(booking)

        assert result == Matched(train)

    def test_uk_letter_o_booking_finds_digit_train(self, repo, make_booking, make_train):
        train = make_train()
        booking = make_booking(train_number="9O07")

        assert JourneyMatcher(repo).match(booking) == Matched(train)

    def test_no_train_is_not_found(self, repo, make_booking):
        assert isinstance(JourneyMatcher(repo).match(make_booking()), NotFound)

    def test_same_trip_id_last_year_is_not_a_match(self, repo, make_booking, make_train):
        make_train(service_date=date(2025, 1, 5))
        booking = make_booking()

        assert isinstance(JourneyMatcher(repo).match(booking), NotFound)

    def test_each_year_matches_its_own_run(self, repo, make_booking, make_train):
        last_year = make_train(service_date=date(2025, 1, 5), delay=90)
        this_year = make_train()

        matcher = JourneyMatcher(repo)

        assert matcher.match(make_booking(journey_date=date(2025, 1, 5))) == Matched(last_year)
        assert matcher.match(make_booking()) == Matched(this_year)

    def test_falls_back_to_number_and_date(self, repo, make_booking, make_train):
        train = make_train(trip_id="feed-specific-id")
        booking = make_booking()

        assert JourneyMatcher(repo).match(booking) == Matched(train)

    def test_several_runs_on_the_day_are_ambiguous(self, repo, make_booking, make_train):
        make_train(trip_id="a")
        make_train(trip_id="b")

        result = JourneyMatcher(repo).match(make_booking())

        assert isinstance(result, Ambiguous)
        assert len(result.candidates) == 2

    def test_garbage_train_number_is_not_found(self, repo, make_booking):
        result = JourneyMatcher(repo).match(make_booking(train_number="ABCD"))
        assert result == NotFound(reason="bad_train_number")


class TestDelayEvaluator:
    def test_scheduled_before_departure(self, make_train):
        train = make_train(delay=90)
        assert evaluate(train, utc(2026, 1, 5, 9, 0)).status is JourneyStatus.SCHEDULED

    def test_in_progress_without_actual_arrival(self, make_train):
        train = make_train()
        result = evaluate(train, utc(2026, 1, 6, 12, 0))
        assert result.status is JourneyStatus.IN_PROGRESS
        assert result.delay_minutes is None

    def test_in_progress_inside_buffer(self, make_train):
        train = make_train(delay=5)
        # scheduled arrival 13:17, buffer 60 minutes
        assert evaluate(train, utc(2026, 1, 5, 14, 16)).status is JourneyStatus.IN_PROGRESS
        assert evaluate(train, utc(2026, 1, 5, 14, 17)).status is JourneyStatus.COMPLETED

    def test_completed_delay_and_completion_time(self, make_train):
        train = make_train(delay=90)
        result = evaluate(train, utc(2026, 1, 5, 18, 0))

        assert result.status is JourneyStatus.COMPLETED
        assert result.delay_minutes == 90
        assert result.completed_at == train.actual_arrival

    def test_partial_minutes_round_down(self, make_train):
        train = make_train(delay=0)
        train = replace(train, actual_arrival=train.scheduled_arrival + timedelta(seconds=119))
        assert evaluate(train, utc(2026, 1, 6)).delay_minutes == 1

    def test_early_arrival_clamps_to_zero(self, make_train):
        train = make_train(delay=-12)
        assert evaluate(train, utc(2026, 1, 6)).delay_minutes == 0

    def test_custom_buffer(self, make_train):
        train = make_train(delay=0)
        assert evaluate(train, utc(2026, 1, 5, 13, 30), buffer=timedelta(minutes=10)).status is JourneyStatus.COMPLETED

    def test_same_inputs_same_result(self, make_train):
        train = make_train(delay=75)
        now = utc(2026, 1, 6)
        assert evaluate(train, now) == evaluate(train, now)


def test_journey_date_fixture_is_the_reference_day():
    assert JOURNEY_DATE == date(2026, 1, 5)
