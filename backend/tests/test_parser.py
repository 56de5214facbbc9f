"""Tests for booking confirmation extraction."""

import re
from datetime import date

import pytest

from autoclaim.parsing.fields import DateFieldExtractor, RegexFieldExtractor, default_extractors
from autoclaim.parsing.parser import extract
from autoclaim.parsing.preprocess import clean_forwarded_email, is_html, strip_html
from autoclaim.parsing.stations import normalize_station
from autoclaim.parsing.types import ParsedBooking, ParseError, ParseErrorCode

from conftest import utc

NOW = utc(2026, 1, 10, 12, 0)

PLAIN_EMAIL = """Your Eurostar booking is confirmed

Booking Reference: ABC123
Ticket Number: IV123456789

Eurostar 9007
Date: 05 January 2026

Passenger: Mr John Smith
Departs: London St Pancras 10:01
Arrives: Paris Gare du Nord 13:17

Coach: 5
Seat: 42
"""

HTML_EMAIL = """<html><head><style>.x { color: red; }</style></head><body>
<p>Booking Reference: <b>XYZ789</b></p>
<p>Ticket Number: 15123456789</p>
<div>Train 9014</div>
<p>Date: 2026-02-14</p>
<p>Passenger: Ms Jane Doe</p>
<p>Departs: St Pancras 08:31</p>
<p>Arrives: Brussels Midi 12:05</p>
<script>var tracking = "Booking Reference: HIDDEN";</script>
</body></html>"""

FORWARDED_EMAIL = """---------- Forwarded message ---------
From: Eurostar noreply@eurostar.com
Date: Mon, Jan 5, 2026 at 10:00 AM
Subject: Your booking confirmation
To: john@example.com

> Booking Reference: ABC123
> Ticket Number: IV123456789
> Eurostar 9007
> Date: 05 January 2026
> Passenger: Mr John Smith
> Departs: London St Pancras 10:01
> Arrives: Paris Gare du Nord 13:17
"""


def without_line(text: str, prefix: str) -> str:
    return "\n".join(line for line in text.splitlines() if not line.startswith(prefix))


class TestExtract:
    def test_plain_confirmation(self):
        result = extract(PLAIN_EMAIL, now=NOW)

        assert isinstance(result, ParsedBooking)
        assert result.pnr == "ABC123"
        assert result.tcn == "IV123456789"
        assert result.train_number == "9007"
        assert result.journey_date == date(2026, 1, 5)
        assert result.passenger_name == "Mr John Smith"
        assert result.origin == "London St Pancras"
        assert result.destination == "Paris Gare du Nord"
        assert result.coach == "5"
        assert result.seat == "42"

    def test_html_confirmation(self):
        result = extract(HTML_EMAIL, now=utc(2026, 2, 1))

        assert isinstance(result, ParsedBooking)
        assert result.pnr == "XYZ789"
        assert result.tcn == "15123456789"
        assert result.train_number == "9014"
        assert result.journey_date == date(2026, 2, 14)
        assert result.passenger_name == "Ms Jane Doe"
        assert result.origin == "London St Pancras"
        assert result.destination == "Brussels Midi/Zuid"
        assert result.coach is None
        assert result.seat is None

    def test_forwarded_confirmation_uses_journey_date_not_sent_date(self):
        result = extract(FORWARDED_EMAIL, now=NOW)

        assert isinstance(result, ParsedBooking)
        assert result.pnr == "ABC123"
        assert result.journey_date == date(2026, 1, 5)

    def test_to_dict_is_json_friendly(self):
        result = extract(PLAIN_EMAIL, now=NOW)
        assert result.to_dict()["journey_date"] == "2026-01-05"

    @pytest.mark.parametrize("body", ["", "   ", "\n\t\n", None])
    def test_empty_input(self, body):
        result = extract(body, now=NOW)
        assert isinstance(result, ParseError)
        assert result.code is ParseErrorCode.EMPTY_INPUT

    def test_missing_booking_reference(self):
        result = extract(without_line(PLAIN_EMAIL, "Booking Reference"), now=NOW)

        assert isinstance(result, ParseError)
        assert result.code is ParseErrorCode.MISSING_PNR
        assert result.field == "pnr"
        assert result.to_dict() == {"code": "MISSING_PNR", "message": result.message, "field": "pnr"}

    @pytest.mark.parametrize(
        "dropped, code, field",
        [
            ("Ticket Number", ParseErrorCode.MISSING_TCN, "tcn"),
            ("Eurostar 9007", ParseErrorCode.MISSING_TRAIN_NUMBER, "train_number"),
            ("Date:", ParseErrorCode.MISSING_DATE, "journey_date"),
            ("Passenger", ParseErrorCode.MISSING_PASSENGER, "passenger_name"),
            ("Departs", ParseErrorCode.MISSING_ORIGIN, "origin"),
            ("Arrives", ParseErrorCode.MISSING_DESTINATION, "destination"),
        ],
    )
    def test_each_missing_field(self, dropped, code, field):
        result = extract(without_line(PLAIN_EMAIL, dropped), now=NOW)
        assert isinstance(result, ParseError)
        assert result.code is code
        assert result.field == field

    def test_first_missing_field_wins(self):
        body = "Booking Reference: ABC123\nPassenger: Mr John Smith\n"
        result = extract(body, now=NOW)
        assert result.code is ParseErrorCode.MISSING_TCN

    def test_coach_and_seat_are_optional(self):
        body = without_line(without_line(PLAIN_EMAIL, "Coach"), "Seat")
        result = extract(body, now=NOW)
        assert isinstance(result, ParsedBooking)
        assert result.coach is None and result.seat is None

    @pytest.mark.parametrize("name", ["JOHN SMITH", "MR JOHN SMITH", "john smith", "ms jane DOE"])
    def test_passenger_name_in_any_case(self, name):
        body = PLAIN_EMAIL.replace("Passenger: Mr John Smith", f"Passenger: {name}")
        result = extract(body, now=NOW)
        assert isinstance(result, ParsedBooking)
        assert result.passenger_name == name

    def test_passenger_name_stops_at_inline_label(self):
        body = PLAIN_EMAIL.replace("Passenger: Mr John Smith", "Passenger: JOHN SMITH COACH 5 SEAT 42")
        result = extract(body, now=NOW)
        assert result.passenger_name == "JOHN SMITH"

    def test_titled_name_without_label(self):
        body = PLAIN_EMAIL.replace("Passenger: Mr John Smith", "DR JANE DOE")
        result = extract(body, now=NOW)
        assert result.passenger_name == "DR JANE DOE"

    def test_labelled_but_malformed_reference(self):
        body = PLAIN_EMAIL.replace("Booking Reference: ABC123", "Booking Reference: AB12")
        result = extract(body, now=NOW)
        assert result.code is ParseErrorCode.INVALID_PNR
        assert result.raw_value == "AB12"

    def test_impossible_date(self):
        body = PLAIN_EMAIL.replace("05 January 2026", "31/02/2026")
        result = extract(body, now=NOW)
        assert result.code is ParseErrorCode.INVALID_DATE
        assert result.raw_value == "31/02/2026"

    def test_date_far_from_now_fails_validation(self):
        body = PLAIN_EMAIL.replace("05 January 2026", "05 January 2020")
        result = extract(body, now=NOW)
        assert result.code is ParseErrorCode.VALIDATION_FAILED
        assert result.field == "journey_date"

    def test_coach_out_of_range_fails_validation(self):
        body = PLAIN_EMAIL.replace("Coach: 5", "Coach: 25")
        result = extract(body, now=NOW)
        assert result.code is ParseErrorCode.VALIDATION_FAILED
        assert result.field == "coach"
        assert result.raw_value == "25"

    def test_extra_template_without_touching_parser(self):
        body = without_line(PLAIN_EMAIL, "Booking Reference") + "\nRef#QWE456\n"
        extractors = {
            **default_extractors(),
            "pnr": RegexFieldExtractor("pnr", [re.compile(r"Ref#([A-Z0-9]{6})")]),
        }
        result = extract(body, now=NOW, extractors=extractors)
        assert isinstance(result, ParsedBooking)
        assert result.pnr == "QWE456"


class TestDates:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Travel on 5th January 2026", date(2026, 1, 5)),
            ("Travel on January 5, 2026", date(2026, 1, 5)),
            ("Travel on 2026-01-05", date(2026, 1, 5)),
            ("Travel on 05/01/2026", date(2026, 1, 5)),
            ("Travel on 05-01-2026", date(2026, 1, 5)),
        ],
    )
    def test_formats(self, text, expected):
        assert DateFieldExtractor().extract(text) == expected

    def test_priority_long_form_before_iso(self):
        text = "Issued 2026-03-01. Journey 05 January 2026."
        assert DateFieldExtractor().extract(text) == date(2026, 1, 5)

    def test_impossible_date_falls_through_to_next_format(self):
        text = "31 February 2026 or 2026-03-01"
        assert DateFieldExtractor().extract(text) == date(2026, 3, 1)


class TestPreprocess:
    def test_html_detection(self):
        assert is_html("<p>hi</p>")
        assert not is_html("plain text")

    def test_strip_html_drops_scripts_and_decodes_entities(self):
        text = strip_html("<script>alert(1)</script><p>Caf&eacute;&nbsp;&amp; bar</p><br>next")
        assert "alert" not in text
        assert "Café & bar" in text
        assert "next" in text.splitlines()[-1]

    def test_forwarded_header_date_removed_but_journey_date_kept(self):
        cleaned = clean_forwarded_email(FORWARDED_EMAIL)
        assert "Mon, Jan 5, 2026" not in cleaned
        assert "Date: 05 January 2026" in cleaned
        assert "Subject:" not in cleaned
        assert not any(line.startswith(">") for line in cleaned.splitlines())


class TestStations:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("st pancras", "London St Pancras"),
            ("  Paris   Nord ", "Paris Gare du Nord"),
            ("BRUSSELS", "Brussels Midi/Zuid"),
            ("  Disneyland Paris ", "Disneyland Paris"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_station(raw) == expected
