from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class ParsedBooking:
    pnr: str
    tcn: str
    train_number: str
    journey_date: date               # UTC calendar date
    passenger_name: str
    origin: str
    destination: str
    coach: Optional[str] = None
    seat: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "pnr": self.pnr,
            "tcn": self.tcn,
            "train_number": self.train_number,
            "journey_date": self.journey_date.isoformat(),
            "passenger_name": self.passenger_name,
            "origin": self.origin,
            "destination": self.destination,
            "coach": self.coach,
            "seat": self.seat,
        }


class ParseErrorCode(str, Enum):
    EMPTY_INPUT = "EMPTY_INPUT"
    MISSING_PNR = "MISSING_PNR"
    INVALID_PNR = "INVALID_PNR"
    MISSING_TCN = "MISSING_TCN"
    INVALID_TCN = "INVALID_TCN"
    MISSING_TRAIN_NUMBER = "MISSING_TRAIN_NUMBER"
    INVALID_TRAIN_NUMBER = "INVALID_TRAIN_NUMBER"
    MISSING_DATE = "MISSING_DATE"
    INVALID_DATE = "INVALID_DATE"
    MISSING_PASSENGER = "MISSING_PASSENGER"
    MISSING_ORIGIN = "MISSING_ORIGIN"
    MISSING_DESTINATION = "MISSING_DESTINATION"
    VALIDATION_FAILED = "VALIDATION_FAILED"


@dataclass(frozen=True)
class ParseError:
    code: ParseErrorCode
    message: str
    field: Optional[str] = None
    raw_value: Optional[str] = None

    def to_dict(self) -> dict:
        out = {"code": self.code.value, "message": self.message}
        if self.field is not None:
            out["field"] = self.field
        if self.raw_value is not None:
            out["raw_value"] = self.raw_value
        return out


ParseResult = Union[ParsedBooking, ParseError]
