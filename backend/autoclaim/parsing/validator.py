from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator

from autoclaim.utils.dates import add_months


class BookingSchema(BaseModel):
    """Shape check applied after structural extraction."""

    pnr: str = Field(..., pattern=r"^[A-Z0-9]{6}$")
    tcn: str = Field(..., pattern=r"^(?:IV|15)\d{9}$")
    train_number: str = Field(..., pattern=r"^\d{4}$")
    journey_date: date
    passenger_name: str = Field(..., min_length=2, max_length=100)
    origin: str = Field(..., min_length=1, max_length=100)
    destination: str = Field(..., min_length=1, max_length=100)
    coach: Optional[int] = Field(None, ge=1, le=18)
    seat: Optional[int] = Field(None, ge=1, le=200)

    @field_validator("journey_date")
    @classmethod
    def _plausible_date(cls, v: date, info: ValidationInfo) -> date:
        today: Optional[date] = (info.context or {}).get("today")
        if today is None:
            return v
        # one calendar year either side of today
        if not add_months(today, -12) <= v <= add_months(today, 12):
            raise ValueError("journey date is not within one year of today")
        return v


def first_invalid_field(data: dict, *, today: date) -> Optional[tuple[str, str]]:
    """
    Run the schema and return (field, message) for the first failing field,
    in declaration order, or None when everything validates.
    """
    try:
        BookingSchema.model_validate(data, context={"today": today})
    except ValidationError as e:
        errors = {str(err["loc"][0]): err["msg"] for err in e.errors() if err["loc"]}
        for name in BookingSchema.model_fields:
            if name in errors:
                return name, errors[name]
        first = e.errors()[0]
        return str(first["loc"][0]) if first["loc"] else "booking", first["msg"]
    return None
