"""Shared base class and datetime handling for domain models."""

from datetime import UTC, date, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict


def as_utc(value: datetime) -> datetime:
    """Return value as a timezone-aware UTC datetime.

    Naive datetimes are assumed to already be in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def start_of_day(day: date) -> datetime:
    """Midnight UTC for a calendar day."""
    return datetime(day.year, day.month, day.day, tzinfo=UTC)


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]
"""Datetime field type that normalizes to aware UTC on validation."""


class DomainModel(BaseModel):
    """Base class for all pipeline domain models.

    Provides:
    - Whitespace stripping on strings
    - Validation of defaults
    - Construction from attribute-bearing objects
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_default=True,
        from_attributes=True,
    )


class FrozenModel(DomainModel):
    """Domain model that cannot be reassigned after construction."""

    model_config = ConfigDict(frozen=True)
