"""Day arithmetic and date coercion shared by pipeline stages."""

import math
from datetime import UTC, date, datetime, timedelta

import dateparser

from account_intel.intelligence.errors import PipelineInputError
from account_intel.models.base import as_utc, start_of_day

SECONDS_PER_DAY = 86400


def utc_now(now: datetime | None = None) -> datetime:
    """Resolve the pipeline's reference time."""
    return as_utc(now) if now is not None else datetime.now(UTC)


def days_between(a: datetime, b: datetime) -> int:
    """Whole days between two instants, rounded up."""
    delta = abs((as_utc(b) - as_utc(a)).total_seconds())
    return math.ceil(delta / SECONDS_PER_DAY)


def within_days(when: datetime, now: datetime, days: int) -> bool:
    """True if when falls in the trailing window of the given length."""
    return as_utc(when) >= now - timedelta(days=days)


def coerce_datetime(
    value: datetime | date | str | None, stage: str, field: str
) -> datetime | None:
    """Coerce an explicit date argument to an aware UTC datetime.

    Args:
        value: datetime, date, or ISO-8601 string
        stage: Pipeline stage name for error reporting
        field: Argument name for error reporting

    Returns:
        Aware UTC datetime, or None when value is None

    Raises:
        PipelineInputError: If the value cannot be interpreted as a date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return start_of_day(value)
    if isinstance(value, str):
        try:
            return as_utc(datetime.fromisoformat(value.strip()))
        except ValueError as e:
            raise PipelineInputError(stage, field, f"unparsable date {value!r}") from e
    raise PipelineInputError(stage, field, f"expected a date, got {type(value).__name__}")


def normalize_due_date(raw_date: str | None, call_date: datetime) -> datetime | None:
    """Convert a natural language due date to a UTC day, relative to the call.

    Args:
        raw_date: Natural language date string (e.g., "Friday", "end of month")
        call_date: When the call happened (reference point for relative dates)

    Returns:
        Midnight UTC of the parsed day, or None if raw_date is empty or
        unparsable
    """
    if raw_date is None or not raw_date.strip():
        return None

    parser_settings: dict = {
        "RELATIVE_BASE": as_utc(call_date).replace(tzinfo=None),
        "PREFER_DATES_FROM": "future",
        "RETURN_AS_TIMEZONE_AWARE": False,
    }

    try:
        parsed = dateparser.parse(raw_date, settings=parser_settings)
    except Exception:
        # dateparser can raise various exceptions on malformed input
        return None
    if parsed is None:
        return None
    return start_of_day(parsed.date())
