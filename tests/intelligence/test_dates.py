"""Tests for date helpers and email classification."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from account_intel.intelligence.dates import (
    coerce_datetime,
    days_between,
    normalize_due_date,
    utc_now,
    within_days,
)
from account_intel.intelligence.emails import (
    extract_domain,
    is_external_email,
    is_internal_email,
)
from account_intel.intelligence.errors import PipelineInputError


class TestDayArithmetic:
    """Tests for days_between and within_days."""

    def test_partial_days_round_up(self, now):
        """Any part of a day counts as a whole day."""
        assert days_between(now - timedelta(hours=1), now) == 1
        assert days_between(now - timedelta(days=2, hours=3), now) == 3

    def test_order_does_not_matter(self, now):
        """The difference is absolute."""
        earlier = now - timedelta(days=5)
        assert days_between(now, earlier) == days_between(earlier, now) == 5

    def test_same_instant_is_zero(self, now):
        """No elapsed time is zero days."""
        assert days_between(now, now) == 0

    def test_within_days(self, now):
        """The trailing window includes its boundary."""
        assert within_days(now - timedelta(days=30), now, 30)
        assert not within_days(now - timedelta(days=31), now, 30)

    def test_utc_now_normalizes_offsets(self):
        """An offset-aware reference time is converted to UTC."""
        tokyo = datetime(2026, 3, 16, 21, 0, tzinfo=timezone(timedelta(hours=9)))
        assert utc_now(tokyo) == datetime(2026, 3, 16, 12, 0, tzinfo=UTC)
        assert utc_now(tokyo).tzinfo == UTC


class TestCoerceDatetime:
    """Tests for coerce_datetime."""

    def test_none_passes_through(self):
        """A missing value stays missing."""
        assert coerce_datetime(None, "account_analyzer", "stage_start_date") is None

    def test_accepts_date_datetime_and_iso(self):
        """Dates, datetimes and ISO strings all become aware UTC."""
        expected = datetime(2026, 1, 1, tzinfo=UTC)

        assert coerce_datetime(date(2026, 1, 1), "s", "f") == expected
        assert coerce_datetime(datetime(2026, 1, 1), "s", "f") == expected
        assert coerce_datetime("2026-01-01T00:00:00+00:00", "s", "f") == expected

    def test_garbage_string_raises(self):
        """Unparsable strings name the stage and field."""
        with pytest.raises(PipelineInputError) as exc_info:
            coerce_datetime("next-ish", "account_analyzer", "stage_start_date")

        error = exc_info.value
        assert error.stage == "account_analyzer"
        assert error.field == "stage_start_date"
        assert "next-ish" in error.message
        assert isinstance(error, ValueError)

    def test_wrong_type_raises(self):
        """Non-date types are rejected."""
        with pytest.raises(PipelineInputError, match="expected a date"):
            coerce_datetime(42, "s", "f")


class TestNormalizeDueDate:
    """Tests for natural language due dates."""

    CALL_DATE = datetime(2026, 3, 10, 15, 0, tzinfo=UTC)

    def test_absolute_date(self):
        """ISO dates become midnight UTC of that day."""
        assert normalize_due_date("2026-03-20", self.CALL_DATE) == datetime(
            2026, 3, 20, tzinfo=UTC
        )

    def test_relative_weekday_is_in_the_future(self):
        """Weekday names resolve forward from the call date."""
        assert normalize_due_date("Friday", self.CALL_DATE) == datetime(
            2026, 3, 13, tzinfo=UTC
        )

    @pytest.mark.parametrize("raw", [None, "", "   ", "tbd"])
    def test_blank_or_unparsable(self, raw):
        """Missing or meaningless text gives no due date."""
        assert normalize_due_date(raw, self.CALL_DATE) is None


class TestEmailClassification:
    """Tests for internal and external address helpers."""

    @pytest.mark.parametrize(
        "email,expected",
        [
            ("Jane.Doe@Toyota.COM", "toyota.com"),
            ("  andy@runlayer.com ", "runlayer.com"),
            ("not-an-email", None),
            ("trailing@", None),
        ],
    )
    def test_extract_domain(self, email, expected):
        """Domains are lowercased; malformed addresses have none."""
        assert extract_domain(email) == expected

    def test_internal_and_external(self):
        """Internal domains compare case-insensitively."""
        internal = ["Runlayer.com"]

        assert is_internal_email("andy@runlayer.com", internal)
        assert not is_external_email("andy@runlayer.com", internal)
        assert is_external_email("jane.doe@toyota.com", internal)
        assert not is_external_email("not-an-email", internal)
        assert not is_internal_email("not-an-email", internal)
