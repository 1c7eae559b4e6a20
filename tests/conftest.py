"""Pytest configuration and fixtures."""

from datetime import UTC, datetime, timedelta

import pytest

from account_intel.models.meeting import Attendee, Meeting

NOW = datetime(2026, 3, 16, 12, 0, tzinfo=UTC)
"""Fixed reference time so day-count rules are deterministic."""


@pytest.fixture
def now() -> datetime:
    """Pipeline reference time."""
    return NOW


@pytest.fixture
def make_call():
    """Factory for raw call record dicts."""

    def _make(
        id: str = "c1",
        days_ago: float = 2,
        participants: list[str] | None = None,
        title: str = "Weekly sync",
        summary: str | None = None,
        action_items: str = "",
        duration: int = 30,
    ) -> dict:
        if participants is None:
            participants = ["jane.doe@toyota.com", "andy@runlayer.com"]
        return {
            "id": id,
            "title": title,
            "date": (NOW - timedelta(days=days_ago)).isoformat(),
            "duration": duration,
            "participants": participants,
            "summary": summary,
            "action_items": action_items,
        }

    return _make


@pytest.fixture
def make_message():
    """Factory for raw chat message dicts."""

    def _make(days_ago: float = 1, text: str = "Toyota wants a pricing update") -> dict:
        return {
            "channel": "C123",
            "user": "U1",
            "text": text,
            "ts": str((NOW - timedelta(days=days_ago)).timestamp()),
        }

    return _make


@pytest.fixture
def make_event():
    """Factory for raw calendar event dicts."""

    def _make(
        id: str = "e1",
        days_ago: float = 5,
        attendees: list[str] | None = None,
        summary: str = "Toyota / Runlayer check-in",
        description: str | None = None,
    ) -> dict:
        start = NOW - timedelta(days=days_ago)
        emails = (
            attendees
            if attendees is not None
            else ["ken.sato@toyota.com", "andy@runlayer.com"]
        )
        return {
            "id": id,
            "summary": summary,
            "description": description,
            "start": start.isoformat(),
            "end": (start + timedelta(minutes=45)).isoformat(),
            "attendees": [{"email": email} for email in emails],
        }

    return _make


@pytest.fixture
def meeting() -> Meeting:
    """Upcoming meeting with one external and one internal attendee."""
    return Meeting(
        id="evt-upcoming",
        title="Toyota POC review",
        start=NOW + timedelta(days=1),
        duration_minutes=45,
        attendees=[
            Attendee(email="jane.doe@toyota.com", name="Jane Doe"),
            Attendee(email="andy@runlayer.com", name="Andy", is_organizer=True),
        ],
    )
