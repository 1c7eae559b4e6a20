"""Raw record schemas for source adapters.

Adapters hand the pipeline plain dicts. Each dict is validated into one of
these models before it is folded; a dict that fails validation is a
malformed record and is dropped by the merger.
"""

from datetime import UTC, datetime

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
)

from account_intel.models.base import UtcDatetime


class SourceRecord(BaseModel):
    """Base config for raw source records."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )


class CallRecord(SourceRecord):
    """A recorded call with its transcript summary."""

    id: str = Field(min_length=1, description="Transcript id")
    title: str = Field(default="", description="Call title")
    date: UtcDatetime = Field(description="When the call happened")
    duration_minutes: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("duration_minutes", "duration"),
    )
    participants: list[str] = Field(default_factory=list)
    organizer_email: str | None = Field(default=None)
    summary: str | None = Field(default=None, description="Call summary text")
    action_items: str = Field(
        default="", description="Free-text action item block from the notetaker"
    )
    keywords: list[str] = Field(default_factory=list)

    @field_validator("participants")
    @classmethod
    def normalize_participants(cls, v: list[str]) -> list[str]:
        """Lowercase addresses and drop blanks."""
        return [p.strip().lower() for p in v if p and p.strip()]


class ChatMessage(SourceRecord):
    """An internal chat message mentioning the account."""

    channel: str = Field(default="", description="Channel id")
    channel_name: str | None = Field(default=None)
    user: str = Field(default="", description="Author id")
    user_name: str | None = Field(default=None)
    text: str = Field(default="")
    timestamp: UtcDatetime = Field(
        validation_alias=AliasChoices("timestamp", "ts"),
        description="When the message was posted",
    )
    permalink: str | None = Field(default=None)

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_epoch(cls, v):
        """Accept chat-style epoch strings like "1706522400.000100"."""
        if isinstance(v, (int, float)):
            return datetime.fromtimestamp(v, tz=UTC)
        if isinstance(v, str):
            try:
                return datetime.fromtimestamp(float(v), tz=UTC)
            except ValueError:
                return v
        return v


class CalendarAttendee(SourceRecord):
    """An attendee on a calendar event."""

    email: EmailStr
    display_name: str | None = Field(
        default=None, validation_alias=AliasChoices("display_name", "displayName")
    )
    response_status: str | None = Field(
        default=None,
        validation_alias=AliasChoices("response_status", "responseStatus"),
    )
    organizer: bool = Field(default=False)
    is_self: bool = Field(default=False, validation_alias=AliasChoices("is_self", "self"))

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        """Emails compare case-insensitively."""
        return v.lower()


class CalendarEventRecord(SourceRecord):
    """A calendar event that may involve the account."""

    id: str = Field(min_length=1)
    summary: str = Field(
        default="(No title)", validation_alias=AliasChoices("summary", "title")
    )
    description: str | None = Field(default=None)
    start: UtcDatetime
    end: UtcDatetime
    location: str | None = Field(default=None)
    meeting_link: str | None = Field(
        default=None, validation_alias=AliasChoices("meeting_link", "hangoutLink")
    )
    attendees: list[CalendarAttendee] = Field(default_factory=list)
    status: str | None = Field(default=None)

    @property
    def duration_minutes(self) -> int:
        """Scheduled length of the event in whole minutes."""
        return max(0, round((self.end - self.start).total_seconds() / 60))


class PersonInfo(SourceRecord):
    """External research record for one person."""

    name: str | None = Field(default=None)
    email: str | None = Field(default=None)
    title: str | None = Field(default=None)
    company: str | None = Field(default=None)
    linkedin_url: str | None = Field(
        default=None, validation_alias=AliasChoices("linkedin_url", "linkedinUrl")
    )
    background: str | None = Field(default=None)
    previous_companies: list[str] = Field(default_factory=list)
    education: list[str] = Field(default_factory=list)


class CompanyInfo(SourceRecord):
    """External research record for the account's company."""

    name: str
    domain: str
    description: str | None = Field(default=None)
    industry: str | None = Field(default=None)
    employee_count: str | None = Field(default=None)
    headquarters: str | None = Field(default=None)
    recent_news: list[str] = Field(default_factory=list)
