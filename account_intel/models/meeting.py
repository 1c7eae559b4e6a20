"""Meeting model for the upcoming meeting a dossier is built for."""

from pydantic import EmailStr, Field, field_validator

from account_intel.models.base import DomainModel, UtcDatetime


class Attendee(DomainModel):
    """An invited attendee of the meeting."""

    email: EmailStr = Field(description="Attendee email address")
    name: str | None = Field(default=None, description="Display name")
    response_status: str | None = Field(default=None)
    is_organizer: bool = Field(default=False)
    is_external: bool | None = Field(
        default=None, description="Set by the assembler from internal domains"
    )

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        """Emails compare case-insensitively."""
        return v.lower()


class Meeting(DomainModel):
    """The meeting being prepared for."""

    id: str = Field(description="Calendar event id")
    title: str = Field(default="", description="Meeting title")
    start: UtcDatetime = Field(description="Scheduled start time")
    duration_minutes: int = Field(default=30, ge=0)
    attendees: list[Attendee] = Field(default_factory=list)
    meeting_link: str | None = Field(default=None)
    account_id: str | None = Field(default=None)
    description: str | None = Field(default=None)
    location: str | None = Field(default=None)
