"""Participant models for account stakeholders."""

from enum import Enum

from pydantic import Field, field_validator

from account_intel.models.base import DomainModel, UtcDatetime


class ParticipantRole(str, Enum):
    """Buying role a stakeholder plays in the deal."""

    CHAMPION = "champion"
    BLOCKER = "blocker"
    ECONOMIC_BUYER = "economic-buyer"
    TECHNICAL_EVALUATOR = "technical-evaluator"
    DECISION_MAKER = "decision-maker"
    INFLUENCER = "influencer"
    UNKNOWN = "unknown"


class InfluenceLevel(str, Enum):
    """How much sway a stakeholder has over the decision."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class InteractionType(str, Enum):
    """Channel of a recorded interaction."""

    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    SLACK = "slack"


class Interaction(DomainModel):
    """One touchpoint with a participant."""

    id: str
    date: UtcDatetime
    type: InteractionType
    title: str = ""
    duration_minutes: int | None = None
    summary: str | None = None
    sentiment: str | None = None
    key_points: list[str] = Field(default_factory=list)


class Participant(DomainModel):
    """An external stakeholder, keyed by lowercase email.

    Accumulates interactions as each source is folded by the merger.
    """

    email: str = Field(description="Lowercase email address (registry key)")
    name: str = Field(default="", description="Display name, empty when unknown")
    company: str = Field(default="", description="Company or email domain")
    title: str = Field(default="", description="Job title, empty when unknown")
    role: ParticipantRole = Field(default=ParticipantRole.UNKNOWN)
    influence: InfluenceLevel = Field(default=InfluenceLevel.MEDIUM)
    linkedin_url: str | None = Field(default=None)
    background: str | None = Field(default=None)
    interactions: list[Interaction] = Field(
        default_factory=list, description="Interaction history, newest first"
    )
    communication_notes: str | None = Field(default=None)
    what_they_care_about: list[str] = Field(default_factory=list)
    last_interaction_date: UtcDatetime | None = Field(default=None)
    total_interactions: int = Field(default=0, ge=0)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Registry keys are lowercase."""
        return v.strip().lower()


class ParticipantProfile(Participant):
    """Participant after role, influence and confidence inference."""

    enrichment_source: str | None = Field(
        default=None, description="Where enrichment data came from"
    )
    enriched_at: UtcDatetime | None = Field(default=None)
    confidence: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Share of profile signals that are present (0-1)",
    )


class InternalParticipant(DomainModel):
    """A meeting attendee from our own organization."""

    email: str
    name: str = ""
    role: str = Field(default="ae", description="Internal role label")
    last_touchpoint: UtcDatetime | None = None
    notes: str | None = None
