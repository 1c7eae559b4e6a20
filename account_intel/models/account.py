"""Account aggregate and the records that hang off it."""

from enum import Enum

from pydantic import Field, field_validator

from account_intel.models.base import DomainModel, FrozenModel, UtcDatetime


class TimelineEventType(str, Enum):
    """Kind of engagement recorded on the account timeline."""

    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    NOTE = "note"
    STAGE_CHANGE = "stage-change"
    ACTION_ITEM = "action-item"


class TimelineEvent(FrozenModel):
    """A single dated engagement with the account.

    Created once by the merger and never modified afterwards.
    """

    id: str = Field(description="Stable event identifier (e.g. call-123)")
    date: UtcDatetime = Field(description="When the engagement happened")
    kind: TimelineEventType = Field(description="Kind of engagement")
    title: str = Field(default="", description="Short title of the event")
    description: str | None = Field(default=None, description="Summary or notes")
    participants: list[str] = Field(
        default_factory=list, description="Participant email addresses"
    )
    duration_minutes: int | None = Field(default=None, ge=0)
    transcript_id: str | None = Field(
        default=None, description="Source transcript id for call events"
    )


class ActionItemOwner(str, Enum):
    """Which side of the deal owns an action item."""

    OURS = "ours"
    THEIRS = "theirs"


class ActionItemStatus(str, Enum):
    """Lifecycle status of an action item."""

    PENDING = "pending"
    COMPLETED = "completed"
    OVERDUE = "overdue"


OPEN_ACTION_STATUSES = frozenset({ActionItemStatus.PENDING, ActionItemStatus.OVERDUE})


class ActionItem(DomainModel):
    """A follow-up commitment captured on a call."""

    id: str = Field(description="Deterministic id: <source record id>-ai-<index>")
    description: str = Field(min_length=1, description="What needs to be done")
    owner: ActionItemOwner = Field(description="Whether we or the customer own it")
    assignee: str | None = Field(
        default=None, description="Assignee email, or raw name if unresolved"
    )
    due_date: UtcDatetime | None = Field(default=None)
    created_date: UtcDatetime = Field(description="Date of the source call")
    status: ActionItemStatus = Field(default=ActionItemStatus.PENDING)
    source: str | None = Field(default=None, description="Title of the source call")
    days_overdue: int | None = Field(default=None, ge=0)

    @property
    def is_open(self) -> bool:
        """Check if item still needs attention."""
        return self.status in OPEN_ACTION_STATUSES


class RiskType(str, Enum):
    """Category of a detected deal risk."""

    TIMELINE = "timeline"
    STAKEHOLDER = "stakeholder"
    BUDGET = "budget"
    TECHNICAL = "technical"
    COMPETITIVE = "competitive"
    OTHER = "other"


class RiskSeverity(str, Enum):
    """Severity level of a risk."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


SEVERITY_ORDER = {
    RiskSeverity.HIGH: 0,
    RiskSeverity.MEDIUM: 1,
    RiskSeverity.LOW: 2,
}


class Risk(FrozenModel):
    """A condition threatening deal progress, found by rule evaluation."""

    id: str = Field(description="Rule identifier (e.g. risk-stale-comm)")
    type: RiskType = Field(description="Risk category")
    severity: RiskSeverity = Field(description="Severity level")
    description: str = Field(description="Human-readable description")
    detected_date: UtcDatetime = Field(description="When the rule fired")
    source: str | None = Field(default=None)
    mitigation: str | None = Field(default=None, description="Suggested mitigation")


class Momentum(str, Enum):
    """Engagement trend category for an account."""

    ACCELERATING = "accelerating"
    STABLE = "stable"
    STALLING = "stalling"
    AT_RISK = "at-risk"


class Contact(DomainModel):
    """Known contact at the account, derived from the participant registry."""

    id: str
    email: str
    name: str = ""
    title: str | None = None


class Account(DomainModel):
    """Aggregated view of one customer account."""

    id: str = Field(description="Account identifier (the account domain)")
    name: str = Field(description="Account display name")
    domain: str = Field(description="Primary email/web domain")
    deal_stage: str = Field(default="unknown", description="Free-text deal stage")
    deal_value: float = Field(default=0.0, ge=0.0)
    close_date: UtcDatetime | None = Field(default=None)
    days_in_stage: int = Field(default=0, ge=0)
    last_contact_date: UtcDatetime | None = Field(default=None)
    momentum: Momentum = Field(default=Momentum.STABLE)
    contacts: list[Contact] = Field(default_factory=list)
    timeline: list[TimelineEvent] = Field(default_factory=list)
    open_action_items: list[ActionItem] = Field(default_factory=list)
    risks: list[Risk] = Field(default_factory=list)
    notes: str | None = Field(default=None)

    # Company enrichment
    industry: str | None = Field(default=None)
    employee_count: str | None = Field(default=None)
    headquarters: str | None = Field(default=None)
    description: str | None = Field(default=None)

    @field_validator("domain")
    @classmethod
    def lowercase_domain(cls, v: str) -> str:
        """Domains compare case-insensitively."""
        return v.lower()
