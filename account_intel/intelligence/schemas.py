"""Schemas for intelligence pipeline stages.

Pydantic models for the values each stage produces, and dataclasses for
the contexts threaded from one stage into the next.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from account_intel.config import settings
from account_intel.models.account import (
    Account,
    ActionItem,
    Momentum,
    Risk,
    RiskSeverity,
    TimelineEvent,
)
from account_intel.models.base import UtcDatetime
from account_intel.models.dossier import Dossier
from account_intel.models.meeting import Meeting
from account_intel.models.participant import Participant, ParticipantProfile


class MergeOptions(BaseModel):
    """Identity and deal data for the account being merged."""

    account_name: str = Field(description="Account display name")
    account_domain: str = Field(description="Account email domain")
    deal_stage: str = Field(default="unknown")
    deal_value: float = Field(default=0.0, ge=0.0)
    days_of_history: int = Field(default_factory=lambda: settings.days_of_history)
    internal_domains: list[str] = Field(
        default_factory=lambda: list(settings.internal_domains)
    )


@dataclass
class MergedData:
    """Output of the merger: one account's folded engagement history."""

    account: Account
    """Account partial with timeline, contacts and open items set."""

    participants: dict[str, Participant]
    """External participant registry keyed by lowercase email."""

    timeline: list[TimelineEvent]
    """All events, sorted ascending by date."""

    action_items: list[ActionItem]
    """Every parsed action item, overdue status applied."""


class EngagementVelocity(str, Enum):
    """Bucketed events-per-week rate."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AccountAnalysis(BaseModel):
    """Scores, risks and insights for one account."""

    momentum: Momentum
    momentum_score: int = Field(ge=0, le=100)
    engagement_velocity: EngagementVelocity
    days_in_stage: int = Field(ge=0)
    days_since_last_contact: int = Field(ge=0)
    risks: list[Risk] = Field(default_factory=list)
    health_score: int = Field(ge=0, le=100)
    insights: list[str] = Field(default_factory=list)


class TimelineTrend(str, Enum):
    """Direction of recent activity."""

    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class TimelineAnalysis(BaseModel):
    """Descriptive statistics over the account timeline."""

    total_events: int = 0
    average_call_duration: float = 0.0
    call_frequency_per_week: float = 0.0
    longest_gap_days: int = 0
    recent_trend: TimelineTrend = TimelineTrend.STABLE


class Goal(BaseModel):
    """A recommended objective for the meeting."""

    model_config = ConfigDict(frozen=True)

    id: str
    priority: int = Field(ge=1, le=5, description="1 is highest")
    title: str
    rationale: str
    suggested_approach: str | None = None
    related_risks: list[str] = Field(default_factory=list)
    related_action_items: list[str] = Field(default_factory=list)


class TalkingPointCategory(str, Enum):
    """Fixed talking point categories, in emission order."""

    OPENER = "opener"
    GOAL_SUPPORT = "goal-support"
    RISK_MITIGATION = "risk-mitigation"
    STAKEHOLDER_SPECIFIC = "stakeholder-specific"
    ACTION_FOLLOW_UP = "action-follow-up"
    VALUE_PROPOSITION = "value-proposition"
    NEXT_STEPS = "next-steps"


class TalkingPoint(BaseModel):
    """A suggested conversation item."""

    model_config = ConfigDict(frozen=True)

    id: str
    category: TalkingPointCategory
    point: str
    context: str | None = None
    suggested_phrasing: str | None = None
    related_goal: str | None = None
    related_participant: str | None = None
    priority: int = Field(ge=1, le=3, description="1 is highest")


class Sentiment(str, Enum):
    """Customer sentiment toward a competitor."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class MentionSource(str, Enum):
    """Where a competitor mention was found."""

    TRANSCRIPT = "transcript"
    CALENDAR = "calendar"
    SLACK = "slack"
    EMAIL = "email"


class CompetitorMention(BaseModel):
    """One competitor reference found in one timeline event."""

    id: str
    competitor: str
    context: str
    sentiment: Sentiment
    date: UtcDatetime
    source: MentionSource
    source_id: str


class SentimentBreakdown(BaseModel):
    """Count of mentions per sentiment."""

    positive: int = 0
    negative: int = 0
    neutral: int = 0


class CompetitorProfile(BaseModel):
    """Aggregated mentions of one competitor."""

    name: str
    normalized_name: str
    mention_count: int = 0
    sentiment_breakdown: SentimentBreakdown = Field(default_factory=SentimentBreakdown)
    first_mentioned: UtcDatetime
    last_mentioned: UtcDatetime
    themes: list[str] = Field(default_factory=list)


class CompetitiveRisk(BaseModel):
    """A competitive threat derived from mention patterns."""

    id: str
    competitor: str
    severity: RiskSeverity
    description: str
    evidence: str
    mitigation: str


class CompetitiveIntel(BaseModel):
    """Everything the extractor learned about competitors."""

    competitors: list[CompetitorProfile] = Field(default_factory=list)
    mentions: list[CompetitorMention] = Field(default_factory=list)
    landscape_summary: str = ""
    differentiators: list[str] = Field(default_factory=list)
    risks: list[CompetitiveRisk] = Field(default_factory=list)


@dataclass
class GoalContext:
    """Inputs for goal generation."""

    account: Account
    analysis: AccountAnalysis
    participants: dict[str, ParticipantProfile]
    merged: MergedData
    meeting_title: str | None = None


@dataclass
class TalkingPointContext(GoalContext):
    """Inputs for talking point generation: the goal inputs plus the goals."""

    goals: list[Goal] = field(default_factory=list)


@dataclass
class AssemblerContext:
    """Request-level inputs for one dossier."""

    meeting: Meeting
    account_name: str
    account_domain: str
    deal_stage: str | None = None
    deal_value: float | None = None
    stage_start_date: datetime | date | str | None = None
    internal_domains: list[str] | None = None


@dataclass
class AssemblerResult:
    """The dossier plus every intermediate artifact used to build it."""

    dossier: Dossier
    merged: MergedData
    analysis: AccountAnalysis
    profiles: dict[str, ParticipantProfile]
    goals: list[Goal]
    talking_points: list[TalkingPoint]
    competitive_intel: CompetitiveIntel
