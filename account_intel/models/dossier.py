"""Dossier models: the assembled, read-only output of the pipeline."""

from pydantic import Field

from account_intel.models.account import Account
from account_intel.models.base import DomainModel, FrozenModel, UtcDatetime
from account_intel.models.meeting import Meeting
from account_intel.models.participant import InternalParticipant, ParticipantProfile


class ExecutiveSummary(FrozenModel):
    """Top-of-dossier summary for a quick read."""

    why_this_meeting_matters: str
    top_goals: list[str] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)


class StrategicInsights(FrozenModel):
    """Guidance on what to lean into and what to steer clear of."""

    whats_working: list[str] = Field(default_factory=list)
    needs_attention: list[str] = Field(default_factory=list)
    questions_to_ask: list[str] = Field(default_factory=list)
    things_to_avoid: list[str] = Field(default_factory=list)


class CompetitiveIntelSection(FrozenModel):
    """Competitor signal summarized for the dossier."""

    competitors_detected: list[str] = Field(default_factory=list)
    competitor_mentions: list[str] | None = Field(default=None)
    watch_list: list[str] = Field(default_factory=list)
    notes: str | None = Field(default=None)


class DossierMetadata(FrozenModel):
    """How and from what the dossier was produced."""

    generated_at: UtcDatetime
    generated_by: str
    data_sources_used: list[str] = Field(default_factory=list)
    data_sources_failed: list[str] | None = Field(default=None)
    processing_time_ms: int | None = Field(default=None, ge=0)
    version: str


class Dossier(FrozenModel):
    """Everything a seller needs walking into one meeting.

    Built once per request and never modified after assembly.
    """

    meeting: Meeting
    account: Account
    external_participants: list[ParticipantProfile] = Field(default_factory=list)
    internal_participants: list[InternalParticipant] = Field(default_factory=list)
    missing_stakeholders: list[str] = Field(default_factory=list)
    executive_summary: ExecutiveSummary
    strategic_insights: StrategicInsights
    competitive_intel: CompetitiveIntelSection | None = Field(default=None)
    talking_points: list[str] = Field(default_factory=list)
    metadata: DossierMetadata


class DossierValidation(DomainModel):
    """Minimum-content check result. Issues are warnings, never errors."""

    is_valid: bool
    issues: list[str] = Field(default_factory=list)
