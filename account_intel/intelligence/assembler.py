"""Dossier assembler: runs the pipeline and maps its output into a Dossier.

Stages run in a fixed order (merge, analyze, profile, goals, talking
points, competitive intel), each consuming the previous stage's output.
The quick constructor and the validator live here too, so callers have
one place to go for every way of producing a dossier.
"""

import time
from datetime import datetime

import structlog

from account_intel.adapters.base import DataSources
from account_intel.adapters.schemas import CompanyInfo
from account_intel.config import settings
from account_intel.intelligence import thresholds as t
from account_intel.intelligence.analyzer import analyze_account, apply_analysis_to_account
from account_intel.intelligence.competitive import (
    UNKNOWN_COMPETITOR,
    extract_competitive_intel,
)
from account_intel.intelligence.dates import utc_now
from account_intel.intelligence.emails import is_internal_email
from account_intel.intelligence.goals import generate_goals
from account_intel.intelligence.merger import merge_all_data
from account_intel.intelligence.profiler import (
    identify_missing_stakeholders,
    profile_participants,
)
from account_intel.intelligence.schemas import (
    AccountAnalysis,
    AssemblerContext,
    AssemblerResult,
    CompetitiveIntel,
    Goal,
    GoalContext,
    MergeOptions,
    TalkingPoint,
    TalkingPointCategory,
    TalkingPointContext,
)
from account_intel.intelligence.talking_points import (
    generate_talking_points,
    get_talking_points_by_category,
)
from account_intel.models.account import Account, Momentum, RiskSeverity
from account_intel.models.dossier import (
    CompetitiveIntelSection,
    Dossier,
    DossierMetadata,
    DossierValidation,
    ExecutiveSummary,
    StrategicInsights,
)
from account_intel.models.meeting import Attendee, Meeting
from account_intel.models.participant import (
    InternalParticipant,
    ParticipantProfile,
    ParticipantRole,
)

logger = structlog.get_logger()

FALLBACK_QUESTIONS = [
    "What would success look like for you?",
    "Are there any concerns we should address?",
]

STAGE_PHRASES: list[tuple[tuple[str, ...], str]] = [
    (("poc", "pilot"), "{name} is in active evaluation."),
    (("negotiation", "contract"), "{name} is in late-stage negotiations."),
    (("discovery", "qualification"), "{name} is in early discovery phase."),
]

MOMENTUM_PHRASES = {
    Momentum.AT_RISK: "This deal is at risk and needs attention.",
    Momentum.ACCELERATING: "Momentum is strong - maintain engagement.",
    Momentum.STALLING: "Engagement has slowed - use this meeting to re-energize.",
}


def format_deal_value(value: float) -> str:
    """Short currency string.

    Examples:
        >>> format_deal_value(1_500_000)
        '$1.5M'
        >>> format_deal_value(250_000)
        '$250K'
    """
    if value >= 1_000_000:
        return f"${value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"${value / 1_000:.0f}K"
    return f"${value:.0f}"


def _internal_domains(context: AssemblerContext) -> list[str]:
    return list(context.internal_domains or settings.internal_domains)


def build_account(
    account: Account,
    analysis: AccountAnalysis,
    company: CompanyInfo | None = None,
) -> Account:
    """Apply analysis and optional company research to the merged account."""
    account = apply_analysis_to_account(account, analysis)
    if company is None:
        return account

    update = {
        "industry": company.industry,
        "employee_count": company.employee_count,
        "headquarters": company.headquarters,
        "description": company.description,
    }
    if company.description:
        update["notes"] = company.description
    return account.model_copy(update=update)


def build_participant_lists(
    attendees: list[Attendee],
    profiles: dict[str, ParticipantProfile],
    internal_domains: list[str],
) -> tuple[list[ParticipantProfile], list[InternalParticipant]]:
    """Split meeting attendees into external profiles and internal participants.

    Attendees the pipeline never saw still appear, with a minimal profile.
    """
    external: list[ParticipantProfile] = []
    internal: list[InternalParticipant] = []

    for attendee in attendees:
        profile = profiles.get(attendee.email)
        name = attendee.name or (profile.name if profile else "")

        if is_internal_email(attendee.email, internal_domains):
            internal.append(InternalParticipant(email=attendee.email, name=name))
        elif profile is not None:
            external.append(profile.model_copy(update={"name": name}))
        else:
            external.append(ParticipantProfile(email=attendee.email, name=name))

    return external, internal


def generate_why_this_meeting_matters(
    account: Account, analysis: AccountAnalysis
) -> str:
    """Concatenate the stage, momentum, value and staleness phrases that apply."""
    parts = []

    stage = (account.deal_stage or "").lower()
    for keywords, phrase in STAGE_PHRASES:
        if any(keyword in stage for keyword in keywords):
            parts.append(phrase.format(name=account.name))
            break

    if analysis.momentum in MOMENTUM_PHRASES:
        parts.append(MOMENTUM_PHRASES[analysis.momentum])

    if account.deal_value > 0:
        parts.append(f"Deal value: {format_deal_value(account.deal_value)}.")

    if analysis.days_since_last_contact > t.STALE_CONTACT_HIGH_DAYS:
        parts.append(f"{analysis.days_since_last_contact} days since last contact.")

    if not parts:
        return f"Meeting with {account.name} - stay aligned and drive next steps."
    return " ".join(parts)


def build_executive_summary(
    account: Account, goals: list[Goal], analysis: AccountAnalysis
) -> ExecutiveSummary:
    """Why the meeting matters, top goals and red flags."""
    top_goals = [g.title for g in goals if g.priority <= t.SUMMARY_GOAL_MAX_PRIORITY]
    red_flags = [r.description for r in analysis.risks if r.severity == RiskSeverity.HIGH]

    return ExecutiveSummary(
        why_this_meeting_matters=generate_why_this_meeting_matters(account, analysis),
        top_goals=top_goals[: t.SUMMARY_TOP_GOALS],
        red_flags=red_flags[: t.SUMMARY_RED_FLAGS],
    )


def _dossier_talking_points(points: list[TalkingPoint]) -> list[TalkingPoint]:
    eligible = [p for p in points if p.priority <= t.DOSSIER_TALKING_POINT_MAX_PRIORITY]
    return eligible[: t.DOSSIER_MAX_TALKING_POINTS]


def build_strategic_insights(
    analysis: AccountAnalysis,
    talking_points: list[TalkingPoint],
    profiles: dict[str, ParticipantProfile],
) -> StrategicInsights:
    """What's working, what needs attention, what to ask and what to avoid."""
    whats_working = []
    if analysis.momentum == Momentum.ACCELERATING:
        whats_working.append("Strong engagement momentum")
    if analysis.days_since_last_contact < t.RECENT_TOUCHPOINT_DAYS:
        whats_working.append("Recent touchpoints maintaining relationship")
    champions = [p for p in profiles.values() if p.role == ParticipantRole.CHAMPION]
    if champions:
        whats_working.append(f"Active champion: {champions[0].name or champions[0].email}")

    needs_attention = [r.description for r in analysis.risks[: t.INSIGHT_LIST_LIMIT]]

    goal_support = get_talking_points_by_category(
        talking_points, TalkingPointCategory.GOAL_SUPPORT
    )
    questions = [
        p.suggested_phrasing.replace('"', "")
        for p in goal_support[: t.INSIGHT_LIST_LIMIT]
        if p.suggested_phrasing and "?" in p.suggested_phrasing
    ]

    things_to_avoid = []
    blockers = [p for p in profiles.values() if p.role == ParticipantRole.BLOCKER]
    if blockers:
        name = blockers[0].name or "skeptical stakeholder"
        things_to_avoid.append(f"Don't ignore {name}'s concerns")
    if analysis.momentum == Momentum.AT_RISK:
        things_to_avoid.append(
            "Avoid being pushy - focus on understanding their situation"
        )

    return StrategicInsights(
        whats_working=whats_working[: t.INSIGHT_LIST_LIMIT],
        needs_attention=needs_attention,
        questions_to_ask=questions or list(FALLBACK_QUESTIONS),
        things_to_avoid=things_to_avoid,
    )


def build_competitive_section(intel: CompetitiveIntel) -> CompetitiveIntelSection | None:
    """Summarize competitor signal, or None when there is none."""
    if not intel.competitors and not intel.mentions:
        return None

    detected = [c.name for c in intel.competitors if c.name != UNKNOWN_COMPETITOR]
    mentions = [
        f"{m.competitor}: {m.context[: t.SECTION_MENTION_PREVIEW_CHARS]}..."
        for m in intel.mentions[: t.SECTION_MAX_MENTIONS]
    ]

    return CompetitiveIntelSection(
        competitors_detected=detected[: t.SECTION_MAX_COMPETITORS],
        competitor_mentions=mentions or None,
        watch_list=[f"{r.competitor}: {r.description}" for r in intel.risks],
        notes=intel.landscape_summary,
    )


def format_talking_points_for_dossier(points: list[TalkingPoint]) -> list[str]:
    """Render the top talking points as dossier strings."""
    return [
        f"{p.point}\n→ {p.suggested_phrasing}" if p.suggested_phrasing else p.point
        for p in _dossier_talking_points(points)
    ]


def assemble_dossier(
    context: AssemblerContext,
    sources: DataSources,
    now: datetime | None = None,
) -> AssemblerResult:
    """Run the full pipeline for one meeting.

    Args:
        context: Meeting, account identity and deal data
        sources: Raw record collections and optional enrichment
        now: Reference time for every stage (default: current UTC time)

    Returns:
        AssemblerResult with the dossier and every intermediate artifact

    Raises:
        PipelineInputError: If an explicit argument such as the stage
            start date is malformed
    """
    started = time.perf_counter()
    now = utc_now(now)
    internal_domains = _internal_domains(context)

    logger.info(
        "assembling dossier",
        meeting=context.meeting.title,
        account=context.account_name,
    )

    options = MergeOptions(
        account_name=context.account_name,
        account_domain=context.account_domain,
        deal_stage=context.deal_stage or "unknown",
        deal_value=context.deal_value or 0.0,
        internal_domains=internal_domains,
    )
    merged = merge_all_data(
        sources.calls, sources.chat_messages, sources.calendar_events, options, now
    )

    analysis = analyze_account(merged, context.stage_start_date, now)
    account = build_account(merged.account, analysis, sources.company)

    profiles = profile_participants(merged.participants, sources.people, now)

    goal_context = GoalContext(
        account=account,
        analysis=analysis,
        participants=profiles,
        merged=merged,
        meeting_title=context.meeting.title,
    )
    goals = generate_goals(goal_context)

    talking_points = generate_talking_points(
        TalkingPointContext(
            account=account,
            analysis=analysis,
            participants=profiles,
            merged=merged,
            meeting_title=context.meeting.title,
            goals=goals,
        )
    )

    competitive_intel = extract_competitive_intel(
        merged.timeline, context.account_name, now
    )

    external, internal = build_participant_lists(
        context.meeting.attendees, profiles, internal_domains
    )

    processing_time_ms = int((time.perf_counter() - started) * 1000)
    metadata = DossierMetadata(
        generated_at=now,
        generated_by=settings.generated_by,
        data_sources_used=sources.sources_used(),
        data_sources_failed=list(sources.failed_sources) or None,
        processing_time_ms=processing_time_ms,
        version=settings.dossier_version,
    )

    dossier = Dossier(
        meeting=context.meeting,
        account=account,
        external_participants=external,
        internal_participants=internal,
        missing_stakeholders=identify_missing_stakeholders(list(profiles.values())),
        executive_summary=build_executive_summary(account, goals, analysis),
        strategic_insights=build_strategic_insights(analysis, talking_points, profiles),
        competitive_intel=build_competitive_section(competitive_intel),
        talking_points=format_talking_points_for_dossier(talking_points),
        metadata=metadata,
    )

    logger.info(
        "dossier assembled",
        account=context.account_name,
        goals=len(goals),
        talking_points=len(talking_points),
        competitors=len(competitive_intel.competitors),
        processing_time_ms=processing_time_ms,
    )

    return AssemblerResult(
        dossier=dossier,
        merged=merged,
        analysis=analysis,
        profiles=profiles,
        goals=goals,
        talking_points=talking_points,
        competitive_intel=competitive_intel,
    )


def create_quick_dossier(
    meeting: Meeting,
    account_name: str,
    account_domain: str,
    now: datetime | None = None,
    internal_domains: list[str] | None = None,
) -> Dossier:
    """Build a minimal templated dossier without running the pipeline.

    Used when there is no source data or the full pipeline failed.
    """
    now = utc_now(now)
    domains = list(internal_domains or settings.internal_domains)

    external = []
    internal = []
    for attendee in meeting.attendees:
        name = attendee.name or ""
        if is_internal_email(attendee.email, domains):
            internal.append(InternalParticipant(email=attendee.email, name=name))
        else:
            external.append(
                ParticipantProfile(email=attendee.email, name=name, company=account_name)
            )

    return Dossier(
        meeting=meeting,
        account=Account(
            id=account_domain.lower(),
            name=account_name,
            domain=account_domain,
            last_contact_date=now,
        ),
        external_participants=external,
        internal_participants=internal,
        executive_summary=ExecutiveSummary(
            why_this_meeting_matters=f"Meeting with {account_name}",
            top_goals=["Understand their current status", "Identify next steps"],
        ),
        strategic_insights=StrategicInsights(
            needs_attention=["Limited data available - gather context during meeting"],
            questions_to_ask=[
                "What are your current priorities?",
                "How can we help you succeed?",
            ],
        ),
        talking_points=[
            "Introduce yourself and your role",
            "Understand their current challenges",
            "Propose specific next steps",
        ],
        metadata=DossierMetadata(
            generated_at=now,
            generated_by=f"{settings.generated_by} (Quick Mode)",
            version=settings.dossier_version,
        ),
    )


def validate_dossier(dossier: Dossier) -> DossierValidation:
    """Check minimum content, collecting every shortfall."""
    issues = []

    if not dossier.meeting.title:
        issues.append("Missing meeting title")
    if not dossier.account.name:
        issues.append("Missing account name")
    if not dossier.external_participants:
        issues.append("No external participants identified")
    if not dossier.executive_summary.top_goals:
        issues.append("No goals generated")
    if not dossier.talking_points:
        issues.append("No talking points generated")

    return DossierValidation(is_valid=not issues, issues=issues)
