"""Account analyzer: momentum, health, risks and insights.

All scoring is rule-based. Every rule reads its cut-offs from
account_intel.intelligence.thresholds.
"""

from datetime import date, datetime

import structlog

from account_intel.intelligence import thresholds as t
from account_intel.intelligence.dates import (
    coerce_datetime,
    days_between,
    utc_now,
    within_days,
)
from account_intel.intelligence.schemas import (
    AccountAnalysis,
    EngagementVelocity,
    MergedData,
    TimelineAnalysis,
    TimelineTrend,
)
from account_intel.models.account import (
    Account,
    ActionItem,
    ActionItemOwner,
    ActionItemStatus,
    Momentum,
    Risk,
    RiskSeverity,
    RiskType,
    TimelineEvent,
    TimelineEventType,
)
from account_intel.models.participant import Participant, ParticipantRole

logger = structlog.get_logger()

STAGE = "account_analyzer"

MOMENTUM_INSIGHTS = {
    Momentum.ACCELERATING: "Strong momentum - deal is progressing well",
    Momentum.STABLE: "Stable engagement - maintain current cadence",
    Momentum.STALLING: "Momentum slowing - proactive outreach recommended",
    Momentum.AT_RISK: "Deal at risk - immediate action needed",
}


def _clamp(score: float) -> int:
    return int(max(t.MOMENTUM_MIN, min(t.MOMENTUM_MAX, round(score))))


def _overdue(items: list[ActionItem], owner: ActionItemOwner) -> list[ActionItem]:
    return [i for i in items if i.status == ActionItemStatus.OVERDUE and i.owner == owner]


def calculate_days_since_contact(timeline: list[TimelineEvent], now: datetime) -> int:
    """Days since the latest timeline event, or the no-contact sentinel."""
    if not timeline:
        return t.NO_CONTACT_DAYS
    latest = max(event.date for event in timeline)
    return days_between(latest, now)


def calculate_engagement_velocity(
    timeline: list[TimelineEvent], now: datetime
) -> EngagementVelocity:
    """Bucket the events-per-week rate over the trailing window."""
    recent = [e for e in timeline if within_days(e.date, now, t.VELOCITY_WINDOW_DAYS)]
    per_week = len(recent) / t.VELOCITY_WINDOW_DAYS * 7

    if per_week >= t.VELOCITY_HIGH_PER_WEEK:
        return EngagementVelocity.HIGH
    if per_week >= t.VELOCITY_MEDIUM_PER_WEEK:
        return EngagementVelocity.MEDIUM
    return EngagementVelocity.LOW


def count_recent_calls(timeline: list[TimelineEvent], now: datetime) -> int:
    """Calls within the recent-call window."""
    return sum(
        1
        for e in timeline
        if e.kind == TimelineEventType.CALL
        and days_between(e.date, now) <= t.RECENT_CALL_WINDOW_DAYS
    )


def calculate_momentum_score(
    days_since_contact: int,
    participant_count: int,
    recent_calls: int,
    overdue_ours: int,
    overdue_theirs: int,
) -> int:
    """Score engagement momentum from 0 to 100.

    Starts at the base score and applies fixed deltas for contact recency,
    stakeholder breadth, recent calls and overdue items on each side.

    Args:
        days_since_contact: Days since the latest timeline event
        participant_count: Size of the external participant registry
        recent_calls: Calls in the recent-call window
        overdue_ours: Overdue items we own
        overdue_theirs: Overdue items the customer owns

    Returns:
        Clamped momentum score
    """
    score = t.MOMENTUM_BASE

    if days_since_contact <= t.RECENCY_VERY_RECENT_DAYS:
        score += t.RECENCY_VERY_RECENT_DELTA
    elif days_since_contact <= t.RECENCY_RECENT_DAYS:
        score += t.RECENCY_RECENT_DELTA
    elif days_since_contact > t.RECENCY_DORMANT_DAYS:
        score += t.RECENCY_DORMANT_DELTA
    elif days_since_contact > t.RECENCY_STALE_DAYS:
        score += t.RECENCY_STALE_DELTA

    if participant_count >= t.STAKEHOLDERS_BROAD:
        score += t.STAKEHOLDERS_BROAD_DELTA
    elif participant_count >= t.STAKEHOLDERS_HEALTHY:
        score += t.STAKEHOLDERS_HEALTHY_DELTA
    elif participant_count < t.STAKEHOLDERS_THIN:
        score += t.STAKEHOLDERS_THIN_DELTA

    if recent_calls >= t.RECENT_CALLS_MANY:
        score += t.RECENT_CALLS_MANY_DELTA
    elif recent_calls >= t.RECENT_CALLS_SOME:
        score += t.RECENT_CALLS_SOME_DELTA

    score -= overdue_ours * t.OVERDUE_OURS_PENALTY
    score -= overdue_theirs * t.OVERDUE_THEIRS_PENALTY

    return _clamp(score)


def categorize_momentum(score: int) -> Momentum:
    """Map a momentum score to its category."""
    if score >= t.MOMENTUM_ACCELERATING:
        return Momentum.ACCELERATING
    if score >= t.MOMENTUM_STABLE:
        return Momentum.STABLE
    if score >= t.MOMENTUM_STALLING:
        return Momentum.STALLING
    return Momentum.AT_RISK


def detect_risks(
    days_since_contact: int,
    days_in_stage: int,
    participants: dict[str, Participant],
    action_items: list[ActionItem],
    now: datetime,
) -> list[Risk]:
    """Evaluate every risk rule; all that match fire together.

    Args:
        days_since_contact: Days since the latest timeline event
        days_in_stage: Days the deal has been in its current stage
        participants: External participant registry
        action_items: All action items, overdue status applied
        now: Detection timestamp

    Returns:
        Risks in rule order
    """
    risks: list[Risk] = []

    if days_since_contact > t.STALE_CONTACT_MEDIUM_DAYS:
        risks.append(
            Risk(
                id="risk-stale-comm",
                type=RiskType.TIMELINE,
                severity=(
                    RiskSeverity.HIGH
                    if days_since_contact > t.STALE_CONTACT_HIGH_DAYS
                    else RiskSeverity.MEDIUM
                ),
                description=f"No contact in {days_since_contact} days",
                detected_date=now,
                mitigation="Schedule a check-in call or send an update",
            )
        )

    if days_in_stage > t.STUCK_STAGE_MEDIUM_DAYS:
        risks.append(
            Risk(
                id="risk-stuck-stage",
                type=RiskType.TIMELINE,
                severity=(
                    RiskSeverity.HIGH
                    if days_in_stage > t.STUCK_STAGE_HIGH_DAYS
                    else RiskSeverity.MEDIUM
                ),
                description=f"Deal has been in current stage for {days_in_stage} days",
                detected_date=now,
                mitigation="Identify and address blockers to move forward",
            )
        )

    if len(participants) < t.MULTITHREAD_MIN_PARTICIPANTS:
        risks.append(
            Risk(
                id="risk-single-thread",
                type=RiskType.STAKEHOLDER,
                severity=RiskSeverity.MEDIUM,
                description="Limited multi-threading - only engaging few stakeholders",
                detected_date=now,
                mitigation="Identify and engage additional decision makers",
            )
        )

    overdue_ours = _overdue(action_items, ActionItemOwner.OURS)
    if overdue_ours:
        risks.append(
            Risk(
                id="risk-overdue-ours",
                type=RiskType.TIMELINE,
                severity=(
                    RiskSeverity.HIGH
                    if len(overdue_ours) > t.OVERDUE_HIGH_COUNT
                    else RiskSeverity.MEDIUM
                ),
                description=f"{len(overdue_ours)} overdue action items on our side",
                detected_date=now,
                mitigation="Complete overdue items or communicate new timeline",
            )
        )

    overdue_theirs = _overdue(action_items, ActionItemOwner.THEIRS)
    if overdue_theirs:
        risks.append(
            Risk(
                id="risk-overdue-theirs",
                type=RiskType.TIMELINE,
                severity=(
                    RiskSeverity.HIGH
                    if len(overdue_theirs) > t.OVERDUE_HIGH_COUNT
                    else RiskSeverity.MEDIUM
                ),
                description=(
                    f"{len(overdue_theirs)} overdue action items waiting on customer"
                ),
                detected_date=now,
                mitigation="Follow up on pending items and offer assistance",
            )
        )

    roles = {p.role for p in participants.values()}

    if participants and ParticipantRole.CHAMPION not in roles:
        risks.append(
            Risk(
                id="risk-no-champion",
                type=RiskType.STAKEHOLDER,
                severity=RiskSeverity.MEDIUM,
                description="No clear internal champion identified",
                detected_date=now,
                mitigation="Identify and cultivate an internal advocate",
            )
        )

    if (
        len(participants) >= t.ECONOMIC_BUYER_MIN_PARTICIPANTS
        and ParticipantRole.ECONOMIC_BUYER not in roles
    ):
        risks.append(
            Risk(
                id="risk-no-buyer",
                type=RiskType.STAKEHOLDER,
                severity=RiskSeverity.HIGH,
                description="Economic buyer not yet engaged",
                detected_date=now,
                mitigation="Get introduction to budget holder before POC ends",
            )
        )

    return risks


def calculate_health_score(
    momentum_score: int, risks: list[Risk], action_items: list[ActionItem]
) -> int:
    """Momentum score less risk and overdue penalties, clamped."""
    high = sum(1 for r in risks if r.severity == RiskSeverity.HIGH)
    medium = sum(1 for r in risks if r.severity == RiskSeverity.MEDIUM)
    overdue = sum(1 for i in action_items if i.status == ActionItemStatus.OVERDUE)

    score = (
        momentum_score
        - high * t.HEALTH_HIGH_RISK_PENALTY
        - medium * t.HEALTH_MEDIUM_RISK_PENALTY
        - overdue * t.HEALTH_OVERDUE_PENALTY
    )
    return _clamp(score)


def generate_insights(
    momentum: Momentum,
    participant_count: int,
    risks: list[Risk],
    timeline: list[TimelineEvent],
    now: datetime,
) -> list[str]:
    """Select insight sentences from fixed templates."""
    insights = [MOMENTUM_INSIGHTS[momentum]]

    if participant_count >= t.MULTITHREAD_STRONG_PARTICIPANTS:
        insights.append(
            f"Strong multi-threading with {participant_count}+ stakeholders engaged"
        )

    for risk in risks:
        if risk.severity == RiskSeverity.HIGH and risk.mitigation:
            insights.append(f"Action needed: {risk.mitigation}")

    recent = [
        e for e in timeline if within_days(e.date, now, t.RECENT_ACTIVITY_WINDOW_DAYS)
    ]
    if len(recent) >= t.RECENT_ACTIVITY_MIN_EVENTS:
        insights.append("High recent activity indicates active engagement")

    return insights


def analyze_account(
    merged: MergedData,
    stage_start_date: datetime | date | str | None = None,
    now: datetime | None = None,
) -> AccountAnalysis:
    """Score and assess one merged account.

    Args:
        merged: Output of the merger
        stage_start_date: When the deal entered its current stage
        now: Reference time (default: current UTC time)

    Returns:
        AccountAnalysis with momentum, risks, health and insights

    Raises:
        PipelineInputError: If stage_start_date cannot be parsed
    """
    now = utc_now(now)
    stage_start = coerce_datetime(stage_start_date, STAGE, "stage_start_date")

    timeline = merged.timeline
    participants = merged.participants
    action_items = merged.action_items

    days_since_contact = calculate_days_since_contact(timeline, now)
    days_in_stage = days_between(stage_start, now) if stage_start else 0
    velocity = calculate_engagement_velocity(timeline, now)

    momentum_score = calculate_momentum_score(
        days_since_contact=days_since_contact,
        participant_count=len(participants),
        recent_calls=count_recent_calls(timeline, now),
        overdue_ours=len(_overdue(action_items, ActionItemOwner.OURS)),
        overdue_theirs=len(_overdue(action_items, ActionItemOwner.THEIRS)),
    )
    momentum = categorize_momentum(momentum_score)

    risks = detect_risks(days_since_contact, days_in_stage, participants, action_items, now)
    health_score = calculate_health_score(momentum_score, risks, action_items)
    insights = generate_insights(momentum, len(participants), risks, timeline, now)

    logger.info(
        "analyzed account",
        account=merged.account.name,
        momentum=momentum.value,
        momentum_score=momentum_score,
        health_score=health_score,
        risks=len(risks),
    )

    return AccountAnalysis(
        momentum=momentum,
        momentum_score=momentum_score,
        engagement_velocity=velocity,
        days_in_stage=days_in_stage,
        days_since_last_contact=days_since_contact,
        risks=risks,
        health_score=health_score,
        insights=insights,
    )


def apply_analysis_to_account(account: Account, analysis: AccountAnalysis) -> Account:
    """Return a copy of the account with analysis results applied."""
    return account.model_copy(
        update={
            "momentum": analysis.momentum,
            "days_in_stage": analysis.days_in_stage,
            "risks": list(analysis.risks),
        }
    )


def analyze_timeline(
    timeline: list[TimelineEvent], now: datetime | None = None
) -> TimelineAnalysis:
    """Describe call cadence and activity trend over the timeline.

    Call frequency counts calls in the trailing window before now. The trend
    compares event counts in the later half of the covered span against the
    earlier half.
    """
    if not timeline:
        return TimelineAnalysis()

    now = utc_now(now)
    events = sorted(timeline, key=lambda e: e.date)
    calls = [e for e in events if e.kind == TimelineEventType.CALL]

    total_duration = sum(c.duration_minutes or 0 for c in calls)
    average_duration = total_duration / len(calls) if calls else 0.0

    recent_calls = [c for c in calls if within_days(c.date, now, t.VELOCITY_WINDOW_DAYS)]
    call_frequency = len(recent_calls) / t.VELOCITY_WINDOW_DAYS * 7

    longest_gap = max(
        (days_between(a.date, b.date) for a, b in zip(events, events[1:])),
        default=0,
    )

    midpoint = events[0].date + (events[-1].date - events[0].date) / 2
    first_half = sum(1 for e in events if e.date < midpoint)
    second_half = len(events) - first_half

    trend = TimelineTrend.STABLE
    if second_half > first_half * t.TREND_INCREASING_RATIO:
        trend = TimelineTrend.INCREASING
    elif second_half < first_half * t.TREND_DECREASING_RATIO:
        trend = TimelineTrend.DECREASING

    return TimelineAnalysis(
        total_events=len(events),
        average_call_duration=round(average_duration, 1),
        call_frequency_per_week=round(call_frequency, 2),
        longest_gap_days=longest_gap,
        recent_trend=trend,
    )
