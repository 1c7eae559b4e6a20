"""Talking point generator.

Each category has its own deterministic rule. Points are emitted in fixed
category order, numbered, then stably sorted by priority so that points of
equal priority keep their category order.
"""

import structlog

from account_intel.intelligence import thresholds as t
from account_intel.intelligence.formatter import format_days_ago
from account_intel.intelligence.goals import has_economic_buyer
from account_intel.intelligence.schemas import (
    TalkingPoint,
    TalkingPointCategory,
    TalkingPointContext,
)
from account_intel.models.account import (
    ActionItemOwner,
    ActionItemStatus,
    Momentum,
    RiskSeverity,
    TimelineEventType,
)
from account_intel.models.participant import ParticipantRole

logger = structlog.get_logger()

RISK_PHRASINGS = {
    "risk-single-thread": '"Who else on your team should we be engaging with?"',
    "risk-no-champion": (
        "\"Is there someone on your side who's been driving this internally?\""
    ),
    "risk-stale-comm": (
        "\"I want to make sure we're moving at the right pace for your timeline...\""
    ),
    "risk-overdue-ours": (
        '"I noticed we have some open items - what can we do to help move those forward?"'
    ),
    "risk-overdue-theirs": (
        '"I noticed we have some open items - what can we do to help move those forward?"'
    ),
}

STAKEHOLDER_POINTS = {
    ParticipantRole.CHAMPION: (
        "Strengthen champion relationship with {who}",
        "Champions need to feel supported and equipped",
        '"What would be most helpful for your internal discussions?"',
        2,
    ),
    ParticipantRole.BLOCKER: (
        "Address {who}'s concerns directly",
        "Potential blocker identified - proactively engage",
        '"I want to make sure we address any concerns you might have..."',
        1,
    ),
    ParticipantRole.ECONOMIC_BUYER: (
        "Emphasize ROI and business impact for {who}",
        "Economic buyer focuses on value and risk",
        "\"From a business perspective, here's the impact we're seeing...\"",
        1,
    ),
    ParticipantRole.TECHNICAL_EVALUATOR: (
        "Provide technical depth for {who}",
        "Technical evaluators need specifics",
        '"Happy to dive deeper into the architecture if helpful..."',
        2,
    ),
}


def _stage(context: TalkingPointContext) -> str:
    return (context.account.deal_stage or "").lower()


def _stage_matches(stage: str, *keywords: str) -> bool:
    return any(keyword in stage for keyword in keywords)


def _openers(context: TalkingPointContext) -> list[dict]:
    points = []
    analysis = context.analysis
    timeline = context.merged.timeline

    if analysis.days_since_last_contact <= t.OPENER_RECENT_DAYS and timeline:
        last_event = timeline[-1]
        noun = "conversation" if last_event.kind == TimelineEventType.CALL else "meeting"
        points.append(
            {
                "category": TalkingPointCategory.OPENER,
                "point": f"Reference last interaction: {last_event.title}",
                "context": (
                    f"Last touchpoint was {analysis.days_since_last_contact} days ago"
                ),
                "suggested_phrasing": (
                    f'"Great to reconnect - I wanted to follow up on our {noun} '
                    f'from {format_days_ago(analysis.days_since_last_contact)}..."'
                ),
                "priority": 1,
            }
        )

    if analysis.momentum == Momentum.ACCELERATING:
        points.append(
            {
                "category": TalkingPointCategory.OPENER,
                "point": "Acknowledge positive momentum",
                "context": "Account shows accelerating engagement",
                "suggested_phrasing": (
                    '"The team has been making great progress together..."'
                ),
                "priority": 2,
            }
        )
    elif analysis.momentum in (Momentum.STALLING, Momentum.AT_RISK):
        points.append(
            {
                "category": TalkingPointCategory.OPENER,
                "point": "Re-establish engagement",
                "context": f"Account momentum is {analysis.momentum.value}",
                "suggested_phrasing": (
                    "\"I wanted to reconnect and make sure we're aligned on priorities...\""
                ),
                "priority": 1,
            }
        )

    if _stage_matches(_stage(context), "poc", "pilot"):
        points.append(
            {
                "category": TalkingPointCategory.OPENER,
                "point": "POC progress check",
                "suggested_phrasing": (
                    "\"I'm eager to hear how the evaluation is going from your perspective...\""
                ),
                "priority": 2,
            }
        )

    return points


def _goal_support(context: TalkingPointContext) -> list[dict]:
    points = []
    for goal in context.goals[: t.GOAL_SUPPORT_TOP_GOALS]:
        if goal.priority == 1:
            points.append(
                {
                    "category": TalkingPointCategory.GOAL_SUPPORT,
                    "point": goal.title,
                    "context": goal.rationale,
                    "suggested_phrasing": (
                        f"Approach: {goal.suggested_approach}"
                        if goal.suggested_approach
                        else None
                    ),
                    "related_goal": goal.id,
                    "priority": 1,
                }
            )

        if goal.suggested_approach:
            points.append(
                {
                    "category": TalkingPointCategory.GOAL_SUPPORT,
                    "point": f"Support: {goal.title}",
                    "context": goal.suggested_approach,
                    "related_goal": goal.id,
                    "priority": 2 if goal.priority <= 2 else 3,
                }
            )
    return points


def _risk_mitigation(context: TalkingPointContext) -> list[dict]:
    points = []
    for risk in context.analysis.risks:
        if risk.severity == RiskSeverity.HIGH:
            point, priority = f"Address risk: {risk.description}", 1
        elif risk.severity == RiskSeverity.MEDIUM:
            point, priority = f"Probe: {risk.description}", 2
        else:
            continue
        points.append(
            {
                "category": TalkingPointCategory.RISK_MITIGATION,
                "point": point,
                "context": risk.mitigation,
                "suggested_phrasing": RISK_PHRASINGS.get(risk.id),
                "priority": priority,
            }
        )
    return points


def _stakeholder_specific(context: TalkingPointContext) -> list[dict]:
    points = []
    for profile in context.participants.values():
        who = profile.name or profile.email

        template = STAKEHOLDER_POINTS.get(profile.role)
        if template is not None:
            point, why, phrasing, priority = template
            points.append(
                {
                    "category": TalkingPointCategory.STAKEHOLDER_SPECIFIC,
                    "point": point.format(who=who),
                    "context": why,
                    "suggested_phrasing": phrasing,
                    "related_participant": profile.email,
                    "priority": priority,
                }
            )

        if profile.what_they_care_about:
            concerns = " and ".join(profile.what_they_care_about[: t.CARES_ABOUT_TOPICS])
            points.append(
                {
                    "category": TalkingPointCategory.STAKEHOLDER_SPECIFIC,
                    "point": (
                        f"Address {profile.name or 'participant'}'s priorities: {concerns}"
                    ),
                    "related_participant": profile.email,
                    "priority": 2,
                }
            )
    return points


def _action_follow_up(context: TalkingPointContext) -> list[dict]:
    points = []
    open_items = [i for i in context.merged.action_items if i.is_open]

    overdue_theirs = [
        i
        for i in open_items
        if i.owner == ActionItemOwner.THEIRS and i.status == ActionItemStatus.OVERDUE
    ]
    if overdue_theirs:
        item = overdue_theirs[0]
        points.append(
            {
                "category": TalkingPointCategory.ACTION_FOLLOW_UP,
                "point": f"Follow up on: {item.description}",
                "context": (
                    f"This item is overdue by {item.days_overdue or 'several'} days"
                ),
                "suggested_phrasing": (
                    '"I wanted to check in on [item] - is there anything blocking '
                    'progress that we can help with?"'
                ),
                "priority": 1,
            }
        )

    overdue_ours = [
        i
        for i in open_items
        if i.owner == ActionItemOwner.OURS and i.status == ActionItemStatus.OVERDUE
    ]
    if overdue_ours:
        item = overdue_ours[0]
        points.append(
            {
                "category": TalkingPointCategory.ACTION_FOLLOW_UP,
                "point": f"Acknowledge our overdue item: {item.description}",
                "context": "Maintain credibility by addressing our delays",
                "suggested_phrasing": (
                    "\"I want to acknowledge we're behind on [item] - here's our "
                    'updated plan..."'
                ),
                "priority": 1,
            }
        )

    pending_theirs = [
        i
        for i in open_items
        if i.owner == ActionItemOwner.THEIRS and i.status == ActionItemStatus.PENDING
    ]
    if pending_theirs and not overdue_theirs:
        points.append(
            {
                "category": TalkingPointCategory.ACTION_FOLLOW_UP,
                "point": f"Check status on {len(pending_theirs)} pending item(s)",
                "context": "Keep track of customer commitments",
                "priority": 3,
            }
        )

    return points


def _value_proposition(context: TalkingPointContext) -> list[dict]:
    points = []
    stage = _stage(context)

    if _stage_matches(stage, "poc", "pilot", "trial"):
        points.append(
            {
                "category": TalkingPointCategory.VALUE_PROPOSITION,
                "point": "Reinforce value demonstrated in evaluation",
                "context": "Connect POC results to business outcomes",
                "suggested_phrasing": (
                    "\"Based on what we've seen so far, the impact on [metric] has been...\""
                ),
                "priority": 2,
            }
        )

    if context.analysis.momentum in (Momentum.AT_RISK, Momentum.STALLING):
        points.append(
            {
                "category": TalkingPointCategory.VALUE_PROPOSITION,
                "point": "Re-emphasize core value proposition",
                "context": "Account needs re-engagement on value",
                "suggested_phrasing": (
                    "\"I want to make sure we're still aligned on the key problems "
                    "we're solving...\""
                ),
                "priority": 1,
            }
        )

    if _stage_matches(stage, "negotiation", "proposal", "contract"):
        points.append(
            {
                "category": TalkingPointCategory.VALUE_PROPOSITION,
                "point": "Quantify ROI for final decision",
                "context": "Economic justification for procurement",
                "suggested_phrasing": (
                    "\"Here's how we're calculating the return on this investment...\""
                ),
                "priority": 2,
            }
        )

    return points


def _next_steps(context: TalkingPointContext) -> list[dict]:
    stage = _stage(context)
    points = [
        {
            "category": TalkingPointCategory.NEXT_STEPS,
            "point": "Propose specific next step with timeline",
            "context": "Never leave a meeting without a clear next action",
            "suggested_phrasing": (
                "\"For next steps, I'd suggest we [action] by [date]. Does that work?\""
            ),
            "priority": 2,
        }
    ]

    if _stage_matches(stage, "discovery", "qualification"):
        points.append(
            {
                "category": TalkingPointCategory.NEXT_STEPS,
                "point": "Propose technical deep-dive or demo",
                "suggested_phrasing": (
                    '"Would it be helpful to schedule a technical session with your team?"'
                ),
                "priority": 2,
            }
        )

    if _stage_matches(stage, "poc", "pilot") and not has_economic_buyer(context):
        points.append(
            {
                "category": TalkingPointCategory.NEXT_STEPS,
                "point": "Request executive briefing",
                "context": "No economic buyer engaged yet",
                "suggested_phrasing": (
                    '"Would it make sense to schedule a brief update with [executive] '
                    'before we conclude the evaluation?"'
                ),
                "priority": 1,
            }
        )

    if _stage_matches(stage, "negotiation", "contract"):
        points.append(
            {
                "category": TalkingPointCategory.NEXT_STEPS,
                "point": "Propose implementation kickoff date",
                "context": "Create urgency toward close",
                "suggested_phrasing": (
                    '"If we can finalize by [date], we could kick off implementation '
                    'on [date]."'
                ),
                "priority": 1,
            }
        )

    days = context.analysis.days_since_last_contact
    if days > t.CADENCE_GAP_DAYS:
        points.append(
            {
                "category": TalkingPointCategory.NEXT_STEPS,
                "point": "Establish regular touchpoint cadence",
                "context": f"{days} days since last contact",
                "suggested_phrasing": (
                    '"To keep momentum, should we set up a regular check-in cadence?"'
                ),
                "priority": 2,
            }
        )

    return points


CATEGORY_RULES = [
    _openers,
    _goal_support,
    _risk_mitigation,
    _stakeholder_specific,
    _action_follow_up,
    _value_proposition,
    _next_steps,
]


def generate_talking_points(context: TalkingPointContext) -> list[TalkingPoint]:
    """Generate categorized talking points for a meeting.

    Args:
        context: Goal context plus the generated goals

    Returns:
        Talking points sorted by priority, category order kept within ties
    """
    candidates = [fields for rule in CATEGORY_RULES for fields in rule(context)]
    points = [
        TalkingPoint(id=f"tp-{n}", **fields)
        for n, fields in enumerate(candidates, start=1)
    ]
    points.sort(key=lambda p: p.priority)

    logger.info(
        "generated talking points",
        account=context.account.name,
        count=len(points),
    )
    return points


def get_talking_points_by_category(
    points: list[TalkingPoint], category: TalkingPointCategory
) -> list[TalkingPoint]:
    """Points in one category, order preserved."""
    return [p for p in points if p.category == category]


def get_top_talking_points(points: list[TalkingPoint], n: int = 5) -> list[TalkingPoint]:
    """First n points of an already-sorted list."""
    return points[:n]
