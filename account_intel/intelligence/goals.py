"""Goal generator: prioritized meeting objectives.

Goals come from four independent sources (deal stage templates, detected
risks, open action items and stakeholder gaps), then are deduplicated by
title prefix, sorted by priority and capped.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from account_intel.intelligence import thresholds as t
from account_intel.intelligence.schemas import Goal, GoalContext
from account_intel.models.account import ActionItemOwner, ActionItemStatus, RiskSeverity
from account_intel.models.participant import ParticipantRole

logger = structlog.get_logger()

STAGE_GOAL_PRIORITY = 2


@dataclass
class GoalTemplate:
    """A stage goal, with an optional condition that must hold to emit it."""

    title: str
    rationale: str
    approach: str | None = None
    condition: Callable[[GoalContext], bool] | None = None


@dataclass
class StageGoalTemplate:
    """Goals for every deal stage whose name contains one of the keywords."""

    stages: list[str]
    goals: list[GoalTemplate] = field(default_factory=list)


def has_economic_buyer(context: GoalContext) -> bool:
    """Check if any profiled participant holds the budget."""
    return any(
        p.role == ParticipantRole.ECONOMIC_BUYER for p in context.participants.values()
    )


STAGE_GOAL_TEMPLATES: list[StageGoalTemplate] = [
    StageGoalTemplate(
        stages=["discovery", "qualification", "initial"],
        goals=[
            GoalTemplate(
                title="Confirm decision-making process and timeline",
                rationale="Early-stage deals need clarity on how decisions are made",
                approach="Ask about evaluation criteria and who needs to sign off",
            ),
            GoalTemplate(
                title="Identify all key stakeholders",
                rationale="Multi-threading early improves win rates",
                approach="Ask who else should be involved in the evaluation",
            ),
            GoalTemplate(
                title="Understand current solution and pain points",
                rationale="Establishes baseline for value proposition",
                approach="Ask about current workflows and biggest challenges",
            ),
        ],
    ),
    StageGoalTemplate(
        stages=["poc", "proof of concept", "pilot", "trial", "evaluation"],
        goals=[
            GoalTemplate(
                title="Confirm POC success criteria are on track",
                rationale="Early identification of blockers prevents surprises",
                approach="Review each success criterion and current status",
            ),
            GoalTemplate(
                title="Address any technical blockers",
                rationale="Technical issues in POC can derail entire deal",
                approach="Ask directly about any challenges or concerns",
            ),
            GoalTemplate(
                title="Schedule executive briefing before POC ends",
                rationale="Economic buyers need to see value before procurement",
                approach="Request intro to leadership for a brief status update",
                condition=lambda ctx: not has_economic_buyer(ctx),
            ),
            GoalTemplate(
                title="Verify procurement timeline",
                rationale="Procurement often takes longer than expected",
                approach="Ask specific questions about approval process and timing",
            ),
        ],
    ),
    StageGoalTemplate(
        stages=["negotiation", "proposal", "contract", "legal"],
        goals=[
            GoalTemplate(
                title="Resolve outstanding contract terms",
                rationale="Legal back-and-forth can delay close significantly",
                approach="Identify remaining open items and decision makers",
            ),
            GoalTemplate(
                title="Confirm budget approval status",
                rationale="Budget surprises at this stage are deal killers",
                approach="Directly confirm budget has been allocated",
            ),
            GoalTemplate(
                title="Lock in implementation timeline",
                rationale="Urgency creates momentum toward close",
                approach="Propose specific dates for kickoff",
            ),
        ],
    ),
    StageGoalTemplate(
        stages=["closed", "won", "customer", "implementation"],
        goals=[
            GoalTemplate(
                title="Confirm implementation milestones",
                rationale="Successful implementation drives expansion",
                approach="Review timeline and identify any risks",
            ),
            GoalTemplate(
                title="Identify expansion opportunities",
                rationale="Happy customers are best source of growth",
                approach="Ask about other teams or use cases",
            ),
        ],
    ),
]


def match_stage_template(deal_stage: str | None) -> StageGoalTemplate | None:
    """First template whose stage keywords appear in the deal stage."""
    stage = (deal_stage or "unknown").lower()
    for template in STAGE_GOAL_TEMPLATES:
        if any(keyword in stage for keyword in template.stages):
            return template
    return None


def _stage_goals(context: GoalContext) -> list[dict]:
    template = match_stage_template(context.account.deal_stage)
    if template is None:
        return [
            {
                "priority": STAGE_GOAL_PRIORITY,
                "title": "Understand current status and next steps",
                "rationale": "Maintain momentum and clarity on path forward",
            }
        ]

    return [
        {
            "priority": STAGE_GOAL_PRIORITY,
            "title": goal.title,
            "rationale": goal.rationale,
            "suggested_approach": goal.approach,
        }
        for goal in template.goals
        if goal.condition is None or goal.condition(context)
    ]


def _risk_goals(context: GoalContext) -> list[dict]:
    goals = []
    for risk in context.analysis.risks:
        if risk.severity == RiskSeverity.HIGH:
            goals.append(
                {
                    "priority": 1,
                    "title": f"Address: {risk.description}",
                    "rationale": "High-severity risk that needs immediate attention",
                    "suggested_approach": risk.mitigation,
                    "related_risks": [risk.id],
                }
            )
        elif risk.severity == RiskSeverity.MEDIUM:
            goals.append(
                {
                    "priority": 3,
                    "title": f"Discuss: {risk.description}",
                    "rationale": "Medium risk worth addressing proactively",
                    "suggested_approach": risk.mitigation,
                    "related_risks": [risk.id],
                }
            )
    return goals


def _action_item_goals(context: GoalContext) -> list[dict]:
    goals = []
    open_items = [i for i in context.merged.action_items if i.is_open]
    theirs = [i for i in open_items if i.owner == ActionItemOwner.THEIRS]
    ours = [i for i in open_items if i.owner == ActionItemOwner.OURS]

    overdue_theirs = [i for i in theirs if i.status == ActionItemStatus.OVERDUE]
    if overdue_theirs:
        listed = "; ".join(
            i.description for i in overdue_theirs[: t.OVERDUE_GOAL_LISTED_ITEMS]
        )
        goals.append(
            {
                "priority": 1,
                "title": "Follow up on overdue customer action items",
                "rationale": f"{len(overdue_theirs)} items are past due: {listed}",
                "suggested_approach": (
                    "Ask for status update and offer assistance if blocked"
                ),
                "related_action_items": [i.id for i in overdue_theirs],
            }
        )

    pending_theirs = [i for i in theirs if i.status == ActionItemStatus.PENDING]
    if pending_theirs and not overdue_theirs:
        goals.append(
            {
                "priority": 3,
                "title": "Check status on pending customer items",
                "rationale": f"{len(pending_theirs)} items pending on customer side",
                "related_action_items": [i.id for i in pending_theirs],
            }
        )

    overdue_ours = [i for i in ours if i.status == ActionItemStatus.OVERDUE]
    if overdue_ours:
        goals.append(
            {
                "priority": 2,
                "title": "Deliver on our overdue commitments",
                "rationale": (
                    "We have overdue items - address these to maintain credibility"
                ),
                "suggested_approach": (
                    "Either complete before the call or set new expectations"
                ),
                "related_action_items": [i.id for i in overdue_ours],
            }
        )

    return goals


def _stakeholder_goals(context: GoalContext) -> list[dict]:
    goals = []
    profiles = list(context.participants.values())

    if (
        not has_economic_buyer(context)
        and len(profiles) >= t.ECONOMIC_BUYER_MIN_PARTICIPANTS
    ):
        goals.append(
            {
                "priority": 2,
                "title": "Get introduction to economic buyer",
                "rationale": (
                    "No budget holder engaged yet - critical for deal progression"
                ),
                "suggested_approach": (
                    "Ask champion for intro to person who approves budget"
                ),
            }
        )

    blockers = [p for p in profiles if p.role == ParticipantRole.BLOCKER]
    if blockers:
        goals.append(
            {
                "priority": 2,
                "title": "Address concerns of skeptical stakeholders",
                "rationale": f"{len(blockers)} potential blocker(s) identified",
                "suggested_approach": "Proactively ask about and address their concerns",
            }
        )

    if any(p.role == ParticipantRole.CHAMPION for p in profiles):
        goals.append(
            {
                "priority": 4,
                "title": "Equip champion with internal selling points",
                "rationale": "Champions need ammunition to advocate internally",
                "suggested_approach": "Share ROI data, case studies, or talking points",
            }
        )

    return goals


def deduplicate_goals(goals: list[Goal]) -> list[Goal]:
    """Drop goals whose lowercase title prefix was already seen."""
    seen: set[str] = set()
    deduped: list[Goal] = []
    for goal in goals:
        key = goal.title.lower()[: t.GOAL_DEDUPE_PREFIX]
        if key not in seen:
            seen.add(key)
            deduped.append(goal)
    return deduped


def generate_goals(context: GoalContext) -> list[Goal]:
    """Generate prioritized goals for a meeting.

    Args:
        context: Account, analysis, profiles and merged data

    Returns:
        At most five goals, deduplicated and sorted by priority (stable)
    """
    candidates = (
        _stage_goals(context)
        + _risk_goals(context)
        + _action_item_goals(context)
        + _stakeholder_goals(context)
    )
    goals = [
        Goal(id=f"goal-{n}", **fields) for n, fields in enumerate(candidates, start=1)
    ]

    ranked = sorted(deduplicate_goals(goals), key=lambda g: g.priority)
    top_goals = ranked[: t.MAX_GOALS]

    logger.info(
        "generated meeting goals",
        account=context.account.name,
        candidates=len(goals),
        goals=len(top_goals),
    )
    return top_goals


def get_top_goals(goals: list[Goal], n: int = 3) -> list[Goal]:
    """First n goals of an already-ranked list."""
    return goals[:n]
