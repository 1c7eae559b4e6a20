"""Plain-text formatting for pipeline artifacts.

Used for log previews and the API's text preview; renderers that produce
documents work from the Dossier model instead.
"""

from account_intel.intelligence.competitive import primary_sentiment
from account_intel.intelligence.schemas import (
    CompetitiveIntel,
    Goal,
    TalkingPoint,
    TalkingPointCategory,
)

CATEGORY_LABELS = {
    TalkingPointCategory.OPENER: "Opening",
    TalkingPointCategory.GOAL_SUPPORT: "Goal Support",
    TalkingPointCategory.RISK_MITIGATION: "Risk Mitigation",
    TalkingPointCategory.STAKEHOLDER_SPECIFIC: "Stakeholder-Specific",
    TalkingPointCategory.ACTION_FOLLOW_UP: "Action Follow-ups",
    TalkingPointCategory.VALUE_PROPOSITION: "Value Reinforcement",
    TalkingPointCategory.NEXT_STEPS: "Next Steps",
}


def format_days_ago(days: int) -> str:
    """Human phrasing for a day count.

    Examples:
        >>> format_days_ago(0)
        'today'
        >>> format_days_ago(10)
        'last week'
        >>> format_days_ago(45)
        '1 months ago'
    """
    if days == 0:
        return "today"
    if days == 1:
        return "yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 14:
        return "last week"
    if days < 30:
        return f"{days // 7} weeks ago"
    return f"{days // 30} months ago"


def format_goals_as_text(goals: list[Goal]) -> str:
    """Numbered goal list with rationale under each title."""
    return "\n\n".join(
        f"{n}. {goal.title}\n   → {goal.rationale}"
        for n, goal in enumerate(goals, start=1)
    )


def format_talking_points_as_text(points: list[TalkingPoint]) -> str:
    """Talking points grouped under category labels, in first-seen order."""
    by_category: dict[TalkingPointCategory, list[TalkingPoint]] = {}
    for point in points:
        by_category.setdefault(point.category, []).append(point)

    sections = []
    for category, category_points in by_category.items():
        lines = []
        for point in category_points:
            text = f"• {point.point}"
            if point.suggested_phrasing:
                text += f"\n  {point.suggested_phrasing}"
            lines.append(text)
        sections.append(f"**{CATEGORY_LABELS[category]}**\n" + "\n".join(lines))

    return "\n\n".join(sections)


def format_competitive_intel_as_text(intel: CompetitiveIntel) -> str:
    """Landscape, top competitors, risks and differentiators as text."""
    sections = [f"**Competitive Landscape**\n{intel.landscape_summary}"]

    if intel.competitors:
        lines = [
            f"• {c.name}: {c.mention_count} mention(s), "
            f"sentiment: {primary_sentiment(c.sentiment_breakdown)}"
            for c in intel.competitors[:5]
        ]
        sections.append("**Competitors Mentioned**\n" + "\n".join(lines))

    if intel.risks:
        lines = [f"• [{r.severity.value}] {r.description}" for r in intel.risks[:3]]
        sections.append("**Competitive Risks**\n" + "\n".join(lines))

    if intel.differentiators:
        sections.append(
            "**Potential Differentiators**\n• " + "\n• ".join(intel.differentiators)
        )

    return "\n\n".join(sections)
