"""Competitive intelligence extraction from the account timeline.

Competitor names and generic competitive phrases are matched on word
boundaries so short aliases ("sap", "oci", "vs") do not fire inside other
words. Sentiment and usage phrases are plain substring checks within a
window around the mention.
"""

import re
from datetime import datetime

import structlog

from account_intel.intelligence import thresholds as t
from account_intel.intelligence.dates import utc_now, within_days
from account_intel.intelligence.schemas import (
    CompetitiveIntel,
    CompetitiveRisk,
    CompetitorMention,
    CompetitorProfile,
    MentionSource,
    Sentiment,
    SentimentBreakdown,
)
from account_intel.models.account import (
    SEVERITY_ORDER,
    RiskSeverity,
    TimelineEvent,
    TimelineEventType,
)

logger = structlog.get_logger()

UNKNOWN_COMPETITOR = "Unknown Competitor"

KNOWN_COMPETITORS: dict[str, list[str]] = {
    "Salesforce": ["salesforce", "sfdc", "sales cloud", "service cloud"],
    "Microsoft": ["microsoft", "msft", "dynamics", "azure", "teams"],
    "Google": ["google", "gcp", "google cloud", "workspace"],
    "AWS": ["aws", "amazon web services", "amazon"],
    "Snowflake": ["snowflake"],
    "Databricks": ["databricks"],
    "HubSpot": ["hubspot"],
    "Zendesk": ["zendesk"],
    "ServiceNow": ["servicenow", "service now"],
    "Workday": ["workday"],
    "SAP": ["sap", "s/4hana"],
    "Oracle": ["oracle", "oci"],
    "Slack": ["slack"],
    "Zoom": ["zoom"],
    "Datadog": ["datadog"],
    "Splunk": ["splunk"],
    "MongoDB": ["mongodb", "mongo"],
    "Elastic": ["elastic", "elasticsearch"],
    "Confluent": ["confluent", "kafka"],
    "HashiCorp": ["hashicorp", "terraform", "vault"],
}

COMPETITIVE_SIGNALS = [
    "competitor",
    "alternative",
    "also looking at",
    "evaluating",
    "compared to",
    "vs",
    "versus",
    "instead of",
    "switch from",
    "migrate from",
    "replace",
    "benchmark",
    "competitive",
    "other vendors",
    "other options",
]

# Phrases that mean the customer favors the competitor (a risk for us)
POSITIVE_FOR_COMPETITOR = [
    "prefer",
    "like",
    "better",
    "love",
    "great experience",
    "already using",
    "happy with",
    "satisfied",
]

# Phrases that mean the customer has trouble with the competitor (an opening)
NEGATIVE_FOR_COMPETITOR = [
    "issue",
    "problem",
    "challenge",
    "frustrated",
    "expensive",
    "difficult",
    "complex",
    "migrate from",
    "switch from",
    "moving away",
    "replacing",
    "limitations",
]

USAGE_SIGNALS = ["using", "currently on", "have", "running"]

DIFFERENTIATOR_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("expensive", "cost"), "Pricing/value advantage"),
    (("complex", "difficult"), "Ease of use/simplicity"),
    (("support", "help"), "Superior support"),
    (("integration", "connect"), "Better integrations"),
]

SOURCE_BY_KIND = {
    TimelineEventType.CALL: MentionSource.TRANSCRIPT,
    TimelineEventType.MEETING: MentionSource.CALENDAR,
    TimelineEventType.EMAIL: MentionSource.EMAIL,
}

SEVERITY_SCORE = {RiskSeverity.HIGH: 3, RiskSeverity.MEDIUM: 2, RiskSeverity.LOW: 1}


def _phrase_pattern(phrase: str) -> re.Pattern:
    return re.compile(rf"(?<!\w){re.escape(phrase)}(?!\w)")


_ALIAS_PATTERNS: list[tuple[str, list[re.Pattern]]] = [
    (name, [_phrase_pattern(alias) for alias in aliases])
    for name, aliases in KNOWN_COMPETITORS.items()
]
_SIGNAL_PATTERNS = [_phrase_pattern(signal) for signal in COMPETITIVE_SIGNALS]


def _searchable_text(event: TimelineEvent) -> str:
    return f"{event.title} {event.description or ''}".lower()


def find_competitor(text: str) -> tuple[str, re.Match] | None:
    """First competitor, in dictionary order, with an alias in the text."""
    for name, patterns in _ALIAS_PATTERNS:
        for pattern in patterns:
            match = pattern.search(text)
            if match:
                return name, match
    return None


def analyze_sentiment(text: str, start: int, end: int) -> Sentiment:
    """Classify customer sentiment toward a competitor mentioned at [start, end)."""
    window = text[
        max(0, start - t.SENTIMENT_WINDOW_CHARS) : end + t.SENTIMENT_WINDOW_CHARS
    ]
    positive = any(phrase in window for phrase in POSITIVE_FOR_COMPETITOR)
    negative = any(phrase in window for phrase in NEGATIVE_FOR_COMPETITOR)

    if positive and not negative:
        return Sentiment.POSITIVE
    if negative and not positive:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def extract_mention_context(text: str, start: int, end: int) -> str:
    """Snippet around a mention, trimmed to whole words at cut edges."""
    context_start = max(0, start - t.MENTION_CONTEXT_CHARS)
    context_end = min(len(text), end + t.MENTION_CONTEXT_CHARS)
    context = text[context_start:context_end]

    if context_start > 0:
        first_space = context.find(" ")
        if 0 < first_space < 20:
            context = "..." + context[first_space + 1 :]

    if context_end < len(text):
        last_space = context.rfind(" ")
        if last_space > len(context) - 20:
            context = context[:last_space] + "..."

    return context


def _generic_signal_context(text: str) -> str | None:
    for pattern in _SIGNAL_PATTERNS:
        match = pattern.search(text)
        if match:
            start = max(0, match.start() - t.SIGNAL_CONTEXT_BEFORE)
            return text[start : match.end() + t.SIGNAL_CONTEXT_AFTER]
    return None


def extract_mention(event: TimelineEvent, mention_id: str) -> CompetitorMention | None:
    """Extract at most one competitor mention from one event."""
    text = _searchable_text(event)
    source = SOURCE_BY_KIND.get(event.kind, MentionSource.SLACK)

    found = find_competitor(text)
    if found is not None:
        name, match = found
        return CompetitorMention(
            id=mention_id,
            competitor=name,
            context=extract_mention_context(text, match.start(), match.end()),
            sentiment=analyze_sentiment(text, match.start(), match.end()),
            date=event.date,
            source=source,
            source_id=event.id,
        )

    generic_context = _generic_signal_context(text)
    if generic_context is not None:
        return CompetitorMention(
            id=mention_id,
            competitor=UNKNOWN_COMPETITOR,
            context=generic_context,
            sentiment=Sentiment.NEUTRAL,
            date=event.date,
            source=source,
            source_id=event.id,
        )

    return None


def build_competitor_profiles(mentions: list[CompetitorMention]) -> list[CompetitorProfile]:
    """Aggregate mentions per competitor, most-mentioned first."""
    profiles: dict[str, CompetitorProfile] = {}

    for mention in mentions:
        key = mention.competitor.lower()
        profile = profiles.get(key)
        if profile is None:
            profile = CompetitorProfile(
                name=mention.competitor,
                normalized_name=key,
                first_mentioned=mention.date,
                last_mentioned=mention.date,
            )
            profiles[key] = profile

        profile.mention_count += 1
        breakdown = profile.sentiment_breakdown
        if mention.sentiment == Sentiment.POSITIVE:
            breakdown.positive += 1
        elif mention.sentiment == Sentiment.NEGATIVE:
            breakdown.negative += 1
        else:
            breakdown.neutral += 1
        profile.first_mentioned = min(profile.first_mentioned, mention.date)
        profile.last_mentioned = max(profile.last_mentioned, mention.date)

        theme = mention.context[: t.THEME_PREFIX_CHARS]
        if theme and theme not in profile.themes and len(profile.themes) < t.MAX_THEMES:
            profile.themes.append(theme)

    return sorted(profiles.values(), key=lambda p: p.mention_count, reverse=True)


def identify_competitive_risks(
    profiles: list[CompetitorProfile],
    mentions: list[CompetitorMention],
    now: datetime,
) -> list[CompetitiveRisk]:
    """Derive competitive risks, highest severity first."""
    risks: list[CompetitiveRisk] = []

    def add(
        competitor: str,
        severity: RiskSeverity,
        description: str,
        evidence: str,
        mitigation: str,
    ) -> None:
        risks.append(
            CompetitiveRisk(
                id=f"cr-{len(risks) + 1}",
                competitor=competitor,
                severity=severity,
                description=description,
                evidence=evidence,
                mitigation=mitigation,
            )
        )

    for profile in profiles:
        if profile.name == UNKNOWN_COMPETITOR:
            continue

        own_mentions = [m for m in mentions if m.competitor == profile.name]

        positive_ratio = profile.sentiment_breakdown.positive / profile.mention_count
        if (
            positive_ratio > t.POSITIVE_RATIO_HIGH
            and profile.mention_count >= t.POSITIVE_RATIO_MIN_MENTIONS
        ):
            add(
                profile.name,
                RiskSeverity.HIGH,
                f"Customer has positive sentiment toward {profile.name}",
                (
                    f"{profile.sentiment_breakdown.positive} positive mentions "
                    f"out of {profile.mention_count} total"
                ),
                f"Understand what they value about {profile.name} and address directly",
            )

        recent = [
            m for m in own_mentions if within_days(m.date, now, t.RECENT_MENTION_WINDOW_DAYS)
        ]
        if len(recent) >= t.RECENT_MENTIONS_MEDIUM:
            add(
                profile.name,
                RiskSeverity.MEDIUM,
                f"Frequent recent mentions of {profile.name}",
                f"{len(recent)} mentions in the last {t.RECENT_MENTION_WINDOW_DAYS} days",
                "Proactively address competitive comparison",
            )

        if any(
            signal in m.context.lower() for m in own_mentions for signal in USAGE_SIGNALS
        ):
            add(
                profile.name,
                RiskSeverity.HIGH,
                f"Customer may be currently using {profile.name}",
                "Detected usage indicators in conversations",
                (
                    "Understand their current experience and pain points "
                    f"with {profile.name}"
                ),
            )

    return sorted(risks, key=lambda r: SEVERITY_ORDER[r.severity])


def primary_sentiment(breakdown: SentimentBreakdown) -> str:
    """Label for the dominant sentiment; ties favor positive, then negative."""
    top = max(breakdown.positive, breakdown.negative, breakdown.neutral)
    if top == breakdown.positive:
        return "positive (risk)"
    if top == breakdown.negative:
        return "negative (opportunity)"
    return "neutral"


def generate_landscape_summary(profiles: list[CompetitorProfile], account_name: str) -> str:
    """One-paragraph summary of the competitive landscape."""
    if not profiles:
        return f"No competitive mentions detected in {account_name} conversations."

    top = profiles[: t.LANDSCAPE_TOP_COMPETITORS]
    if len(top) == 1:
        leader = top[0]
        return (
            f"{leader.name} has been mentioned {leader.mention_count} time(s). "
            f"Overall sentiment: {primary_sentiment(leader.sentiment_breakdown)}."
        )

    names = ", ".join(p.name for p in top)
    return (
        f"Competitive landscape includes {names}. {top[0].name} is most "
        f"frequently mentioned ({top[0].mention_count} times)."
    )


def extract_differentiators(mentions: list[CompetitorMention]) -> list[str]:
    """Our likely advantages, read from mentions where the competitor struggles."""
    found: list[str] = []
    for mention in mentions:
        if mention.sentiment != Sentiment.NEGATIVE:
            continue
        for keywords, differentiator in DIFFERENTIATOR_KEYWORDS:
            if differentiator not in found and any(k in mention.context for k in keywords):
                found.append(differentiator)
    return found


def extract_competitive_intel(
    timeline: list[TimelineEvent],
    account_name: str,
    now: datetime | None = None,
) -> CompetitiveIntel:
    """Extract competitor signal from the merged timeline.

    Args:
        timeline: Merged timeline, ascending by date
        account_name: Account display name for the summary
        now: Reference time for the recent-mention window

    Returns:
        CompetitiveIntel with profiles, mentions, risks and summary
    """
    now = utc_now(now)

    mentions: list[CompetitorMention] = []
    for event in timeline:
        mention = extract_mention(event, f"cm-{len(mentions) + 1}")
        if mention is not None:
            mentions.append(mention)

    profiles = build_competitor_profiles(mentions)
    risks = identify_competitive_risks(profiles, mentions, now)

    logger.info(
        "extracted competitive intel",
        account=account_name,
        competitors=len(profiles),
        mentions=len(mentions),
        risks=len(risks),
    )

    return CompetitiveIntel(
        competitors=profiles,
        mentions=mentions,
        landscape_summary=generate_landscape_summary(profiles, account_name),
        differentiators=extract_differentiators(mentions),
        risks=risks,
    )


def get_competitors_by_risk(intel: CompetitiveIntel) -> list[CompetitorProfile]:
    """Profiles ordered by summed risk severity, highest first."""
    scores: dict[str, int] = {}
    for risk in intel.risks:
        scores[risk.competitor] = (
            scores.get(risk.competitor, 0) + SEVERITY_SCORE[risk.severity]
        )
    return sorted(intel.competitors, key=lambda p: scores.get(p.name, 0), reverse=True)
