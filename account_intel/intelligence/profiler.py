"""Participant profiler: role, influence and confidence inference.

Classification tables are ordered (pattern, tag) lists evaluated
first-match-wins, so each rule can be tested on its own.
"""

import re
from datetime import datetime

import structlog

from account_intel.adapters.schemas import PersonInfo
from account_intel.intelligence import thresholds as t
from account_intel.intelligence.dates import utc_now
from account_intel.models.participant import (
    InfluenceLevel,
    Interaction,
    Participant,
    ParticipantProfile,
    ParticipantRole,
)

logger = structlog.get_logger()

ENRICHMENT_SOURCE = "research"

TITLE_ROLE_PATTERNS: list[tuple[re.Pattern, ParticipantRole]] = [
    (re.compile(r"\b(ceo|cto|cfo|coo|ciso|cio)\b", re.I), ParticipantRole.ECONOMIC_BUYER),
    (re.compile(r"\b(vp|vice president|svp|evp)\b", re.I), ParticipantRole.ECONOMIC_BUYER),
    (re.compile(r"\b(director|head of)\b", re.I), ParticipantRole.DECISION_MAKER),
    (
        re.compile(r"\b(engineer|developer|architect)\b", re.I),
        ParticipantRole.TECHNICAL_EVALUATOR,
    ),
    (
        re.compile(r"\b(security|infosec|cyber)\b", re.I),
        ParticipantRole.TECHNICAL_EVALUATOR,
    ),
    (
        re.compile(r"\b(procurement|purchasing|buyer)\b", re.I),
        ParticipantRole.ECONOMIC_BUYER,
    ),
    (re.compile(r"\bmanager\b", re.I), ParticipantRole.INFLUENCER),
    (re.compile(r"\b(analyst|specialist)\b", re.I), ParticipantRole.INFLUENCER),
]

# Keyword scoring over interaction text; ties go to the earlier role
ROLE_KEYWORDS: dict[ParticipantRole, list[str]] = {
    ParticipantRole.CHAMPION: [
        "advocate",
        "sponsor",
        "supporter",
        "driving",
        "pushing",
        "excited",
        "enthusiastic",
    ],
    ParticipantRole.BLOCKER: [
        "concern",
        "hesitant",
        "pushback",
        "skeptical",
        "opposed",
        "blocking",
        "resistant",
    ],
    ParticipantRole.ECONOMIC_BUYER: [
        "budget",
        "approve",
        "sign off",
        "authorize",
        "procurement",
        "purchase",
        "contract",
        "vp",
        "director",
        "head of",
        "chief",
    ],
    ParticipantRole.TECHNICAL_EVALUATOR: [
        "evaluate",
        "test",
        "poc",
        "proof of concept",
        "technical",
        "engineer",
        "architect",
        "developer",
        "security",
        "infrastructure",
    ],
    ParticipantRole.DECISION_MAKER: [
        "decide",
        "final say",
        "approval",
        "executive",
        "leader",
        "manager",
        "director",
    ],
    ParticipantRole.INFLUENCER: [
        "recommend",
        "suggest",
        "advise",
        "consult",
        "stakeholder",
        "input",
    ],
}

INFLUENCE_PATTERNS: list[tuple[re.Pattern, InfluenceLevel]] = [
    (
        re.compile(r"\b(ceo|cto|cfo|coo|ciso|cio|chief)\b", re.I),
        InfluenceLevel.HIGH,
    ),
    (re.compile(r"\b(vp|vice president|svp|evp)\b", re.I), InfluenceLevel.HIGH),
    (re.compile(r"\b(director|head of)\b", re.I), InfluenceLevel.HIGH),
    (re.compile(r"\b(senior|sr\.?|principal|staff)\b", re.I), InfluenceLevel.MEDIUM),
    (re.compile(r"\b(manager|lead)\b", re.I), InfluenceLevel.MEDIUM),
    (re.compile(r"\b(junior|jr\.?|associate|intern)\b", re.I), InfluenceLevel.LOW),
]

INTEREST_KEYWORDS: list[tuple[str, str]] = [
    ("security", "Security"),
    ("compliance", "Compliance"),
    ("performance", "Performance"),
    ("cost", "Cost"),
    ("budget", "Budget"),
    ("timeline", "Timeline"),
    ("velocity", "Team velocity"),
    ("scalab", "Scalability"),
    ("integrat", "Integration"),
    ("deploy", "Deployment"),
    ("governance", "Governance"),
    ("audit", "Audit"),
    ("observab", "Observability"),
]

REQUIRED_STAKEHOLDERS: list[tuple[ParticipantRole, str]] = [
    (ParticipantRole.ECONOMIC_BUYER, "Economic buyer not yet identified"),
    (ParticipantRole.TECHNICAL_EVALUATOR, "Technical evaluator not yet engaged"),
    (ParticipantRole.CHAMPION, "No clear champion identified"),
]

ROLE_NOTES = {
    ParticipantRole.TECHNICAL_EVALUATOR: "Lead with technical depth and specifics.",
    ParticipantRole.ECONOMIC_BUYER: "Focus on ROI, business value, and outcomes.",
    ParticipantRole.CHAMPION: "They are an advocate - keep them informed and engaged.",
    ParticipantRole.BLOCKER: "Address their concerns directly and proactively.",
}


def _interaction_text(participant: Participant) -> str:
    parts: list[str] = []
    for interaction in participant.interactions:
        parts.append(interaction.title or "")
        parts.append(interaction.summary or "")
    return " ".join(parts).lower()


def infer_role(participant: Participant) -> ParticipantRole:
    """Infer a participant's buying role.

    Title patterns are checked first, first match wins. Without a title
    match, each role's keywords are counted in the interaction text and the
    highest count wins.
    """
    if participant.title:
        for pattern, role in TITLE_ROLE_PATTERNS:
            if pattern.search(participant.title):
                return role

    text = _interaction_text(participant)
    if not text.strip():
        return ParticipantRole.UNKNOWN

    best_role = ParticipantRole.UNKNOWN
    best_score = 0
    for role, keywords in ROLE_KEYWORDS.items():
        score = sum(1 for keyword in keywords if keyword in text)
        if score > best_score:
            best_role, best_score = role, score
    return best_role


def infer_influence(participant: Participant) -> InfluenceLevel:
    """Infer influence from title, falling back to interaction count."""
    if participant.title:
        for pattern, level in INFLUENCE_PATTERNS:
            if pattern.search(participant.title):
                return level

    if participant.total_interactions >= t.INFLUENCE_HIGH_INTERACTIONS:
        return InfluenceLevel.HIGH
    if participant.total_interactions >= t.INFLUENCE_MEDIUM_INTERACTIONS:
        return InfluenceLevel.MEDIUM
    return InfluenceLevel.LOW


def calculate_confidence(participant: Participant) -> float:
    """Fraction of profile signals present, from 0 to 1.

    Six signals count fully (name, title, company, profile link,
    background, at least one interaction); a known role earns partial
    credit and is counted as a seventh signal.

    The denominator is always seven, so a sparse profile scores low
    instead of scoring 1.0 on the few signals it does have.
    """
    signals = [
        bool(participant.name),
        bool(participant.title),
        bool(participant.company),
        bool(participant.linkedin_url),
        bool(participant.background),
        bool(participant.interactions),
    ]
    present = float(sum(signals))
    factors = len(signals) + 1

    if participant.role != ParticipantRole.UNKNOWN:
        present += t.ROLE_PARTIAL_CREDIT

    return round(present / factors, 2)


def analyze_interests(interactions: list[Interaction]) -> list[str]:
    """Topics that come up in a participant's interactions."""
    text = " ".join(
        f"{i.title} {i.summary or ''} {' '.join(i.key_points)}" for i in interactions
    ).lower()
    return [topic for keyword, topic in INTEREST_KEYWORDS if keyword in text]


def generate_communication_notes(profile: Participant) -> str | None:
    """Short guidance on how to engage this participant."""
    notes: list[str] = []

    role_note = ROLE_NOTES.get(profile.role)
    if role_note:
        notes.append(role_note)

    if profile.influence == InfluenceLevel.HIGH:
        notes.append("Key stakeholder - ensure executive-level communication.")

    if profile.total_interactions >= t.FREQUENT_CONTACT_INTERACTIONS:
        notes.append("Well-established relationship.")
    elif profile.total_interactions == 0:
        notes.append("New contact - introduce yourself and establish rapport.")

    return " ".join(notes) if notes else None


def enrich_participant(
    participant: Participant,
    person_info: PersonInfo | None = None,
    now: datetime | None = None,
) -> ParticipantProfile:
    """Build a profile for one participant.

    Person research fills fields that are still empty; role, influence and
    confidence are then inferred from the combined record.

    Args:
        participant: Participant from the merged registry
        person_info: Optional research record for the same person
        now: Enrichment timestamp (default: current UTC time)

    Returns:
        New ParticipantProfile; the input is not modified
    """
    data = participant.model_dump()
    enrichment_source = None
    enriched_at = None

    if person_info is not None:
        data["name"] = data["name"] or person_info.name or ""
        data["title"] = data["title"] or person_info.title or ""
        data["company"] = data["company"] or person_info.company or ""
        data["linkedin_url"] = data["linkedin_url"] or person_info.linkedin_url
        data["background"] = data["background"] or person_info.background
        enrichment_source = ENRICHMENT_SOURCE
        enriched_at = utc_now(now)

    profile = ParticipantProfile(
        **data,
        enrichment_source=enrichment_source,
        enriched_at=enriched_at,
    )

    profile.role = infer_role(profile)
    profile.influence = infer_influence(profile)
    if not profile.what_they_care_about:
        profile.what_they_care_about = analyze_interests(profile.interactions)
    if not profile.communication_notes:
        profile.communication_notes = generate_communication_notes(profile)
    profile.confidence = calculate_confidence(profile)

    return profile


def profile_participants(
    participants: dict[str, Participant],
    person_info: dict[str, PersonInfo] | None = None,
    now: datetime | None = None,
) -> dict[str, ParticipantProfile]:
    """Profile every participant in the registry.

    Args:
        participants: Registry keyed by lowercase email
        person_info: Optional research records keyed by email
        now: Enrichment timestamp

    Returns:
        Profiles keyed by the same lowercase emails
    """
    people = {email.lower(): info for email, info in (person_info or {}).items()}
    profiles = {
        email: enrich_participant(participant, people.get(email), now)
        for email, participant in participants.items()
    }

    logger.info(
        "profiled participants",
        count=len(profiles),
        enriched=sum(1 for p in profiles.values() if p.enrichment_source),
    )
    return profiles


def identify_missing_stakeholders(profiles: list[Participant]) -> list[str]:
    """One message per required buying role that nobody fills."""
    roles = {p.role for p in profiles}
    return [message for role, message in REQUIRED_STAKEHOLDERS if role not in roles]
