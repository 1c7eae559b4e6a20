"""Domain models for the account intelligence pipeline.

This module exports the models shared across pipeline stages:
- Account, TimelineEvent, ActionItem, Risk: the merged account aggregate
- Participant, ParticipantProfile, InternalParticipant: stakeholders
- Meeting, Attendee: the meeting being prepared for
- Dossier and its sections: the assembled output
"""

from account_intel.models.account import (
    Account,
    ActionItem,
    ActionItemOwner,
    ActionItemStatus,
    Contact,
    Momentum,
    Risk,
    RiskSeverity,
    RiskType,
    TimelineEvent,
    TimelineEventType,
)
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
    InfluenceLevel,
    Interaction,
    InteractionType,
    InternalParticipant,
    Participant,
    ParticipantProfile,
    ParticipantRole,
)

__all__ = [
    # Account
    "Account",
    "ActionItem",
    "ActionItemOwner",
    "ActionItemStatus",
    "Contact",
    "Momentum",
    "Risk",
    "RiskSeverity",
    "RiskType",
    "TimelineEvent",
    "TimelineEventType",
    # Participant
    "InfluenceLevel",
    "Interaction",
    "InteractionType",
    "InternalParticipant",
    "Participant",
    "ParticipantProfile",
    "ParticipantRole",
    # Meeting
    "Attendee",
    "Meeting",
    # Dossier
    "CompetitiveIntelSection",
    "Dossier",
    "DossierMetadata",
    "DossierValidation",
    "ExecutiveSummary",
    "StrategicInsights",
]
