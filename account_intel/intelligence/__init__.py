"""Account intelligence pipeline.

This module provides the deterministic stages that turn raw engagement
records into a meeting prep dossier:
- merge_all_data: fold calls, chat and calendar into one account history
- analyze_account: momentum, health, risks and insights
- profile_participants: stakeholder roles, influence and interests
- generate_goals / generate_talking_points: meeting guidance
- extract_competitive_intel: competitor mentions and threats
- assemble_dossier / create_quick_dossier / validate_dossier: the dossier
"""

from account_intel.intelligence.analyzer import analyze_account, apply_analysis_to_account
from account_intel.intelligence.assembler import (
    assemble_dossier,
    create_quick_dossier,
    validate_dossier,
)
from account_intel.intelligence.competitive import (
    extract_competitive_intel,
    get_competitors_by_risk,
)
from account_intel.intelligence.errors import PipelineInputError
from account_intel.intelligence.goals import generate_goals, get_top_goals
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
    MergedData,
    MergeOptions,
    TalkingPoint,
    TalkingPointCategory,
    TalkingPointContext,
)
from account_intel.intelligence.talking_points import (
    generate_talking_points,
    get_talking_points_by_category,
)

__all__ = [
    # Stages
    "analyze_account",
    "apply_analysis_to_account",
    "assemble_dossier",
    "create_quick_dossier",
    "extract_competitive_intel",
    "generate_goals",
    "generate_talking_points",
    "get_competitors_by_risk",
    "get_talking_points_by_category",
    "get_top_goals",
    "identify_missing_stakeholders",
    "merge_all_data",
    "profile_participants",
    "validate_dossier",
    # Schemas
    "AccountAnalysis",
    "AssemblerContext",
    "AssemblerResult",
    "CompetitiveIntel",
    "Goal",
    "GoalContext",
    "MergedData",
    "MergeOptions",
    "TalkingPoint",
    "TalkingPointCategory",
    "TalkingPointContext",
    # Errors
    "PipelineInputError",
]
