"""Dossier service orchestrating source gathering and pipeline runs.

Provides a single entry point for producing a dossier, choosing between
the full pipeline and the quick templated dossier:
- quick mode requested by the caller
- no source data available
- the full pipeline failed unexpectedly
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

import structlog

from account_intel.adapters.base import DataSources
from account_intel.adapters.gatherer import SourceGatherer
from account_intel.config import settings
from account_intel.intelligence.assembler import (
    assemble_dossier,
    create_quick_dossier,
    validate_dossier,
)
from account_intel.intelligence.emails import is_external_email
from account_intel.intelligence.errors import PipelineInputError
from account_intel.intelligence.formatter import (
    format_competitive_intel_as_text,
    format_goals_as_text,
    format_talking_points_as_text,
)
from account_intel.intelligence.schemas import AssemblerContext, AssemblerResult
from account_intel.models.dossier import Dossier, DossierValidation

logger = structlog.get_logger()

GenerationMode = Literal["full", "quick"]


@dataclass
class GenerationResult:
    """Result of dossier generation."""

    dossier: Dossier
    mode: GenerationMode
    validation: DossierValidation
    warnings: list[str] = field(default_factory=list)
    duration_ms: int = 0
    preview: str = ""
    """Plain-text goals, talking points and competitor summary."""


def build_preview(result: AssemblerResult) -> str:
    """Plain-text preview of the pipeline's guidance."""
    sections = []
    if result.goals:
        sections.append("**Goals**\n" + format_goals_as_text(result.goals))
    if result.talking_points:
        sections.append(format_talking_points_as_text(result.talking_points))
    if result.competitive_intel.competitors:
        sections.append(format_competitive_intel_as_text(result.competitive_intel))
    return "\n\n".join(sections)


class DossierService:
    """Produces validated dossiers, degrading to quick mode when needed."""

    def __init__(self, gatherer: SourceGatherer | None = None):
        """Initialize the dossier service.

        Args:
            gatherer: Source gatherer for generate_for_meeting (optional)
        """
        self._gatherer = gatherer

    @property
    def configured_sources(self) -> list[str]:
        """Sources the gatherer can fetch from."""
        if self._gatherer is None:
            return []
        return self._gatherer.configured_sources

    def generate(
        self,
        context: AssemblerContext,
        sources: DataSources | None = None,
        quick: bool = False,
        now: datetime | None = None,
    ) -> GenerationResult:
        """Generate a dossier from already-gathered sources.

        Args:
            context: Meeting, account identity and deal data
            sources: Raw record collections (default: none)
            quick: Skip the pipeline and build the templated dossier
            now: Reference time for the pipeline (default: current UTC time)

        Returns:
            GenerationResult with the dossier, mode and validation warnings

        Raises:
            PipelineInputError: If an explicit argument is malformed
        """
        started = time.perf_counter()
        sources = sources or DataSources()
        warnings: list[str] = []
        mode: GenerationMode = "quick"
        preview = ""

        if quick:
            dossier = self._quick(context, now)
        elif sources.is_empty():
            warnings.append("No source data available; generated quick dossier")
            dossier = self._quick(context, now)
        else:
            try:
                result = assemble_dossier(context, sources, now)
                dossier = result.dossier
                preview = build_preview(result)
                mode = "full"
            except PipelineInputError:
                raise
            except Exception as e:
                logger.error(
                    "dossier pipeline failed, falling back to quick dossier",
                    account=context.account_name,
                    meeting=context.meeting.title,
                    error=str(e),
                )
                warnings.append(f"Full pipeline failed ({e}); generated quick dossier")
                dossier = self._quick(context, now)

        if sources.failed_sources:
            warnings.append(
                f"Sources unavailable: {', '.join(sources.failed_sources)}"
            )

        validation = validate_dossier(dossier)
        warnings.extend(validation.issues)

        duration_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "dossier generated",
            account=context.account_name,
            mode=mode,
            is_valid=validation.is_valid,
            warnings=len(warnings),
            duration_ms=duration_ms,
        )

        return GenerationResult(
            dossier=dossier,
            mode=mode,
            validation=validation,
            warnings=warnings,
            duration_ms=duration_ms,
            preview=preview,
        )

    async def generate_for_meeting(
        self,
        context: AssemblerContext,
        days: int | None = None,
        quick: bool = False,
        now: datetime | None = None,
    ) -> GenerationResult:
        """Gather sources from the configured adapters, then generate.

        Without a gatherer this is equivalent to generating from no data.
        """
        sources = DataSources()
        if self._gatherer is not None and not quick:
            internal_domains = context.internal_domains or settings.internal_domains
            external_emails = [
                a.email
                for a in context.meeting.attendees
                if is_external_email(a.email, internal_domains)
            ]
            sources = await self._gatherer.gather(
                account_name=context.account_name,
                account_domain=context.account_domain,
                attendee_emails=external_emails,
                days=days or settings.days_of_history,
            )
        return self.generate(context, sources, quick=quick, now=now)

    def _quick(self, context: AssemblerContext, now: datetime | None) -> Dossier:
        return create_quick_dossier(
            context.meeting,
            context.account_name,
            context.account_domain,
            now=now,
            internal_domains=context.internal_domains,
        )
