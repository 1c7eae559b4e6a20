"""API endpoints for dossier generation.

Provides REST endpoints for:
- POST /dossiers: full pipeline over caller-supplied source records
- POST /dossiers/meeting: full pipeline over records gathered from adapters
- POST /dossiers/quick: templated dossier from the meeting alone
"""

from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from account_intel.adapters.base import DataSources
from account_intel.adapters.schemas import CompanyInfo, PersonInfo
from account_intel.intelligence.errors import PipelineInputError
from account_intel.intelligence.schemas import AssemblerContext
from account_intel.models.dossier import Dossier, DossierValidation
from account_intel.models.meeting import Meeting
from account_intel.service import DossierService, GenerationResult

router = APIRouter(prefix="/dossiers", tags=["dossiers"])


class QuickDossierRequest(BaseModel):
    """Request body for quick dossier generation."""

    meeting: Meeting = Field(description="The meeting to prepare for")
    account_name: str = Field(min_length=1, description="Account display name")
    account_domain: str = Field(min_length=1, description="Account email domain")


class DealDossierRequest(QuickDossierRequest):
    """Meeting plus deal data shared by the pipeline endpoints."""

    deal_stage: str | None = Field(default=None, description="Free-text deal stage")
    deal_value: float | None = Field(default=None, ge=0.0)
    stage_start_date: str | None = Field(
        default=None, description="When the deal entered its stage (ISO 8601)"
    )
    internal_domains: list[str] | None = Field(
        default=None, description="Override for our own email domains"
    )
    quick: bool = Field(default=False, description="Skip the full pipeline")
    as_of: datetime | None = Field(
        default=None, description="Reference time (default: now)"
    )


class DossierRequest(DealDossierRequest):
    """Request body for dossier generation over supplied records."""

    calls: list[dict[str, Any]] = Field(default_factory=list)
    chat_messages: list[dict[str, Any]] = Field(default_factory=list)
    calendar_events: list[dict[str, Any]] = Field(default_factory=list)
    people: dict[str, PersonInfo] = Field(
        default_factory=dict, description="Person research keyed by email"
    )
    company: CompanyInfo | None = Field(default=None)


class MeetingDossierRequest(DealDossierRequest):
    """Request body for dossier generation from the configured sources."""

    days: int | None = Field(
        default=None, ge=1, le=365, description="Look-back window in days"
    )


class DossierResponse(BaseModel):
    """Response from dossier endpoints."""

    dossier: Dossier
    validation: DossierValidation
    warnings: list[str] = Field(default_factory=list)
    mode: str = Field(description="full or quick")
    processing_time_ms: int = Field(ge=0)
    preview: str = Field(default="", description="Plain-text guidance preview")


def get_dossier_service() -> DossierService:
    """Dependency to get DossierService instance from app state.

    Returns:
        DossierService from app state

    Raises:
        HTTPException: If service not initialized
    """
    from account_intel.main import app

    if not hasattr(app.state, "dossier_service"):
        raise HTTPException(
            status_code=503,
            detail="DossierService not initialized",
        )
    return app.state.dossier_service


def _deal_context(request: DealDossierRequest) -> AssemblerContext:
    return AssemblerContext(
        meeting=request.meeting,
        account_name=request.account_name,
        account_domain=request.account_domain,
        deal_stage=request.deal_stage,
        deal_value=request.deal_value,
        stage_start_date=request.stage_start_date,
        internal_domains=request.internal_domains,
    )


def _to_response(result: GenerationResult) -> DossierResponse:
    return DossierResponse(
        dossier=result.dossier,
        validation=result.validation,
        warnings=result.warnings,
        mode=result.mode,
        processing_time_ms=result.duration_ms,
        preview=result.preview,
    )


@router.post("", response_model=DossierResponse)
async def generate_dossier(
    request: DossierRequest,
    service: Annotated[DossierService, Depends(get_dossier_service)],
) -> DossierResponse:
    """Generate a dossier from supplied source records.

    Malformed records are dropped with a warning. An unparsable explicit
    argument such as stage_start_date returns 422 naming the stage and field.
    """
    context = _deal_context(request)
    sources = DataSources(
        calls=request.calls,
        chat_messages=request.chat_messages,
        calendar_events=request.calendar_events,
        people=request.people,
        company=request.company,
    )

    try:
        result = service.generate(
            context, sources, quick=request.quick, now=request.as_of
        )
    except PipelineInputError as e:
        raise HTTPException(
            status_code=422,
            detail={"stage": e.stage, "field": e.field, "message": e.message},
        )

    return _to_response(result)


@router.post("/meeting", response_model=DossierResponse)
async def generate_meeting_dossier(
    request: MeetingDossierRequest,
    service: Annotated[DossierService, Depends(get_dossier_service)],
) -> DossierResponse:
    """Gather records from the configured sources, then generate.

    Only external attendees are looked up. With no sources configured this
    returns the quick dossier with a warning.
    """
    try:
        result = await service.generate_for_meeting(
            _deal_context(request),
            days=request.days,
            quick=request.quick,
            now=request.as_of,
        )
    except PipelineInputError as e:
        raise HTTPException(
            status_code=422,
            detail={"stage": e.stage, "field": e.field, "message": e.message},
        )

    return _to_response(result)


@router.post("/quick", response_model=DossierResponse)
async def generate_quick_dossier(
    request: QuickDossierRequest,
    service: Annotated[DossierService, Depends(get_dossier_service)],
) -> DossierResponse:
    """Generate the templated dossier without any source data."""
    context = AssemblerContext(
        meeting=request.meeting,
        account_name=request.account_name,
        account_domain=request.account_domain,
    )
    return _to_response(service.generate(context, quick=True))
