"""Liveness and readiness probes."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from account_intel.config import settings

router = APIRouter(prefix="/health", tags=["health"])


class ReadinessResponse(BaseModel):
    """Readiness of the dossier service."""

    status: str
    version: str
    environment: str
    checks: dict[str, str]
    sources: list[str]
    """Sources the gatherer can fetch from; informational only."""


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - app is running."""
    return {"status": "alive"}


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(request: Request) -> ReadinessResponse:
    """Readiness probe - a dossier service is on app state."""
    service = getattr(request.app.state, "dossier_service", None)
    checks = {"dossier_service": "ok" if service is not None else "not_initialized"}

    return ReadinessResponse(
        status="ready" if service is not None else "not_ready",
        version=settings.app_version,
        environment=settings.app_env,
        checks=checks,
        sources=service.configured_sources if service is not None else [],
    )
