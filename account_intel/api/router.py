"""API router aggregation."""

from fastapi import APIRouter

from account_intel.api.dossier import router as dossier_router
from account_intel.api.health import router as health_router

api_router = APIRouter()
api_router.include_router(health_router)
# Dossier generation endpoints
api_router.include_router(dossier_router)
