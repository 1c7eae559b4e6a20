"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from account_intel.adapters.gatherer import SourceGatherer
from account_intel.api.router import api_router
from account_intel.config import settings
from account_intel.service import DossierService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan management.

    Startup:
    - Initialize the source gatherer
    - Initialize the dossier service

    Provider adapters are passed to SourceGatherer by deployments that have
    credentials for them; without any, /dossiers/meeting returns quick
    dossiers and records are supplied per request to /dossiers.
    """
    logger.info("Starting %s...", settings.app_name)

    gatherer = SourceGatherer()
    app.state.dossier_service = DossierService(gatherer=gatherer)
    logger.info(
        "DossierService initialized (sources: %s)",
        ", ".join(gatherer.configured_sources) or "none",
    )

    yield

    logger.info("Shutting down %s...", settings.app_name)


app = FastAPI(
    title=settings.app_name,
    description="Meeting prep dossiers from account engagement history",
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
)

app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "account_intel.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
