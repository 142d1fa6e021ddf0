"""FastAPI application factory for the sync service."""

from typing import Sequence

from fastapi import FastAPI

from netsuite_sync import __version__
from netsuite_sync.config import AppSettings
from netsuite_sync.db import DatabaseHealthPort
from netsuite_sync.domain import MappingEntry
from netsuite_sync.jobs import JobOrchestratorPort

from .routers import api_create_health_router, api_create_sync_router


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    sync_orchestrator: JobOrchestratorPort,
    mappings: Sequence[MappingEntry],
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        sync_orchestrator: Job orchestrator executing sync runs.
        mappings: Mapping catalog entries.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when router dependencies are invalid.
    """

    application = FastAPI(title="NetSuite Sync", version=__version__)

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return service identity for bootstrap verification."""

        return {
            "service": "netsuite-sync",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(
        api_create_health_router(destination_health=db_health_service, mapping_count=len(mappings))
    )
    application.include_router(api_create_sync_router(sync_orchestrator=sync_orchestrator, mappings=mappings))

    return application
