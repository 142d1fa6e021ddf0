"""Liveness router reporting destination store reachability and catalog size."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from netsuite_sync.db import DatabaseHealthPort


def api_create_health_router(destination_health: DatabaseHealthPort, mapping_count: int) -> APIRouter:
    """Create the `/health` router.

    Args:
        destination_health: Destination store connectivity probe.
        mapping_count: Number of catalog mappings loaded at startup.

    Returns:
        APIRouter: Router answering 200 when the destination store responds, 503 otherwise.

    Raises:
        ValueError: Raised when the probe is missing or the catalog is empty.
    """

    if destination_health is None:
        raise ValueError("destination_health must not be None")
    if mapping_count < 1:
        raise ValueError("mapping_count must be >= 1")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_report() -> JSONResponse:
        """Probe the destination store and report service readiness."""

        report: dict[str, object] = {
            "service": "up",
            "mappings": mapping_count,
            "target": destination_health.db_connection_label(),
        }
        try:
            probe = destination_health.db_check_health()
        except ConnectionError as error:
            report.update(status="degraded", destination="down", detail=str(error))
            return JSONResponse(content=report, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

        report.update(status="ok", destination=probe.status, detail=probe.detail)
        return JSONResponse(content=report, status_code=status.HTTP_200_OK)

    return router
