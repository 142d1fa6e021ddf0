"""Sync API router composition for catalog listing and run triggering."""

from __future__ import annotations

import threading
from typing import Sequence

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from netsuite_sync.domain import MappingEntry
from netsuite_sync.jobs import JobOrchestratorPort


def api_create_sync_router(
    sync_orchestrator: JobOrchestratorPort,
    mappings: Sequence[MappingEntry],
) -> APIRouter:
    """Create sync router with catalog and trigger endpoints.

    Args:
        sync_orchestrator: Job orchestrator executing sync runs.
        mappings: Mapping catalog entries exposed for inspection.

    Returns:
        APIRouter: Router exposing `/sync` APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if sync_orchestrator is None:
        raise ValueError("sync_orchestrator must not be None")
    if mappings is None:
        raise ValueError("mappings must not be None")

    router = APIRouter(prefix="/sync", tags=["sync"])
    run_lock = threading.Lock()

    @router.get("/mappings")
    def api_sync_mapping_list() -> JSONResponse:
        """Return the mapping catalog in run order."""

        payload = {
            "items": [
                {
                    "source_id": mapping.source_id,
                    "destination_table": mapping.destination_table,
                    "display_name": mapping.display_name,
                    "kind": mapping.kind,
                    "write_method": mapping.write_method,
                }
                for mapping in mappings
            ],
            "total": len(mappings),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.post("/run")
    def api_sync_run_trigger() -> JSONResponse:
        """Run one sync pass and return its statistics.

        Returns:
            JSONResponse: 200 with stats when every mapping synced, 500 with stats
            otherwise, 409 when a run triggered through this API is still active.

        Raises:
            ValueError: Raised when the orchestrator rejects the job name.
        """

        if not run_lock.acquire(blocking=False):
            payload = {
                "status": "error",
                "message": "run already active",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_409_CONFLICT)

        try:
            execution_result = sync_orchestrator.job_execute(job_name="sync_run")
        finally:
            run_lock.release()

        payload = {
            "job_name": execution_result.job_name,
            "status": execution_result.status,
            "stats": execution_result.stats.stats_to_payload(),
        }
        status_code = (
            status.HTTP_200_OK
            if execution_result.stats.stats_is_clean()
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        return JSONResponse(content=payload, status_code=status_code)

    return router
