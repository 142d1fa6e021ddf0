"""Serverless trigger entrypoint running one sync pass per invocation."""

from __future__ import annotations

import json
from typing import Any, Callable

from loguru import logger

from netsuite_sync.bootstrap import bootstrap_create_sync_orchestrator
from netsuite_sync.jobs import JobOrchestratorPort

OrchestratorFactory = Callable[[], JobOrchestratorPort]


def handler(event: dict[str, Any] | None, context: Any, orchestrator_factory: OrchestratorFactory | None = None) -> dict[str, Any]:
    """Run one sync pass and translate its stats into a `{statusCode, body}` response.

    Args:
        event: Trigger event payload (unused).
        context: Runtime context object (unused).
        orchestrator_factory: Optional orchestrator builder; defaults to full bootstrap wiring.

    Returns:
        dict[str, Any]: 200 when every mapping synced, 500 otherwise or when startup fails.

    Raises:
        RuntimeError: Failures are reported in the response body, never raised.
    """

    _ = (event, context)
    factory = orchestrator_factory or bootstrap_create_sync_orchestrator
    orchestrator: JobOrchestratorPort | None = None
    try:
        orchestrator = factory()
        execution_result = orchestrator.job_execute(job_name="sync_run")
    except Exception as error:  # noqa: BLE001 - the trigger must always receive a response
        logger.exception("Sync invocation failed before completing a run")
        return {
            "statusCode": 500,
            "body": json.dumps({"message": "Sync failed", "error": str(error)}),
        }
    finally:
        # Clients and pools must not outlive the invocation.
        if orchestrator is not None:
            orchestrator.job_close()

    stats = execution_result.stats
    if stats.stats_is_clean():
        status_code = 200
        message = "Sync completed successfully"
    else:
        status_code = 500
        message = "Sync completed with errors" if not stats.aborted else "Sync aborted during connection validation"

    return {
        "statusCode": status_code,
        "body": json.dumps({"message": message, "stats": stats.stats_to_payload()}),
    }
