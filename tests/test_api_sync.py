"""Tests for sync API catalog listing and run triggering."""

from __future__ import annotations

import threading

from fastapi import FastAPI
from fastapi.testclient import TestClient

from netsuite_sync.api.routers import api_create_sync_router
from netsuite_sync.domain import MappingEntry, SyncRunStats
from netsuite_sync.jobs import JobExecutionResult

_MAPPINGS = (
    MappingEntry("customsearch_sync_customers", "customers", "Customers", "entity", "upsert"),
    MappingEntry("customsearch_sync_invoices", "invoices", "Invoices", "transaction", "upsert"),
)


class _SyncOrchestratorStub:
    """Orchestrator stub returning scripted run statistics."""

    def __init__(self, failed_syncs: int = 0, aborted: bool = False):
        self.failed_syncs = failed_syncs
        self.aborted = aborted
        self.executed_jobs: list[str] = []

    def job_supported_names(self) -> tuple[str, ...]:
        return ("sync_run",)

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Return scripted stats for one run.

        Args:
            job_name: Job name.

        Returns:
            JobExecutionResult: Scripted execution result.

        Raises:
            RuntimeError: This stub does not raise runtime errors.
        """

        self.executed_jobs.append(job_name)
        stats = SyncRunStats(
            started_at="2025-01-01T00:00:00+00:00",
            ended_at="2025-01-01T00:01:00+00:00",
            total_mappings=2,
            successful_syncs=2 - self.failed_syncs,
            failed_syncs=self.failed_syncs,
            aborted=self.aborted,
        )
        if self.aborted:
            status = "aborted"
        else:
            status = "failed" if self.failed_syncs else "success"
        return JobExecutionResult(job_name=job_name, status=status, stats=stats)


class _BlockingOrchestratorStub(_SyncOrchestratorStub):
    """Orchestrator stub that holds a run open until released."""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def job_execute(self, job_name: str) -> JobExecutionResult:
        self.started.set()
        self.release.wait(timeout=5)
        return super().job_execute(job_name)


def _build_client(orchestrator) -> TestClient:
    application = FastAPI()
    application.include_router(api_create_sync_router(sync_orchestrator=orchestrator, mappings=_MAPPINGS))
    return TestClient(application)


def test_api_sync_mappings_lists_catalog_in_order() -> None:
    response = _build_client(_SyncOrchestratorStub()).get("/sync/mappings")

    assert response.status_code == 200
    assert response.json()["total"] == 2
    assert response.json()["items"][1] == {
        "source_id": "customsearch_sync_invoices",
        "destination_table": "invoices",
        "display_name": "Invoices",
        "kind": "transaction",
        "write_method": "upsert",
    }


def test_api_sync_run_returns_stats_with_outcome_status_code() -> None:
    """Return 200 for clean runs and 500 for runs with failed mappings or an abort.

    Returns:
        None: Assertions validate status codes and payloads.

    Raises:
        AssertionError: Raised when response mapping differs.
    """

    clean_orchestrator = _SyncOrchestratorStub()
    clean_response = _build_client(clean_orchestrator).post("/sync/run")
    failed_response = _build_client(_SyncOrchestratorStub(failed_syncs=1)).post("/sync/run")
    aborted_response = _build_client(_SyncOrchestratorStub(aborted=True)).post("/sync/run")

    assert clean_orchestrator.executed_jobs == ["sync_run"]
    assert clean_response.status_code == 200
    assert clean_response.json()["status"] == "success"
    assert clean_response.json()["stats"]["successful_syncs"] == 2
    assert failed_response.status_code == 500
    assert failed_response.json()["stats"]["failed_syncs"] == 1
    assert aborted_response.status_code == 500
    assert aborted_response.json()["status"] == "aborted"
    assert aborted_response.json()["stats"]["aborted"] is True


def test_api_sync_run_rejects_overlapping_trigger() -> None:
    """Return 409 while another API-triggered run is still active."""

    orchestrator = _BlockingOrchestratorStub()
    client = _build_client(orchestrator)
    responses = {}

    def _first_trigger() -> None:
        responses["first"] = client.post("/sync/run")

    worker = threading.Thread(target=_first_trigger)
    worker.start()
    assert orchestrator.started.wait(timeout=5)

    overlapping_response = client.post("/sync/run")
    orchestrator.release.set()
    worker.join(timeout=5)

    assert overlapping_response.status_code == 409
    assert overlapping_response.json() == {"status": "error", "message": "run already active"}
    assert responses["first"].status_code == 200
    assert orchestrator.executed_jobs == ["sync_run"]
