"""Tests for the serverless sync trigger response mapping."""

from __future__ import annotations

import json

from netsuite_sync.domain import SyncRunStats
from netsuite_sync.handler import handler
from netsuite_sync.jobs import JobExecutionResult


class _OrchestratorStub:
    """Orchestrator stub returning preset run statistics."""

    def __init__(self, stats: SyncRunStats):
        self.stats = stats
        self.close_calls = 0

    def job_supported_names(self) -> tuple[str, ...]:
        return ("sync_run",)

    def job_execute(self, job_name: str) -> JobExecutionResult:
        return JobExecutionResult(job_name=job_name, status="stub", stats=self.stats)

    def job_close(self) -> None:
        self.close_calls += 1


def _invoke(stats: SyncRunStats) -> tuple[int, dict]:
    response = handler({}, None, orchestrator_factory=lambda: _OrchestratorStub(stats))
    return response["statusCode"], json.loads(response["body"])


def test_handler_returns_success_for_clean_run() -> None:
    """Return 200 with stats when every mapping synced."""

    status_code, body = _invoke(SyncRunStats(total_mappings=3, successful_syncs=3))

    assert status_code == 200
    assert body["message"] == "Sync completed successfully"
    assert body["stats"]["successful_syncs"] == 3


def test_handler_returns_server_error_for_failed_or_aborted_runs() -> None:
    """Return 500 with stats when a mapping failed or validation aborted the run.

    Returns:
        None: Assertions validate status codes and messages.

    Raises:
        AssertionError: Raised when response mapping differs.
    """

    failed_status, failed_body = _invoke(SyncRunStats(total_mappings=3, successful_syncs=2, failed_syncs=1))
    aborted_status, aborted_body = _invoke(SyncRunStats(total_mappings=3, aborted=True))

    assert failed_status == 500
    assert failed_body["message"] == "Sync completed with errors"
    assert failed_body["stats"]["failed_syncs"] == 1
    assert aborted_status == 500
    assert aborted_body["message"] == "Sync aborted during connection validation"


def test_handler_reports_startup_failure() -> None:
    def _failing_factory():
        raise RuntimeError("NS_ACCOUNT_ID is missing")

    response = handler(None, None, orchestrator_factory=_failing_factory)

    assert response["statusCode"] == 500
    assert json.loads(response["body"]) == {"message": "Sync failed", "error": "NS_ACCOUNT_ID is missing"}


def test_handler_closes_orchestrator_after_every_invocation() -> None:
    """Release the orchestrator's clients after clean and failing runs alike."""

    clean = _OrchestratorStub(SyncRunStats(total_mappings=1, successful_syncs=1))
    failing = _OrchestratorStub(SyncRunStats(total_mappings=1))

    def _raise_during_run(job_name: str) -> JobExecutionResult:
        raise RuntimeError(f"{job_name} crashed")

    failing.job_execute = _raise_during_run

    handler({}, None, orchestrator_factory=lambda: clean)
    crashed_response = handler({}, None, orchestrator_factory=lambda: failing)

    assert clean.close_calls == 1
    assert failing.close_calls == 1
    assert crashed_response["statusCode"] == 500
