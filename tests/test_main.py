"""Tests for command-line dispatch."""

from __future__ import annotations

import json

import pytest

import netsuite_sync.main as main_module
from netsuite_sync.domain import SyncRunStats
from netsuite_sync.jobs import JobExecutionResult


class _OrchestratorStub:
    def __init__(self, failed_syncs: int = 0):
        self.failed_syncs = failed_syncs
        self.close_calls = 0

    def job_execute(self, job_name: str) -> JobExecutionResult:
        stats = SyncRunStats(total_mappings=1, successful_syncs=1 - self.failed_syncs, failed_syncs=self.failed_syncs)
        return JobExecutionResult(job_name=job_name, status="stub", stats=stats)

    def job_close(self) -> None:
        self.close_calls += 1


def test_main_parser_defaults_to_api_command() -> None:
    parsed_arguments = main_module.main_build_argument_parser().parse_args([])

    assert parsed_arguments.command == "api"
    assert parsed_arguments.confirm is False


def test_main_sync_run_prints_stats_and_exits_nonzero_on_failures(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Print stats JSON and exit with status 1 when any mapping failed.

    Args:
        monkeypatch: Pytest monkeypatch fixture.
        capsys: Pytest output capture fixture.

    Returns:
        None: Assertions validate output and exit code.

    Raises:
        AssertionError: Raised when dispatch behavior differs.
    """

    clean_orchestrator = _OrchestratorStub()
    monkeypatch.setattr(main_module, "bootstrap_create_sync_orchestrator", lambda: clean_orchestrator)
    main_module.main(["sync-run"])
    assert json.loads(capsys.readouterr().out)["successful_syncs"] == 1
    assert clean_orchestrator.close_calls == 1

    failing_orchestrator = _OrchestratorStub(failed_syncs=1)
    monkeypatch.setattr(main_module, "bootstrap_create_sync_orchestrator", lambda: failing_orchestrator)
    with pytest.raises(SystemExit) as exit_info:
        main_module.main(["sync-run"])
    assert exit_info.value.code == 1
    assert failing_orchestrator.close_calls == 1


def test_main_truncate_table_requires_table_and_confirmation(monkeypatch: pytest.MonkeyPatch) -> None:
    """Refuse to delete rows without an explicit table and `--confirm`."""

    def _unexpected_writer():
        raise AssertionError("writer must not be built without confirmation")

    monkeypatch.setattr(main_module, "bootstrap_create_destination_writer_from_settings", _unexpected_writer)

    with pytest.raises(SystemExit, match="requires a table name"):
        main_module.main(["truncate-table"])
    with pytest.raises(SystemExit, match="without --confirm"):
        main_module.main(["truncate-table", "customers"])


def test_main_truncate_table_deletes_rows_when_confirmed(monkeypatch: pytest.MonkeyPatch) -> None:
    truncated_tables: list[str] = []
    writer = type("Writer", (), {"writer_truncate_table": lambda self, table: truncated_tables.append(table)})()
    monkeypatch.setattr(main_module, "bootstrap_create_destination_writer_from_settings", lambda: writer)

    main_module.main(["truncate-table", "customers", "--confirm"])

    assert truncated_tables == ["customers"]
