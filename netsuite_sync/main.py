"""Main module entrypoint for local runtime execution.

This module validates startup configuration and dispatches one runtime command.
"""

import argparse
import json

import uvicorn
from loguru import logger

from netsuite_sync.bootstrap import (
    bootstrap_create_application,
    bootstrap_create_destination_writer,
    bootstrap_create_destination_writer_from_settings,
    bootstrap_create_source_reader,
    bootstrap_create_sync_orchestrator,
    bootstrap_load_settings,
)
from netsuite_sync.catalog import catalog_load_mappings
from netsuite_sync.db import db_create_engine
from netsuite_sync.domain import SyncError
from netsuite_sync.jobs import job_run_scheduler


def main_build_argument_parser() -> argparse.ArgumentParser:
    """Build the command-line parser.

    Returns:
        argparse.ArgumentParser: Parser for every runtime command.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    argument_parser = argparse.ArgumentParser(description="NetSuite saved-search sync runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "sync-run", "sync-schedule", "check-connections", "truncate-table"),
        help="Runtime command: `api` starts server, `sync-run` runs one sync pass, "
        "`sync-schedule` runs passes on the configured interval, `check-connections` validates "
        "source and destination access, `truncate-table` deletes every row of one table",
        type=str,
    )
    argument_parser.add_argument(
        "table",
        nargs="?",
        type=str,
        help="Destination table for `truncate-table`",
    )
    argument_parser.add_argument(
        "--confirm",
        action="store_true",
        help="Required by `truncate-table` to actually delete rows",
    )
    return argument_parser


def main(argv: list[str] | None = None) -> None:
    """Run selected runtime command with validated startup configuration.

    Args:
        argv: Optional argument list; defaults to process arguments.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SystemExit: Raised with code 1 when a run or check fails.
        SettingsLoadError: Raised when configuration validation fails.
    """

    parsed_arguments = main_build_argument_parser().parse_args(argv)

    if parsed_arguments.command == "sync-run":
        orchestrator = bootstrap_create_sync_orchestrator()
        try:
            execution_result = orchestrator.job_execute(job_name="sync_run")
        finally:
            orchestrator.job_close()
        print(json.dumps(execution_result.stats.stats_to_payload(), indent=2))
        if not execution_result.stats.stats_is_clean():
            raise SystemExit(1)
        return

    if parsed_arguments.command == "sync-schedule":
        settings = bootstrap_load_settings()
        orchestrator = bootstrap_create_sync_orchestrator(settings=settings)
        try:
            job_run_scheduler(orchestrator=orchestrator, interval_seconds=settings.sync_interval_seconds)
        finally:
            orchestrator.job_close()
        return

    if parsed_arguments.command == "check-connections":
        if not main_check_connections():
            raise SystemExit(1)
        return

    if parsed_arguments.command == "truncate-table":
        if not parsed_arguments.table:
            raise SystemExit("truncate-table requires a table name")
        if not parsed_arguments.confirm:
            raise SystemExit(f"Refusing to delete rows of {parsed_arguments.table} without --confirm")
        destination_writer = bootstrap_create_destination_writer_from_settings()
        destination_writer.writer_truncate_table(parsed_arguments.table)
        return

    settings = bootstrap_load_settings()
    application = bootstrap_create_application(settings=settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


def main_check_connections() -> bool:
    """Validate source credentials and destination access against the first catalog entry.

    Returns:
        bool: True when both checks pass and the hint table exists.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        MappingCatalogError: Raised when the mapping catalog is invalid.
    """

    settings = bootstrap_load_settings()
    first_mapping = catalog_load_mappings(settings.mapping_catalog_path)[0]
    source_reader = bootstrap_create_source_reader(settings)
    destination_writer = bootstrap_create_destination_writer(
        settings, db_create_engine(database_url=settings.database_url)
    )

    results: dict[str, object] = {"source": "ok", "destination": "ok"}
    try:
        source_reader.adapter_validate_credentials(first_mapping.source_id)
    except SyncError as error:
        logger.error(f"NetSuite validation failed: {error}")
        results["source"] = f"failed ({error.error_kind}): {error}"
    finally:
        source_reader.adapter_close()

    try:
        if not destination_writer.writer_validate_connection(first_mapping.destination_table):
            results["destination"] = f"table {first_mapping.destination_table} does not exist"
    except SyncError as error:
        logger.error(f"Destination validation failed: {error}")
        results["destination"] = f"failed ({error.error_kind}): {error}"

    print(json.dumps(results, indent=2))
    return results["source"] == "ok" and results["destination"] == "ok"


if __name__ == "__main__":
    main()
