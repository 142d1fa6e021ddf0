"""Job-layer sync orchestrator reconciling saved-search results into destination tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from loguru import logger

from netsuite_sync.adapters import SourceReaderPort
from netsuite_sync.config import DEFAULT_PAGINATED_TABLES
from netsuite_sync.db import DestinationWriterPort
from netsuite_sync.domain import (
    MappingEntry,
    RawRow,
    SyncRunStats,
    domain_build_sync_event,
    domain_error_kind,
    domain_utc_now_iso,
)
from netsuite_sync.mapping import NormalizerPort, mapping_resolve_conflict_column

from .interfaces import JobExecutionResult, JobOrchestratorPort

ConflictColumnResolver = Callable[[str], str]


@dataclass(frozen=True)
class SyncOrchestratorConfig:
    """Configuration values for sync orchestration.

    Attributes:
        paginated_tables: Destination tables synced page by page instead of in bulk.
    """

    paginated_tables: tuple[str, ...] = tuple(DEFAULT_PAGINATED_TABLES.split(","))


class SyncJobOrchestrator(JobOrchestratorPort):
    """Sequential sync run over the mapping catalog with per-mapping failure isolation."""

    _SYNC_JOB_NAME = "sync_run"

    def __init__(
        self,
        source_reader: SourceReaderPort,
        normalizer: NormalizerPort,
        destination_writer: DestinationWriterPort,
        mappings: Sequence[MappingEntry],
        config: SyncOrchestratorConfig | None = None,
        conflict_resolver: ConflictColumnResolver = mapping_resolve_conflict_column,
        resource_closers: Sequence[Callable[[], None]] = (),
    ):
        """Initialize sync orchestrator dependencies.

        Args:
            source_reader: Saved-search page reader.
            normalizer: Raw-to-typed row normalizer.
            destination_writer: Validated destination writer.
            mappings: Mapping catalog entries in run order.
            config: Optional orchestration configuration.
            conflict_resolver: Destination table to conflict column policy.
            resource_closers: Callables releasing clients and pools on `job_close`.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing or the catalog is empty.
        """

        if source_reader is None:
            raise ValueError("source_reader must not be None")
        if normalizer is None:
            raise ValueError("normalizer must not be None")
        if destination_writer is None:
            raise ValueError("destination_writer must not be None")
        if not mappings:
            raise ValueError("mappings must contain at least one entry")

        self._source_reader = source_reader
        self._normalizer = normalizer
        self._destination_writer = destination_writer
        self._mappings = tuple(mappings)
        self._config = config or SyncOrchestratorConfig()
        self._paginated_tables = frozenset(self._config.paginated_tables)
        self._conflict_resolver = conflict_resolver
        self._resource_closers = list(resource_closers)

    def job_supported_names(self) -> tuple[str, ...]:
        """Return supported job names.

        Returns:
            tuple[str, ...]: Supported job names.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return (self._SYNC_JOB_NAME,)

    def job_mappings(self) -> tuple[MappingEntry, ...]:
        """Return the mapping catalog this orchestrator runs."""

        return self._mappings

    def job_close(self) -> None:
        """Run each resource closer once, in registration order."""

        closers, self._resource_closers = self._resource_closers, []
        for closer in closers:
            closer()

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Execute one sync run and classify its outcome.

        Args:
            job_name: Name of job to execute.

        Returns:
            JobExecutionResult: `success` when every mapping synced, `aborted` when
            connection validation failed, `failed` otherwise.

        Raises:
            ValueError: Raised when job name is unsupported.
        """

        normalized_job_name = job_name.strip()
        if normalized_job_name != self._SYNC_JOB_NAME:
            raise ValueError(f"unsupported job_name={normalized_job_name}")

        stats = self.job_run_sync()
        if stats.aborted:
            status = "aborted"
        elif stats.stats_is_clean():
            status = "success"
        else:
            status = "failed"
        return JobExecutionResult(job_name=normalized_job_name, status=status, stats=stats)

    def job_run_sync(self) -> SyncRunStats:
        """Run connection validation and then every mapping in catalog order.

        A stats object is always returned; mapping failures are recorded, never raised.

        Returns:
            SyncRunStats: Aggregate run statistics.

        Raises:
            RuntimeError: This method does not raise for sync failures.
        """

        stats = SyncRunStats(started_at=domain_utc_now_iso(), total_mappings=len(self._mappings))
        stats.diagnostics.append(
            domain_build_sync_event(stage="run", status="started", details={"total_mappings": len(self._mappings)})
        )
        logger.info(f"Starting NetSuite to destination sync ({stats.total_mappings} mappings)")

        if not self._job_validate_connections(stats):
            stats.ended_at = domain_utc_now_iso()
            stats.diagnostics.append(domain_build_sync_event(stage="run", status="aborted"))
            logger.error("Connection validation failed. Aborting sync.")
            return stats

        for mapping in self._mappings:
            try:
                mapping_details = self._job_sync_mapping(mapping)
            except Exception as error:  # noqa: BLE001 - one mapping must never abort the run
                error_kind = domain_error_kind(error)
                message = f"Failed to sync {mapping.display_name} to {mapping.destination_table}"
                logger.error(f"{message}: {error}")
                stats.stats_record_failure(message=message, error=error, error_kind=error_kind)
                stats.diagnostics.append(
                    domain_build_sync_event(
                        stage="mapping",
                        status="failed",
                        table=mapping.destination_table,
                        details={
                            "error_kind": error_kind,
                            "error_type": type(error).__name__,
                            "error_message": str(error),
                        },
                    )
                )
                continue

            stats.stats_record_success()
            stats.diagnostics.append(
                domain_build_sync_event(
                    stage="mapping",
                    status="completed",
                    table=mapping.destination_table,
                    details=mapping_details,
                )
            )

        stats.ended_at = domain_utc_now_iso()
        stats.diagnostics.append(
            domain_build_sync_event(
                stage="run",
                status="completed",
                details={
                    "successful_syncs": stats.successful_syncs,
                    "failed_syncs": stats.failed_syncs,
                },
            )
        )
        logger.info(
            f"Sync process completed: {stats.successful_syncs}/{stats.total_mappings} succeeded, "
            f"{stats.failed_syncs} failed"
        )
        for entry in stats.errors:
            logger.warning(f"- {entry.message}: {entry.error}")
        return stats

    def _job_validate_connections(self, stats: SyncRunStats) -> bool:
        """Validate source credentials and destination reachability using the first catalog entry.

        Args:
            stats: Run statistics updated on abort.

        Returns:
            bool: True when the run may proceed.

        Raises:
            RuntimeError: Validation failures are recorded, not raised.
        """

        first_mapping = self._mappings[0]
        stats.diagnostics.append(domain_build_sync_event(stage="validation", status="started"))
        try:
            self._source_reader.adapter_validate_credentials(first_mapping.source_id)
            logger.info(f"Using first mapping table {first_mapping.destination_table} for destination validation")
            destination_reachable = self._destination_writer.writer_validate_connection(
                first_mapping.destination_table
            )
        except Exception as error:  # noqa: BLE001 - any validation failure aborts the run
            error_kind = domain_error_kind(error)
            stats.aborted = True
            stats.stats_record_error(message="Connection validation failed", error=error, error_kind=error_kind)
            stats.diagnostics.append(
                domain_build_sync_event(
                    stage="validation",
                    status="failed",
                    details={"error_kind": error_kind, "error_message": str(error)},
                )
            )
            return False

        if not destination_reachable:
            logger.warning(
                f"Destination hint table {first_mapping.destination_table} is missing; continuing with the run"
            )
        stats.diagnostics.append(
            domain_build_sync_event(
                stage="validation",
                status="completed",
                details={"destination_hint_table_exists": destination_reachable},
            )
        )
        return True

    def _job_sync_mapping(self, mapping: MappingEntry) -> dict[str, object]:
        """Sync one mapping through the paginated or bulk path.

        Args:
            mapping: Catalog entry to sync.

        Returns:
            dict[str, object]: Diagnostics details for the completed mapping.

        Raises:
            Exception: Any source, normalization, or write failure propagates to the mapping boundary.
        """

        table = mapping.destination_table
        paginated = table in self._paginated_tables
        logger.info(
            f"Starting sync for {mapping.display_name} (saved search {mapping.source_id}) to {table}"
            f"{' using pagination' if paginated else ''}"
        )

        count_before = self._job_safe_record_count(table)
        if paginated:
            rows_written, pages_processed = self._job_sync_paginated(mapping)
        else:
            rows_written, pages_processed = self._job_sync_bulk(mapping)
        count_after = self._job_safe_record_count(table)

        logger.info(
            f"Sync completed for {mapping.display_name}: {rows_written} rows processed, "
            f"records before {count_before}, after {count_after}"
        )
        return {
            "path": "paginated" if paginated else "bulk",
            "rows_written": rows_written,
            "pages_processed": pages_processed,
            "record_count_before": count_before,
            "record_count_after": count_after,
        }

    def _job_sync_paginated(self, mapping: MappingEntry) -> tuple[int, int]:
        """Fetch, normalize and write one page at a time until the source reports no more pages."""

        rows_written = 0
        page_number = 1
        while True:
            page = self._source_reader.adapter_fetch_page_by_number(mapping.source_id, page_number)
            if page.rows:
                rows_written += self._job_write_rows(mapping, page.rows)
            else:
                logger.info(f"Page {page_number} of {mapping.display_name} returned no rows")
            if not page.has_more:
                return rows_written, page_number
            page_number += 1

    def _job_sync_bulk(self, mapping: MappingEntry) -> tuple[int, int]:
        """Fetch every page, then normalize and write the full result set once."""

        raw_rows = self._source_reader.adapter_fetch_all_pages(mapping.source_id)
        if not raw_rows:
            logger.info(f"No records found for {mapping.display_name}, skipping upsert")
            return 0, 1
        logger.debug(f"Field names in raw rows: {', '.join(raw_rows[0])}")
        return self._job_write_rows(mapping, raw_rows), 1

    def _job_write_rows(self, mapping: MappingEntry, raw_rows: list[RawRow]) -> int:
        """Normalize raw rows and upsert them on the resolved conflict column.

        Args:
            mapping: Catalog entry being synced.
            raw_rows: Raw rows for one page or one full result set.

        Returns:
            int: Number of rows submitted to the destination.

        Raises:
            SyncValidationError: Raised for invalid table or column names.
            DestinationWriteError: Raised when the destination rejects a chunk.
        """

        table = mapping.destination_table
        typed_rows = self._normalizer.mapping_normalize_rows(table, raw_rows)
        if not typed_rows:
            logger.info(f"No normalized rows for {table}, skipping upsert")
            return 0

        conflict_column = self._conflict_resolver(table)
        sample_key = typed_rows[0].get(conflict_column)
        logger.debug(f"Sample {conflict_column}: {sample_key!r} ({type(sample_key).__name__})")
        if sample_key is None:
            logger.warning(f"{conflict_column} is missing in normalized rows for {table}")

        upsert_result = self._destination_writer.writer_upsert(table, typed_rows, conflict_column)
        return upsert_result.records_processed

    def _job_safe_record_count(self, table: str) -> int | None:
        """Read a table row count for diagnostics, returning None on failure."""

        try:
            return self._destination_writer.writer_get_record_count(table)
        except Exception as error:  # noqa: BLE001 - counts are diagnostics only
            logger.warning(f"Could not read record count for {table}: {error}")
            return None
