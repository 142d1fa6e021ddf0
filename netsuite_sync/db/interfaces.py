"""Typed interfaces for destination-store services.

All SQL and SQLAlchemy access must remain in the db package and its submodules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final, Protocol

from netsuite_sync.domain import HealthStatus, SyncError, TypedRow

UNDEFINED_TABLE_CODE: Final[str] = "42P01"


@dataclass(frozen=True)
class StoreError:
    """Store-level failure payload returned instead of raising.

    Attributes:
        message: Human-readable failure message.
        code: Backend error code (SQLSTATE when available).
        details: Optional backend detail text.
    """

    message: str
    code: str | None = None
    details: str | None = None


@dataclass(frozen=True)
class StoreResponse:
    """Uniform response envelope for table-scoped store operations.

    Attributes:
        data: Returned rows, when the operation returns any.
        count: Row count, when the operation computes one.
        error: Store failure, or None on success.
    """

    data: list[dict[str, Any]] = field(default_factory=list)
    count: int | None = None
    error: StoreError | None = None


@dataclass(frozen=True)
class UpsertResult:
    """Outcome of one validated, chunked upsert.

    Attributes:
        records_processed: Number of rows submitted.
        results_returned: Number of rows the store reported back.
    """

    records_processed: int
    results_returned: int


class DestinationWriteError(SyncError, RuntimeError):
    """Destination store rejected a write, count, probe, or delete.

    Attributes:
        table: Destination table name.
        chunk_index: Zero-based index of the failing chunk, for upserts.
        chunk_count: Total chunk count of the failing upsert.
        cause: Store error payload that triggered the failure.
    """

    error_kind = "write"

    def __init__(
        self,
        message: str,
        table: str,
        chunk_index: int | None = None,
        chunk_count: int | None = None,
        cause: StoreError | None = None,
    ):
        super().__init__(message)
        self.table = table
        self.chunk_index = chunk_index
        self.chunk_count = chunk_count
        self.cause = cause


class TableStorePort(Protocol):
    """Port definition for table-scoped destination store operations.

    Implementations report store-level failures through `StoreResponse.error`
    and never raise for them.
    """

    def store_upsert(
        self,
        table: str,
        rows: list[TypedRow],
        on_conflict: str,
        ignore_duplicates: bool = False,
    ) -> StoreResponse:
        """Insert rows, updating existing rows that collide on the conflict column.

        Args:
            table: Destination table name.
            rows: Typed rows for one chunk.
            on_conflict: Conflict column name.
            ignore_duplicates: Skip colliding rows instead of updating them.

        Returns:
            StoreResponse: Written rows or store error.
        """

    def store_count(self, table: str) -> StoreResponse:
        """Return the exact row count of a table in `StoreResponse.count`."""

    def store_probe(self, table: str) -> StoreResponse:
        """Read at most one row to prove the table is reachable."""

    def store_delete_all(self, table: str) -> StoreResponse:
        """Delete every row of a table."""


class DestinationWriterPort(Protocol):
    """Port definition for validated destination writes consumed by the orchestrator."""

    def writer_upsert(self, table: str, rows: list[TypedRow], conflict_column: str) -> UpsertResult:
        """Upsert rows in chunks and return processed/returned counters."""

    def writer_get_record_count(self, table: str) -> int:
        """Return the exact row count of one table."""

    def writer_validate_connection(self, table_hint: str) -> bool:
        """Probe the store through one table; False when that table does not exist."""

    def writer_truncate_table(self, table: str) -> None:
        """Delete every row of one table."""


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """
