"""Validated, chunked destination writer built on a table store."""

from __future__ import annotations

import re
from typing import Final

from loguru import logger

from netsuite_sync.domain import SyncValidationError, TypedRow

from .interfaces import (
    UNDEFINED_TABLE_CODE,
    DestinationWriteError,
    DestinationWriterPort,
    StoreError,
    TableStorePort,
    UpsertResult,
)

TABLE_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_-]+$")
CONFLICT_COLUMN_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_ -]+$")
DEFAULT_CHUNK_SIZE: Final[int] = 500


def db_validate_table_name(table: str) -> str:
    """Validate a destination table name.

    Args:
        table: Candidate table name.

    Returns:
        str: The validated table name.

    Raises:
        SyncValidationError: Raised when the name is not a plain identifier.
    """

    if not isinstance(table, str) or not TABLE_NAME_PATTERN.match(table):
        raise SyncValidationError(f"Invalid table name: {table!r}", field="table")
    return table


def db_validate_conflict_column(conflict_column: str) -> str:
    """Validate a conflict column name.

    Args:
        conflict_column: Candidate column name.

    Returns:
        str: The validated column name.

    Raises:
        SyncValidationError: Raised when the name contains disallowed characters.
    """

    if not isinstance(conflict_column, str) or not CONFLICT_COLUMN_PATTERN.match(conflict_column):
        raise SyncValidationError(f"Invalid conflict column name: {conflict_column!r}", field="conflict_column")
    return conflict_column


class DestinationTableWriter(DestinationWriterPort):
    """Destination writer enforcing name validation and payload-sized chunking."""

    def __init__(self, store: TableStorePort, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """Initialize destination writer.

        Args:
            store: Table store used for every destination call.
            chunk_size: Maximum rows per upsert call.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when store is missing or chunk size is not positive.
        """

        if store is None:
            raise ValueError("store must not be None")
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")

        self._store = store
        self._chunk_size = chunk_size

    def writer_upsert(self, table: str, rows: list[TypedRow], conflict_column: str) -> UpsertResult:
        """Upsert rows in sequential chunks, updating rows that collide on the conflict column.

        Chunks written before a failing chunk stay committed.

        Args:
            table: Destination table name.
            rows: Typed rows to write.
            conflict_column: Conflict column name.

        Returns:
            UpsertResult: Submitted and returned row counters.

        Raises:
            SyncValidationError: Raised before any store call when inputs are invalid.
            DestinationWriteError: Raised on the first chunk the store rejects.
        """

        db_validate_table_name(table)
        db_validate_conflict_column(conflict_column)
        if not isinstance(rows, (list, tuple)) or len(rows) == 0:
            raise SyncValidationError("rows must be a non-empty list", field="rows")

        missing_key_count = sum(1 for row in rows if row.get(conflict_column) is None)
        if missing_key_count:
            logger.warning(
                f"{missing_key_count} of {len(rows)} rows for {table} are missing conflict column '{conflict_column}'"
            )

        chunks = [rows[start : start + self._chunk_size] for start in range(0, len(rows), self._chunk_size)]
        chunk_count = len(chunks)
        logger.info(f"Upserting {len(rows)} rows to {table} in {chunk_count} chunk(s) on '{conflict_column}'")

        results_returned = 0
        for chunk_index, chunk in enumerate(chunks):
            response = self._store.store_upsert(table, list(chunk), on_conflict=conflict_column, ignore_duplicates=False)
            if response.error is not None:
                raise DestinationWriteError(
                    f"Upsert to {table} failed on chunk {chunk_index + 1}/{chunk_count}: {response.error.message}",
                    table=table,
                    chunk_index=chunk_index,
                    chunk_count=chunk_count,
                    cause=response.error,
                )
            results_returned += len(response.data)
            logger.debug(f"Upserted chunk {chunk_index + 1}/{chunk_count} ({len(chunk)} rows) to {table}")

        return UpsertResult(records_processed=len(rows), results_returned=results_returned)

    def writer_get_record_count(self, table: str) -> int:
        """Return the exact row count of one table.

        Args:
            table: Destination table name.

        Returns:
            int: Row count.

        Raises:
            SyncValidationError: Raised when the table name is invalid.
            DestinationWriteError: Raised when the store rejects the count.
        """

        db_validate_table_name(table)
        response = self._store.store_count(table)
        if response.error is not None:
            raise DestinationWriteError(
                f"Record count for {table} failed: {response.error.message}",
                table=table,
                cause=response.error,
            )
        return response.count or 0

    def writer_validate_connection(self, table_hint: str) -> bool:
        """Probe the destination store by reading one row of a hint table.

        Args:
            table_hint: Table expected to exist.

        Returns:
            bool: True when the probe succeeded; False when the hint table does not exist.

        Raises:
            SyncValidationError: Raised when the table name is invalid.
            DestinationWriteError: Raised for any other store failure.
        """

        db_validate_table_name(table_hint)
        logger.info(f"Validating destination connection using table {table_hint}")
        response = self._store.store_probe(table_hint)
        if response.error is None:
            logger.info("Destination connection validation succeeded")
            return True
        if self._writer_is_undefined_table(response.error):
            logger.warning(f"Table {table_hint} does not exist in the destination store")
            return False
        raise DestinationWriteError(
            f"Destination connection validation failed: {response.error.message}",
            table=table_hint,
            cause=response.error,
        )

    def writer_truncate_table(self, table: str) -> None:
        """Delete every row of one table; maintenance use only.

        Args:
            table: Destination table name.

        Returns:
            None: This method does not return a value.

        Raises:
            SyncValidationError: Raised when the table name is invalid.
            DestinationWriteError: Raised when the store rejects the delete.
        """

        db_validate_table_name(table)
        logger.warning(f"Deleting every row of {table}")
        response = self._store.store_delete_all(table)
        if response.error is not None:
            raise DestinationWriteError(
                f"Truncate of {table} failed: {response.error.message}",
                table=table,
                cause=response.error,
            )
        logger.info(f"Deleted {response.count if response.count is not None else 'all'} rows from {table}")

    def _writer_is_undefined_table(self, error: StoreError) -> bool:
        return error.code == UNDEFINED_TABLE_CODE
