"""Regression tests for validated, chunked destination writes."""

from __future__ import annotations

import pytest
from loguru import logger

from netsuite_sync.db import (
    UNDEFINED_TABLE_CODE,
    DestinationTableWriter,
    DestinationWriteError,
    StoreError,
    StoreResponse,
)
from netsuite_sync.domain import SyncValidationError


class _RecordingStore:
    """Table store stub recording upsert chunk sizes and returning scripted responses."""

    def __init__(self, failing_chunk_index: int | None = None, probe_error: StoreError | None = None):
        self.upsert_calls: list[tuple[str, int, str, bool]] = []
        self.failing_chunk_index = failing_chunk_index
        self.probe_error = probe_error
        self.count_value = 0
        self.deleted_tables: list[str] = []

    def store_upsert(self, table, rows, on_conflict, ignore_duplicates=False):
        """Record one chunk and echo it back unless scripted to fail.

        Args:
            table: Destination table name.
            rows: Chunk rows.
            on_conflict: Conflict column name.
            ignore_duplicates: Duplicate policy flag.

        Returns:
            StoreResponse: Echoed rows or scripted error.

        Raises:
            RuntimeError: This stub does not raise runtime errors.
        """

        call_index = len(self.upsert_calls)
        self.upsert_calls.append((table, len(rows), on_conflict, ignore_duplicates))
        if call_index == self.failing_chunk_index:
            return StoreResponse(error=StoreError(message="payload too large", code="54000"))
        return StoreResponse(data=list(rows), count=len(rows))

    def store_count(self, table):
        return StoreResponse(count=self.count_value)

    def store_probe(self, table):
        if self.probe_error is not None:
            return StoreResponse(error=self.probe_error)
        return StoreResponse(data=[], count=0)

    def store_delete_all(self, table):
        self.deleted_tables.append(table)
        return StoreResponse(count=3)


def _rows(count: int) -> list[dict[str, object]]:
    return [{"invoice_internal_id": index + 1, "amount": 1.0} for index in range(count)]


def test_db_writer_splits_rows_into_sequential_chunks() -> None:
    """Split 1200 rows into 500, 500 and 200 row upserts.

    Returns:
        None: Assertions validate chunk boundaries and counters.

    Raises:
        AssertionError: Raised when chunking differs.
    """

    store = _RecordingStore()
    writer = DestinationTableWriter(store)

    result = writer.writer_upsert("invoices", _rows(1200), "invoice_internal_id")

    assert [call[1] for call in store.upsert_calls] == [500, 500, 200]
    assert all(call[2] == "invoice_internal_id" and call[3] is False for call in store.upsert_calls)
    assert result.records_processed == 1200
    assert result.results_returned == 1200


def test_db_writer_stops_at_first_failing_chunk() -> None:
    """Raise a write error naming the failing chunk and send no later chunks."""

    store = _RecordingStore(failing_chunk_index=1)
    writer = DestinationTableWriter(store)

    with pytest.raises(DestinationWriteError) as error_info:
        writer.writer_upsert("invoices", _rows(1200), "invoice_internal_id")

    assert len(store.upsert_calls) == 2
    assert error_info.value.chunk_index == 1
    assert error_info.value.chunk_count == 3
    assert error_info.value.table == "invoices"
    assert error_info.value.cause.code == "54000"
    assert "chunk 2/3" in str(error_info.value)


@pytest.mark.parametrize(
    ("table", "conflict_column", "rows"),
    [
        ("bad table!", "id", [{"id": 1}]),
        ("invoices;drop", "id", [{"id": 1}]),
        ("invoices", "id);--", [{"id": 1}]),
        ("invoices", "id", []),
    ],
)
def test_db_writer_rejects_invalid_inputs_before_store_call(table: str, conflict_column: str, rows: list) -> None:
    """Validate names and rows without touching the store."""

    store = _RecordingStore()

    with pytest.raises(SyncValidationError):
        DestinationTableWriter(store).writer_upsert(table, rows, conflict_column)

    assert store.upsert_calls == []


def test_db_writer_accepts_rows_missing_conflict_column() -> None:
    """Warn about missing conflict keys but still send the rows."""

    store = _RecordingStore()
    rows = [{"id": 1}, {"name": "no key"}]

    warnings: list[str] = []
    sink_id = logger.add(lambda message: warnings.append(message.record["message"]), level="WARNING")
    try:
        result = DestinationTableWriter(store).writer_upsert("vendor_bills", rows, "id")
    finally:
        logger.remove(sink_id)

    assert result.records_processed == 2
    assert store.upsert_calls == [("vendor_bills", 2, "id", False)]
    assert warnings == ["1 of 2 rows for vendor_bills are missing conflict column 'id'"]


def test_db_writer_validate_connection_distinguishes_missing_table() -> None:
    """Return False for an undefined table and raise for other store failures."""

    assert DestinationTableWriter(_RecordingStore()).writer_validate_connection("customers") is True

    missing_store = _RecordingStore(probe_error=StoreError(message="missing", code=UNDEFINED_TABLE_CODE))
    assert DestinationTableWriter(missing_store).writer_validate_connection("customers") is False

    broken_store = _RecordingStore(probe_error=StoreError(message="password authentication failed", code="28P01"))
    with pytest.raises(DestinationWriteError, match="password authentication failed"):
        DestinationTableWriter(broken_store).writer_validate_connection("customers")


def test_db_writer_count_and_truncate_delegate_to_store() -> None:
    store = _RecordingStore()
    store.count_value = 42
    writer = DestinationTableWriter(store)

    assert writer.writer_get_record_count("customers") == 42
    writer.writer_truncate_table("customers")
    assert store.deleted_tables == ["customers"]

    with pytest.raises(ValueError):
        DestinationTableWriter(store, chunk_size=0)
