"""Record normalization service turning raw saved-search rows into typed destination rows."""

from __future__ import annotations

from loguru import logger

from netsuite_sync.domain import RawRow, SyncValidationError, TypedRow, domain_utc_now_iso

from .interfaces import NormalizerPort, TimestampClock
from .registry import NormalizationRegistry, mapping_build_default_registry


class RecordNormalizationService(NormalizerPort):
    """Registry-driven normalizer; pure apart from the injected clock."""

    def __init__(self, registry: NormalizationRegistry | None = None, clock: TimestampClock | None = None):
        """Initialize normalization service.

        Args:
            registry: Optional descriptor registry; defaults to every known table plus the heuristic fallback.
            clock: Optional ISO-8601 timestamp provider used for the per-row `timestamp` column.

        Returns:
            None: Initializer does not return values.

        Raises:
            RuntimeError: This initializer does not raise runtime errors.
        """

        self._registry = registry or mapping_build_default_registry()
        self._clock = clock or domain_utc_now_iso

    def mapping_normalize_rows(self, destination_table: str, raw_rows: list[RawRow]) -> list[TypedRow]:
        """Normalize raw rows for one destination table.

        Args:
            destination_table: Destination table name.
            raw_rows: Raw rows in source order.

        Returns:
            list[TypedRow]: Typed rows in the same order; empty for empty input.

        Raises:
            SyncValidationError: Raised when the table name is blank or a row is not a mapping.
        """

        descriptor = self._registry.registry_resolve(destination_table)
        if not raw_rows:
            return []

        if not self._registry.registry_has_explicit(destination_table):
            logger.info(f"No explicit normalization for {destination_table}, using name-based field typing")
        logger.debug(f"Sample raw row for {destination_table}: {raw_rows[0]}")

        typed_rows: list[TypedRow] = []
        for row_index, raw_row in enumerate(raw_rows):
            if not isinstance(raw_row, dict):
                raise SyncValidationError(
                    f"raw row {row_index} for {destination_table} must be a mapping",
                    field="raw_rows",
                )
            typed_rows.append(
                descriptor.descriptor_normalize_row(raw_row=raw_row, row_index=row_index, timestamp=self._clock())
            )

        colliding_ids = descriptor.descriptor_synthetic_id_collisions(raw_rows, typed_rows)
        if colliding_ids:
            # Postgres rejects a chunk that repeats a conflict key (SQLSTATE 21000).
            logger.warning(
                f"Positional identifiers {colliding_ids} for {destination_table} collide with source identifiers "
                "in the same batch"
            )

        logger.info(f"Normalized {len(typed_rows)} rows for {destination_table}")
        return typed_rows
