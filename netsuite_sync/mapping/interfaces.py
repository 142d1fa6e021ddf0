"""Typed interfaces for mapping-layer normalization."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Final, Protocol

from netsuite_sync.domain import RawRow, TypedRow

Coercion = Callable[[Any], Any]
TimestampClock = Callable[[], str]

IDENTIFIER_STRATEGY_SOURCE: Final[str] = "source"
IDENTIFIER_STRATEGY_SYNTHETIC_SEQUENTIAL: Final[str] = "synthetic_sequential"
IDENTIFIER_STRATEGY_COMPOSITE_LINE_KEY: Final[str] = "composite_line_key"

IDENTIFIER_STRATEGIES: Final[frozenset[str]] = frozenset(
    {
        IDENTIFIER_STRATEGY_SOURCE,
        IDENTIFIER_STRATEGY_SYNTHETIC_SEQUENTIAL,
        IDENTIFIER_STRATEGY_COMPOSITE_LINE_KEY,
    }
)


@dataclass(frozen=True)
class FieldRule:
    """One source-to-destination field projection.

    Attributes:
        source_field: Primary source column label.
        destination_field: Destination column name.
        coercion: Value coercion applied to the first non-empty source value.
        fallback_source_fields: Source labels consulted in order when the primary value is empty.
    """

    source_field: str
    destination_field: str
    coercion: Coercion
    fallback_source_fields: tuple[str, ...] = ()

    def rule_pick_source_value(self, raw_row: RawRow) -> Any:
        """Return the first non-empty value among primary and fallback source fields.

        Args:
            raw_row: Raw source row.

        Returns:
            Any: Selected raw value, or None when every candidate is empty.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        for source_field in (self.source_field, *self.fallback_source_fields):
            value = raw_row.get(source_field)
            if value is not None and value != "":
                return value
        return None


class TableDescriptorPort(Protocol):
    """Port definition for per-table row normalization."""

    table_name: str

    def descriptor_normalize_row(self, raw_row: RawRow, row_index: int, timestamp: str) -> TypedRow:
        """Normalize one raw row into a typed destination row.

        Args:
            raw_row: Raw source row.
            row_index: Zero-based position of the row within its batch.
            timestamp: ISO-8601 UTC normalization time appended to the row.

        Returns:
            TypedRow: Typed destination row.

        Raises:
            RuntimeError: Implementations do not raise for malformed values.
        """

    def descriptor_synthetic_id_collisions(self, raw_rows: list[RawRow], typed_rows: list[TypedRow]) -> list[Any]:
        """Return synthetic identifiers that equal a source identifier in the same batch."""


class NormalizerPort(Protocol):
    """Port definition for batch normalization consumed by the orchestrator."""

    def mapping_normalize_rows(self, destination_table: str, raw_rows: list[RawRow]) -> list[TypedRow]:
        """Normalize a batch of raw rows for one destination table.

        Args:
            destination_table: Destination table name.
            raw_rows: Raw rows in source order.

        Returns:
            list[TypedRow]: Typed rows in the same order.

        Raises:
            SyncValidationError: Raised when the table name is blank.
        """
