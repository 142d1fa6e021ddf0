"""Typed domain models shared across sync layers.

Raw and typed rows stay plain dictionaries: raw rows are keyed by the source
column label, typed rows by the destination column name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .timeline import domain_utc_now_iso

RawRow = dict[str, Any]
TypedRow = dict[str, Any]


@dataclass(frozen=True)
class MappingEntry:
    """One saved-search to destination-table pairing from the mapping catalog.

    Attributes:
        source_id: Remote saved-search identifier.
        destination_table: Destination table name.
        display_name: Human-readable mapping name used in logs.
        kind: Classification tag (informational only).
        write_method: Write method label (validated, otherwise unused).
    """

    source_id: str
    destination_table: str
    display_name: str
    kind: str
    write_method: str


@dataclass(frozen=True)
class SourcePage:
    """One page of saved-search results.

    Attributes:
        rows: Raw rows carried by the page.
        has_more: Whether another page follows.
        page_index: Zero-based page index reported by the source.
        total_pages: Total page count reported by the source.
    """

    rows: list[RawRow]
    has_more: bool
    page_index: int
    total_pages: int


@dataclass(frozen=True)
class SyncErrorEntry:
    """One recorded failure inside a run.

    Attributes:
        message: Operator-facing context (which mapping failed and where).
        error: Underlying exception text.
        error_kind: Stable error classification label.
        timestamp: ISO-8601 UTC time the failure was recorded.
    """

    message: str
    error: str
    error_kind: str
    timestamp: str


@dataclass
class SyncRunStats:
    """Aggregate statistics for one sync run, mutated by the orchestrator only."""

    started_at: str | None = None
    ended_at: str | None = None
    total_mappings: int = 0
    successful_syncs: int = 0
    failed_syncs: int = 0
    aborted: bool = False
    errors: list[SyncErrorEntry] = field(default_factory=list)
    diagnostics: list[dict[str, object]] = field(default_factory=list)

    def stats_record_success(self) -> None:
        """Count one successfully synced mapping."""

        self.successful_syncs += 1

    def stats_record_failure(self, message: str, error: BaseException, error_kind: str) -> None:
        """Count one failed mapping and keep its error entry.

        Args:
            message: Operator-facing failure context.
            error: Caught exception.
            error_kind: Stable error classification label.
        """

        self.failed_syncs += 1
        self.stats_record_error(message=message, error=error, error_kind=error_kind)

    def stats_record_error(self, message: str, error: BaseException, error_kind: str) -> None:
        """Append one error entry without touching mapping counters."""

        self.errors.append(
            SyncErrorEntry(
                message=message,
                error=str(error),
                error_kind=error_kind,
                timestamp=domain_utc_now_iso(),
            )
        )

    def stats_is_clean(self) -> bool:
        """Return whether the run completed without abort or failed mappings."""

        return not self.aborted and self.failed_syncs == 0

    def stats_to_payload(self) -> dict[str, object]:
        """Serialize run statistics to a JSON-compatible payload.

        Returns:
            dict[str, object]: Stats payload for logs, CLI output and HTTP bodies.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return {
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "total_mappings": self.total_mappings,
            "successful_syncs": self.successful_syncs,
            "failed_syncs": self.failed_syncs,
            "aborted": self.aborted,
            "errors": [
                {
                    "message": entry.message,
                    "error": entry.error,
                    "error_kind": entry.error_kind,
                    "timestamp": entry.timestamp,
                }
                for entry in self.errors
            ],
            "diagnostics": list(self.diagnostics),
        }


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for destination health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str
