"""Structured diagnostics events recorded along a sync run."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def domain_utc_now_iso() -> str:
    """Return the current wall-clock time as an ISO-8601 UTC string."""

    return datetime.now(timezone.utc).isoformat()


def domain_build_sync_event(
    stage: str,
    status: str,
    table: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, object]:
    """Build one diagnostics event for the run timeline.

    Args:
        stage: Stage name (`validation`, `mapping`, `page`, `run`).
        status: Stage status marker (`started`, `completed`, `failed`, ...).
        table: Destination table the event refers to, if any.
        details: Optional structured details (counts, error text).

    Returns:
        dict[str, object]: JSON-compatible event payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    event_payload: dict[str, object] = {
        "stage": stage,
        "status": status,
        "at_utc": domain_utc_now_iso(),
    }
    if table is not None:
        event_payload["table"] = table
    if details is not None:
        event_payload["details"] = details
    return event_payload
