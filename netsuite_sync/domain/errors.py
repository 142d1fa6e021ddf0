"""Project-native typed exceptions shared across sync layers."""

from __future__ import annotations


class SyncError(Exception):
    """Base exception for every typed sync failure.

    Attributes:
        error_kind: Stable classification label used in run statistics.
    """

    error_kind = "unexpected"


class SyncValidationError(SyncError, ValueError):
    """Caller-side contract violation (malformed table, column, or input shape).

    Attributes:
        field: Name of the offending argument or config field, when known.
    """

    error_kind = "validation"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class MappingCatalogError(SyncValidationError):
    """Mapping catalog file is missing, unreadable, or contains invalid entries.

    Attributes:
        entry_index: Zero-based catalog entry position, when the failure is entry-specific.
    """

    error_kind = "catalog"

    def __init__(self, message: str, entry_index: int | None = None, field: str | None = None):
        super().__init__(message, field=field)
        self.entry_index = entry_index


def domain_error_kind(error: BaseException) -> str:
    """Return the stable classification label for any raised exception.

    Args:
        error: Caught exception.

    Returns:
        str: Error kind label (`unexpected` for untyped exceptions).

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if isinstance(error, SyncError):
        return error.error_kind
    return "unexpected"
