"""Project-native typed exceptions for saved-search source failures."""

from __future__ import annotations

from netsuite_sync.domain.errors import SyncError


class SourceAdapterError(SyncError):
    """Base exception for source-level fetch failures.

    Attributes:
        status_code: HTTP status code when a response was received.
        source_id: Saved-search identifier of the failing request.
        page_index: Zero-based page index of the failing request.
    """

    error_kind = "source"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        source_id: str | None = None,
        page_index: int | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.source_id = source_id
        self.page_index = page_index


class SourceAuthError(SourceAdapterError, PermissionError):
    """Source rejected the signed request (HTTP 401/403)."""

    error_kind = "auth"


class SourceNotFoundError(SourceAdapterError, LookupError):
    """Source endpoint or saved search does not exist (HTTP 404)."""

    error_kind = "not_found"


class SourceRemoteServerError(SourceAdapterError, ConnectionError):
    """Source answered with a server-side failure (HTTP 5xx)."""

    error_kind = "remote_server"


class SourceTransportError(SourceAdapterError, ConnectionError):
    """No response was received (network failure or timeout)."""

    error_kind = "transport"


class SourceProtocolError(SourceAdapterError, ValueError):
    """Response payload is not the expected page shape or carries an embedded error."""

    error_kind = "protocol"
