"""Typed interfaces for adapter-layer responsibilities."""

from typing import Protocol

from netsuite_sync.domain import RawRow, SourcePage


class RequestSignerPort(Protocol):
    """Port definition for per-request authorization header generation."""

    def signer_sign_request(self, url: str, method: str = "GET") -> dict[str, str]:
        """Return authorization headers valid for exactly one request.

        Args:
            url: Full request URL including query string.
            method: HTTP method.

        Returns:
            dict[str, str]: Header mapping including `Authorization`.

        Raises:
            ValueError: Raised when the request cannot be signed.
        """


class SourceReaderPort(Protocol):
    """Port definition for reading saved-search result pages."""

    def adapter_fetch_page(self, source_id: str, page_index: int) -> SourcePage:
        """Fetch one zero-based page of saved-search results.

        Args:
            source_id: Saved-search identifier.
            page_index: Zero-based page index.

        Returns:
            SourcePage: Parsed page.

        Raises:
            SourceAdapterError: Raised for any typed source failure.
        """

    def adapter_fetch_page_by_number(self, source_id: str, page_number: int) -> SourcePage:
        """Fetch one one-based page of saved-search results."""

    def adapter_fetch_all_pages(self, source_id: str) -> list[RawRow]:
        """Fetch and concatenate every page of one saved search."""

    def adapter_validate_credentials(self, source_id: str) -> bool:
        """Confirm credentials by fetching the first page of a saved search."""
