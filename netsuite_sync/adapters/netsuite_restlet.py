"""NetSuite RESTlet adapter for paginated saved-search retrieval."""

from __future__ import annotations

import json
import time
from typing import Any, Final
from urllib.parse import urlencode

import httpx
from loguru import logger

from netsuite_sync.domain import RawRow, SourcePage, SyncValidationError

from .interfaces import RequestSignerPort, SourceReaderPort
from .source_errors import (
    SourceAdapterError,
    SourceAuthError,
    SourceNotFoundError,
    SourceProtocolError,
    SourceRemoteServerError,
    SourceTransportError,
)


def adapter_restlet_base_url(account_id: str) -> str:
    """Build the RESTlet endpoint URL for one NetSuite account.

    Sandbox account ids such as `1234567_SB1` resolve to the `1234567-sb1` host label.

    Args:
        account_id: NetSuite account identifier.

    Returns:
        str: RESTlet endpoint URL without query string.

    Raises:
        ValueError: Raised when account id is blank.
    """

    normalized_account_id = account_id.strip()
    if not normalized_account_id:
        raise ValueError("account_id must not be blank")

    host_label = normalized_account_id.lower().replace("_", "-")
    return f"https://{host_label}.restlets.api.netsuite.com/app/site/hosting/restlet.nl"


class NetSuiteRestletReader(SourceReaderPort):
    """Source reader for the saved-search RESTlet `{data, hasMore, pageIndex, totalPages}` contract."""

    _USER_AGENT: Final[str] = "netsuite-sync/0.1 (Python/httpx)"

    def __init__(
        self,
        account_id: str,
        script_id: str,
        deploy_id: str,
        signer: RequestSignerPort,
        request_timeout_seconds: float = 120.0,
        page_delay_seconds: float = 1.0,
        http_client: httpx.Client | None = None,
        base_url: str | None = None,
    ):
        """Initialize RESTlet reader.

        Args:
            account_id: NetSuite account identifier.
            script_id: RESTlet script identifier.
            deploy_id: RESTlet deployment identifier.
            signer: Per-request authorization header provider.
            request_timeout_seconds: HTTP timeout for one page request.
            page_delay_seconds: Fixed delay between successive page requests.
            http_client: Optional preconfigured HTTP client (tests inject mock transports).
            base_url: Optional endpoint override; defaults to the account RESTlet URL.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        if signer is None:
            raise ValueError("signer must not be None")
        if not script_id or not script_id.strip():
            raise ValueError("script_id must not be blank")
        if not deploy_id or not deploy_id.strip():
            raise ValueError("deploy_id must not be blank")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")
        if page_delay_seconds < 0:
            raise ValueError("page_delay_seconds must be >= 0")

        self._base_url = (base_url or adapter_restlet_base_url(account_id)).rstrip("/")
        self._script_id = script_id.strip()
        self._deploy_id = deploy_id.strip()
        self._signer = signer
        self._request_timeout_seconds = request_timeout_seconds
        self._page_delay_seconds = page_delay_seconds
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.Client()

    def adapter_close(self) -> None:
        """Release the HTTP client when this reader created it."""

        if self._owns_http_client:
            self._http_client.close()

    def adapter_build_page_url(self, source_id: str, page_index: int) -> str:
        """Build the deterministic request URL for one page.

        Args:
            source_id: Saved-search identifier.
            page_index: Zero-based page index.

        Returns:
            str: Full request URL with query string.

        Raises:
            SyncValidationError: Raised when source id is blank or page index is negative.
        """

        normalized_source_id = str(source_id).strip()
        if not normalized_source_id:
            raise SyncValidationError("source_id must not be blank", field="source_id")
        if page_index < 0:
            raise SyncValidationError("page_index must be >= 0", field="page_index")

        query_parameters = {
            "script": self._script_id,
            "deploy": self._deploy_id,
            "searchId": normalized_source_id,
            "page": str(page_index),
        }
        return f"{self._base_url}?{urlencode(query_parameters)}"

    def adapter_fetch_page(self, source_id: str, page_index: int) -> SourcePage:
        """Fetch one zero-based page of saved-search results.

        Args:
            source_id: Saved-search identifier.
            page_index: Zero-based page index.

        Returns:
            SourcePage: Parsed page.

        Raises:
            SourceAuthError: Raised on HTTP 401/403.
            SourceNotFoundError: Raised on HTTP 404.
            SourceRemoteServerError: Raised on HTTP 5xx.
            SourceTransportError: Raised when no response was received.
            SourceProtocolError: Raised when payload shape is invalid or carries an error.
        """

        request_url = self.adapter_build_page_url(source_id=source_id, page_index=page_index)
        response = self._adapter_http_get(url=request_url, source_id=str(source_id), page_index=page_index)
        page = self._adapter_parse_page(response=response, source_id=str(source_id), page_index=page_index)
        logger.debug(
            f"Retrieved {len(page.rows)} rows from saved search {source_id} "
            f"(page {page.page_index + 1} of {page.total_pages})"
        )
        return page

    def adapter_fetch_page_by_number(self, source_id: str, page_number: int) -> SourcePage:
        """Fetch one page addressed by its one-based page number.

        Args:
            source_id: Saved-search identifier.
            page_number: One-based page number.

        Returns:
            SourcePage: Parsed page.

        Raises:
            SyncValidationError: Raised when page number is lower than 1.
            SourceAdapterError: Raised for any typed source failure.
        """

        if page_number < 1:
            raise SyncValidationError("page_number must be >= 1", field="page_number")

        logger.info(f"Fetching page {page_number} (internal page {page_number - 1}) of saved search {source_id}")
        return self.adapter_fetch_page(source_id=source_id, page_index=page_number - 1)

    def adapter_fetch_all_pages(self, source_id: str) -> list[RawRow]:
        """Fetch every page of one saved search and concatenate rows in order.

        Pages are requested strictly one after another with a fixed delay between
        requests. The first page failure propagates without retry.

        Args:
            source_id: Saved-search identifier.

        Returns:
            list[RawRow]: All rows across pages.

        Raises:
            SourceAdapterError: Raised for any typed source failure.
        """

        all_rows: list[RawRow] = []
        page_index = 0
        while True:
            page = self.adapter_fetch_page(source_id=source_id, page_index=page_index)
            all_rows.extend(page.rows)
            if not page.has_more:
                break
            page_index += 1
            if self._page_delay_seconds > 0:
                time.sleep(self._page_delay_seconds)

        logger.info(f"Total rows retrieved from saved search {source_id}: {len(all_rows)} ({page_index + 1} pages)")
        return all_rows

    def adapter_validate_credentials(self, source_id: str) -> bool:
        """Confirm credentials by dry-run fetching the first page of a saved search.

        Args:
            source_id: Saved-search identifier used for the probe.

        Returns:
            bool: Always True; failures raise.

        Raises:
            SourceAdapterError: Raised for any typed source failure.
        """

        logger.info(f"Validating NetSuite credentials against saved search {source_id} ({self._base_url})")
        self.adapter_fetch_page(source_id=source_id, page_index=0)
        logger.info("NetSuite credential validation succeeded")
        return True

    def _adapter_http_get(self, url: str, source_id: str, page_index: int) -> httpx.Response:
        """Execute one signed HTTP GET and map status codes to typed errors.

        Args:
            url: Full request URL.
            source_id: Saved-search identifier for error context.
            page_index: Zero-based page index for error context.

        Returns:
            httpx.Response: Successful (2xx) response.

        Raises:
            SourceAdapterError: Raised for transport failures and non-2xx status codes.
        """

        headers = self._signer.signer_sign_request(url, "GET")
        headers["User-Agent"] = self._USER_AGENT
        error_context = {"source_id": source_id, "page_index": page_index}

        try:
            response = self._http_client.get(url, headers=headers, timeout=self._request_timeout_seconds)
        except httpx.TimeoutException as error:
            raise SourceTransportError("NetSuite request timed out", **error_context) from error
        except httpx.TransportError as error:
            raise SourceTransportError(f"No response received from NetSuite: {error}", **error_context) from error

        status_code = response.status_code
        if 200 <= status_code < 300:
            return response

        detail = self._adapter_error_detail(response)
        message = f"NetSuite returned HTTP {status_code}: {detail}"
        if status_code in (401, 403):
            raise SourceAuthError(message, status_code=status_code, **error_context)
        if status_code == 404:
            raise SourceNotFoundError(message, status_code=status_code, **error_context)
        if status_code >= 500:
            raise SourceRemoteServerError(message, status_code=status_code, **error_context)
        raise SourceAdapterError(message, status_code=status_code, **error_context)

    def _adapter_parse_page(self, response: httpx.Response, source_id: str, page_index: int) -> SourcePage:
        """Parse a response body into a validated page.

        Args:
            response: Successful HTTP response.
            source_id: Saved-search identifier for error context.
            page_index: Requested page index, used when payload omits it.

        Returns:
            SourcePage: Validated page.

        Raises:
            SourceProtocolError: Raised when payload shape is invalid or carries an embedded error.
        """

        error_context = {"source_id": source_id, "page_index": page_index, "status_code": response.status_code}
        try:
            payload: Any = response.json()
            # RESTlets may return the JSON document as an encoded string.
            if isinstance(payload, str):
                payload = json.loads(payload)
        except ValueError as error:
            raise SourceProtocolError("Failed to parse NetSuite response as JSON", **error_context) from error

        if not isinstance(payload, dict):
            raise SourceProtocolError("Invalid NetSuite response: expected a JSON object", **error_context)
        if payload.get("error"):
            raise SourceProtocolError(f"NetSuite API error: {payload['error']}", **error_context)

        rows = payload.get("data")
        if not isinstance(rows, list):
            raise SourceProtocolError("Invalid NetSuite response: missing data array", **error_context)
        if any(not isinstance(row, dict) for row in rows):
            raise SourceProtocolError("Invalid NetSuite response: data rows must be objects", **error_context)

        try:
            reported_page_index = int(payload.get("pageIndex") or 0)
            total_pages = int(payload.get("totalPages") or 1)
        except (TypeError, ValueError) as error:
            raise SourceProtocolError("Invalid NetSuite response: non-numeric page metadata", **error_context) from error

        return SourcePage(
            rows=rows,
            has_more=bool(payload.get("hasMore", False)),
            page_index=reported_page_index,
            total_pages=total_pages,
        )

    def _adapter_error_detail(self, response: httpx.Response) -> str:
        """Extract a short error description from a non-2xx response."""

        try:
            payload = response.json()
        except ValueError:
            return response.reason_phrase or "Unknown error"
        if isinstance(payload, dict):
            for key in ("message", "error"):
                value = payload.get(key)
                if isinstance(value, dict):
                    value = value.get("message")
                if value:
                    return str(value)
        return response.reason_phrase or "Unknown error"
