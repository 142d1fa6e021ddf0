"""Regression tests for RESTlet reader pagination, URL building and error mapping."""

from __future__ import annotations

import json
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

import netsuite_sync.adapters.netsuite_restlet as restlet_module
from netsuite_sync.adapters import (
    NetSuiteRestletReader,
    SourceAdapterError,
    SourceAuthError,
    SourceNotFoundError,
    SourceProtocolError,
    SourceRemoteServerError,
    SourceTransportError,
    adapter_restlet_base_url,
)
from netsuite_sync.domain import SyncValidationError


class _SignerStub:
    """Signer stub recording every signed URL."""

    def __init__(self):
        self.signed_urls: list[str] = []

    def signer_sign_request(self, url: str, method: str = "GET") -> dict[str, str]:
        """Return a fixed authorization header and record the URL.

        Args:
            url: Request URL.
            method: HTTP method.

        Returns:
            dict[str, str]: Deterministic headers.

        Raises:
            RuntimeError: This stub does not raise runtime errors.
        """

        _ = method
        self.signed_urls.append(url)
        return {"Authorization": "OAuth realm=\"TEST\"", "Content-Type": "application/json"}


def _build_reader(handler, signer: _SignerStub | None = None, page_delay_seconds: float = 1.0) -> NetSuiteRestletReader:
    return NetSuiteRestletReader(
        account_id="1234567_SB1",
        script_id="customscript_search",
        deploy_id="customdeploy_search",
        signer=signer or _SignerStub(),
        page_delay_seconds=page_delay_seconds,
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def _json_response(payload: object, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


def test_adapters_restlet_base_url_lowercases_and_hyphenates_sandbox_account() -> None:
    """Build host label from account id with underscores replaced."""

    assert (
        adapter_restlet_base_url("1234567_SB1")
        == "https://1234567-sb1.restlets.api.netsuite.com/app/site/hosting/restlet.nl"
    )


def test_adapters_restlet_fetch_all_pages_issues_one_request_per_page(monkeypatch: pytest.MonkeyPatch) -> None:
    """Stop after the page reporting no more results and keep row order.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate pagination termination and concatenation.

    Raises:
        AssertionError: Raised when request count or row order differs.
    """

    pages = [
        {"data": [{"n": "1"}, {"n": "2"}], "hasMore": True, "pageIndex": 0, "totalPages": 3},
        {"data": [{"n": "3"}], "hasMore": True, "pageIndex": 1, "totalPages": 3},
        {"data": [{"n": "4"}], "hasMore": False, "pageIndex": 2, "totalPages": 3},
    ]
    requested_pages: list[str] = []
    sleep_calls: list[float] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        page_value = request.url.params["page"]
        requested_pages.append(page_value)
        return _json_response(pages[int(page_value)])

    monkeypatch.setattr(restlet_module.time, "sleep", lambda seconds: sleep_calls.append(seconds))

    rows = _build_reader(_handler).adapter_fetch_all_pages("customsearch_orders")

    assert requested_pages == ["0", "1", "2"]
    assert [row["n"] for row in rows] == ["1", "2", "3", "4"]
    assert sleep_calls == [1.0, 1.0]


def test_adapters_restlet_fetch_all_pages_propagates_first_page_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    """Raise on the failing page without retrying or requesting later pages."""

    requested_pages: list[str] = []
    sleep_calls: list[float] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        page_value = request.url.params["page"]
        requested_pages.append(page_value)
        if page_value == "0":
            return _json_response({"data": [{"n": "1"}], "hasMore": True, "pageIndex": 0, "totalPages": 3})
        return httpx.Response(503, text="Service Unavailable")

    monkeypatch.setattr(restlet_module.time, "sleep", lambda seconds: sleep_calls.append(seconds))

    with pytest.raises(SourceRemoteServerError) as error_info:
        _build_reader(_handler).adapter_fetch_all_pages("customsearch_orders")

    assert error_info.value.page_index == 1
    assert error_info.value.status_code == 503
    assert requested_pages == ["0", "1"]
    assert sleep_calls == [1.0]


def test_adapters_restlet_signs_exact_request_url() -> None:
    """Sign the same URL that is sent, including every query parameter."""

    signer = _SignerStub()
    sent_urls: list[str] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        sent_urls.append(str(request.url))
        assert request.headers["Authorization"].startswith("OAuth")
        return _json_response({"data": [], "hasMore": False})

    _build_reader(_handler, signer=signer).adapter_fetch_page("customsearch_orders", 2)

    assert signer.signed_urls == sent_urls
    query = parse_qs(urlsplit(sent_urls[0]).query)
    assert query == {
        "script": ["customscript_search"],
        "deploy": ["customdeploy_search"],
        "searchId": ["customsearch_orders"],
        "page": ["2"],
    }


def test_adapters_restlet_page_defaults_when_metadata_missing() -> None:
    """Default to a single final page when the payload omits page metadata."""

    page = _build_reader(lambda request: _json_response({"data": [{"a": "1"}]})).adapter_fetch_page("s", 0)

    assert page.has_more is False
    assert page.page_index == 0
    assert page.total_pages == 1
    assert page.rows == [{"a": "1"}]


def test_adapters_restlet_fetch_page_by_number_converts_to_zero_based() -> None:
    """Translate one-based page numbers to zero-based request pages."""

    requested_pages: list[str] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        requested_pages.append(request.url.params["page"])
        return _json_response({"data": [], "hasMore": False})

    reader = _build_reader(_handler)
    reader.adapter_fetch_page_by_number("s", 1)
    reader.adapter_fetch_page_by_number("s", 3)

    assert requested_pages == ["0", "2"]
    with pytest.raises(SyncValidationError):
        reader.adapter_fetch_page_by_number("s", 0)


@pytest.mark.parametrize(
    ("status_code", "expected_error"),
    [
        (401, SourceAuthError),
        (403, SourceAuthError),
        (404, SourceNotFoundError),
        (500, SourceRemoteServerError),
        (503, SourceRemoteServerError),
    ],
)
def test_adapters_restlet_maps_http_status_to_typed_error(status_code: int, expected_error: type) -> None:
    """Raise the typed error class matching the HTTP status.

    Args:
        status_code: Simulated response status.
        expected_error: Expected exception class.

    Returns:
        None: Assertions validate status mapping and error attributes.

    Raises:
        AssertionError: Raised when mapping is incorrect.
    """

    reader = _build_reader(lambda request: _json_response({"error": {"message": "nope"}}, status_code))

    with pytest.raises(expected_error) as error_info:
        reader.adapter_fetch_page("customsearch_orders", 4)

    assert error_info.value.status_code == status_code
    assert error_info.value.source_id == "customsearch_orders"
    assert error_info.value.page_index == 4
    assert "nope" in str(error_info.value)


def test_adapters_restlet_other_client_error_raises_base_source_error() -> None:
    """Use the base source error for non-2xx statuses without a dedicated class."""

    reader = _build_reader(lambda request: httpx.Response(429, text="slow down"))

    with pytest.raises(SourceAdapterError) as error_info:
        reader.adapter_fetch_page("s", 0)

    assert type(error_info.value) is SourceAdapterError
    assert error_info.value.error_kind == "source"


def test_adapters_restlet_transport_failure_raises_transport_error() -> None:
    """Map connection failures and timeouts to the transport error."""

    def _raise_connect(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    def _raise_timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(SourceTransportError, match="No response"):
        _build_reader(_raise_connect).adapter_fetch_page("s", 0)
    with pytest.raises(SourceTransportError, match="timed out"):
        _build_reader(_raise_timeout).adapter_fetch_page("s", 0)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"error": "INVALID_SEARCH"}),
        httpx.Response(200, json={"hasMore": False}),
        httpx.Response(200, json={"data": "rows"}),
        httpx.Response(200, json=[{"a": "1"}]),
    ],
)
def test_adapters_restlet_malformed_payload_raises_protocol_error(response: httpx.Response) -> None:
    """Reject non-JSON bodies, embedded errors and missing data arrays."""

    with pytest.raises(SourceProtocolError):
        _build_reader(lambda request: response).adapter_fetch_page("s", 0)


def test_adapters_restlet_accepts_json_document_encoded_as_string() -> None:
    """Decode payloads returned as a JSON string containing the page object."""

    encoded_payload = json.dumps({"data": [{"a": "1"}], "hasMore": False})
    page = _build_reader(lambda request: _json_response(encoded_payload)).adapter_fetch_page("s", 0)

    assert page.rows == [{"a": "1"}]


def test_adapters_restlet_validate_credentials_fetches_first_page() -> None:
    """Probe credentials with a page-zero request and propagate auth failures."""

    requested_pages: list[str] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        requested_pages.append(request.url.params["page"])
        return _json_response({"data": [], "hasMore": True})

    assert _build_reader(_handler).adapter_validate_credentials("s") is True
    assert requested_pages == ["0"]

    with pytest.raises(SourceAuthError):
        _build_reader(lambda request: httpx.Response(401, text="")).adapter_validate_credentials("s")


def test_adapters_restlet_blank_source_id_fails_before_request() -> None:
    """Reject blank saved-search ids without issuing a request."""

    def _unexpected(request: httpx.Request) -> httpx.Response:
        raise AssertionError("request must not be sent")

    with pytest.raises(SyncValidationError):
        _build_reader(_unexpected).adapter_fetch_page("  ", 0)
