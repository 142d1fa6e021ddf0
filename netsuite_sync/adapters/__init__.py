"""Adapter layer package for the saved-search source boundary."""

from .interfaces import RequestSignerPort, SourceReaderPort
from .netsuite_restlet import NetSuiteRestletReader, adapter_restlet_base_url
from .oauth_signer import NetSuiteOAuthSigner
from .source_errors import (
	SourceAdapterError,
	SourceAuthError,
	SourceNotFoundError,
	SourceProtocolError,
	SourceRemoteServerError,
	SourceTransportError,
)

__all__ = [
	"NetSuiteOAuthSigner",
	"NetSuiteRestletReader",
	"RequestSignerPort",
	"SourceAdapterError",
	"SourceAuthError",
	"SourceNotFoundError",
	"SourceProtocolError",
	"SourceReaderPort",
	"SourceRemoteServerError",
	"SourceTransportError",
	"adapter_restlet_base_url",
]
