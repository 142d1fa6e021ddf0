"""OAuth 1.0a token-based request signer for NetSuite RESTlet calls."""

from __future__ import annotations

from oauthlib.oauth1 import SIGNATURE_HMAC_SHA256, Client

from .interfaces import RequestSignerPort


class NetSuiteOAuthSigner(RequestSignerPort):
    """Produce HMAC-SHA256 token-based authorization headers.

    Every call builds a fresh nonce and timestamp, so headers must never be
    reused across requests.
    """

    _ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH"})

    def __init__(
        self,
        account_id: str,
        consumer_key: str,
        consumer_secret: str,
        token_id: str,
        token_secret: str,
    ):
        """Initialize signer credentials.

        Args:
            account_id: NetSuite account identifier, used as OAuth realm.
            consumer_key: Integration consumer key.
            consumer_secret: Integration consumer secret.
            token_id: Access token identifier.
            token_secret: Access token secret.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when any credential is blank.
        """

        credentials = {
            "account_id": account_id,
            "consumer_key": consumer_key,
            "consumer_secret": consumer_secret,
            "token_id": token_id,
            "token_secret": token_secret,
        }
        for name, value in credentials.items():
            if not value or not value.strip():
                raise ValueError(f"{name} must not be blank")

        self._realm = account_id.strip()
        self._consumer_key = consumer_key.strip()
        self._consumer_secret = consumer_secret.strip()
        self._token_id = token_id.strip()
        self._token_secret = token_secret.strip()

    def signer_sign_request(self, url: str, method: str = "GET") -> dict[str, str]:
        """Return authorization headers for one request.

        Args:
            url: Full request URL including query string.
            method: HTTP method.

        Returns:
            dict[str, str]: `Authorization` and `Content-Type` headers.

        Raises:
            ValueError: Raised when URL is blank, method unsupported, or signing fails.
        """

        if not url or not url.strip():
            raise ValueError("url is required for request signing")
        normalized_method = (method or "GET").strip().upper()
        if normalized_method not in self._ALLOWED_METHODS:
            raise ValueError(f"unsupported HTTP method: {normalized_method}")

        client = Client(
            self._consumer_key,
            client_secret=self._consumer_secret,
            resource_owner_key=self._token_id,
            resource_owner_secret=self._token_secret,
            signature_method=SIGNATURE_HMAC_SHA256,
            realm=self._realm,
        )
        _, signed_headers, _ = client.sign(url, http_method=normalized_method)

        authorization = signed_headers.get("Authorization")
        if not authorization:
            raise ValueError("request signing produced no Authorization header")

        return {
            "Authorization": authorization,
            "Content-Type": "application/json",
        }
