"""
Token endpoint client: refresh_token grant against the authorization server.
POST <endpoint>/oidc/token, application/x-www-form-urlencoded. No retries here.
"""
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin, urlsplit

import httpx

from session_refresh.errors import InvalidEndpoint, MalformedResponse, RefreshFailed

logger = logging.getLogger(__name__)

TOKEN_PATH = "oidc/token"


def _has_unsafe_chars(value: str) -> bool:
    """Whitespace or ASCII control characters; never valid anywhere in an endpoint URL."""
    return any(c.isspace() or ord(c) < 0x20 or ord(c) == 0x7F for c in value)


def build_token_request_uri(endpoint: str | None) -> str:
    """
    Resolve TOKEN_PATH against the endpoint (RFC 3986 reference resolution).
    "https://a.com" and "https://a.com/" -> "https://a.com/oidc/token";
    "https://a.com/path/" -> "https://a.com/path/oidc/token".
    Raises InvalidEndpoint for None/empty or anything without an http(s) scheme and host.
    """
    if not endpoint or not endpoint.strip():
        raise InvalidEndpoint("endpoint is required")
    endpoint = endpoint.strip()
    if _has_unsafe_chars(endpoint):
        raise InvalidEndpoint(f"invalid endpoint {endpoint!r}: contains whitespace or control characters")
    try:
        parts = urlsplit(endpoint)
        # Accessing port validates it (raises ValueError when out of range or non-numeric)
        parts.port
    except ValueError as e:
        raise InvalidEndpoint(f"invalid endpoint {endpoint!r}: {e}") from e
    if parts.scheme not in ("http", "https"):
        raise InvalidEndpoint(f"invalid endpoint {endpoint!r}: scheme must be http or https")
    if not parts.netloc or not parts.hostname:
        raise InvalidEndpoint(f"invalid endpoint {endpoint!r}: missing host")
    uri = urljoin(parts.geturl(), TOKEN_PATH)
    # The URI must also be one httpx will send to
    try:
        httpx.URL(uri)
    except httpx.InvalidURL as e:
        raise InvalidEndpoint(f"invalid endpoint {endpoint!r}: {e}") from e
    return uri


@dataclass
class TokenResponse:
    """Successful token response (OIDC Core 3.1.3.3)."""

    access_token: str
    expires_in: int
    token_type: str | None = None
    refresh_token: str | None = None
    id_token: str | None = None


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedResponse(f"{key} must be a string")
    return value


def parse_token_response(data: Any) -> TokenResponse:
    """
    Build TokenResponse from decoded JSON. Field names match case-insensitively.
    access_token (non-empty string) and expires_in (integer) are required.
    """
    if not isinstance(data, dict):
        raise MalformedResponse("token response must be a JSON object")
    fields = {str(k).lower(): v for k, v in data.items()}

    access_token = fields.get("access_token")
    if not isinstance(access_token, str) or not access_token:
        raise MalformedResponse("access_token missing from token response")

    expires_in = fields.get("expires_in")
    # bool is an int subclass; JSON true/false is not a lifetime
    if isinstance(expires_in, bool) or not isinstance(expires_in, int):
        raise MalformedResponse("expires_in missing or not an integer")

    return TokenResponse(
        access_token=access_token,
        expires_in=expires_in,
        token_type=_optional_str(fields, "token_type"),
        refresh_token=_optional_str(fields, "refresh_token"),
        id_token=_optional_str(fields, "id_token"),
    )


def _error_code(response: httpx.Response) -> str | None:
    """OAuth error code from an error body, if the body is a JSON object carrying one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None


class TokenEndpointClient:
    """
    Executes the refresh_token grant. The endpoint is validated on construction, so a
    bad endpoint fails at configuration time rather than on the first request.
    Pass http_client to share a connection pool or to inject a mock transport in tests.
    """

    def __init__(self, endpoint: str, http_client: httpx.Client | None = None, timeout: float = 10.0):
        self.token_endpoint = build_token_request_uri(endpoint)
        self._http_client = http_client
        self.timeout = timeout

    def _client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=self.timeout)
        return self._http_client

    def close(self) -> None:
        if self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def refresh(
        self,
        refresh_token: str,
        client_id: str,
        client_secret: str | None = None,
        resource: str | None = None,
    ) -> TokenResponse:
        """
        Exchange refresh_token for new tokens.
        Raises RefreshFailed (non-2xx or transport error) or MalformedResponse (bad body).
        """
        data = {
            "grant_type": "refresh_token",
            "client_id": client_id,
            "refresh_token": refresh_token,
        }
        if client_secret:
            data["client_secret"] = client_secret
        if resource:
            data["resource"] = resource

        logger.debug(
            "refresh_token grant: endpoint=%s client_id=%s resource=%s",
            self.token_endpoint,
            client_id,
            resource or "none",
        )
        try:
            r = self._client().post(
                self.token_endpoint,
                data=data,
                headers={"Accept": "application/json"},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise RefreshFailed(f"token endpoint unreachable: {e}") from e

        if not r.is_success:
            error = _error_code(r)
            raise RefreshFailed(
                f"token endpoint returned {r.status_code}" + (f" ({error})" if error else ""),
                status_code=r.status_code,
                error=error,
            )

        try:
            body = r.json()
        except ValueError as e:
            raise MalformedResponse(f"token response is not JSON: {e}") from e
        return parse_token_response(body)
