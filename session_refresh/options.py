"""
Refresh options passed explicitly to the manager (no per-request service lookup).
"""
from dataclasses import dataclass

from session_refresh import config
from session_refresh.token_client import build_token_request_uri


@dataclass(frozen=True)
class RefreshOptions:
    endpoint: str
    client_id: str
    client_secret: str | None = None
    resource: str | None = None
    scheme: str = config.AUTH_SCHEME
    timeout: float = 10.0

    def __post_init__(self):
        if not self.client_id:
            raise ValueError("client_id is required")
        if not self.scheme:
            raise ValueError("scheme is required")
        # Raises InvalidEndpoint now rather than on the first refresh
        build_token_request_uri(self.endpoint)

    @property
    def token_endpoint(self) -> str:
        return build_token_request_uri(self.endpoint)

    @classmethod
    def from_env(cls) -> "RefreshOptions":
        return cls(
            endpoint=config.ENDPOINT,
            client_id=config.CLIENT_ID,
            client_secret=config.CLIENT_SECRET,
            resource=config.RESOURCE,
            scheme=config.AUTH_SCHEME,
            timeout=config.HTTP_TIMEOUT,
        )
