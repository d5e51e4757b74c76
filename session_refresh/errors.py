"""
Error taxonomy for token refresh. Everything except InvalidEndpoint is folded into a
reject verdict by the manager; InvalidEndpoint surfaces at configuration time.
"""


class TokenRefreshError(Exception):
    """Base class for refresh failures. `code` is a short machine-readable name."""

    code = "token_refresh_error"


class InvalidEndpoint(TokenRefreshError, ValueError):
    """The configured endpoint cannot be turned into a token request URI."""

    code = "invalid_endpoint"


class MissingRefreshToken(TokenRefreshError):
    """No refresh token stored when one is needed."""

    code = "missing_refresh_token"


class RefreshFailed(TokenRefreshError):
    """Token endpoint answered with a non-2xx status, or could not be reached (status_code None)."""

    code = "refresh_failed"

    def __init__(self, message: str, status_code: int | None = None, error: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.error = error


class MalformedResponse(TokenRefreshError):
    """Token endpoint body is not JSON or lacks the expected fields."""

    code = "malformed_response"


class SchemeMismatch(TokenRefreshError):
    """Session was issued under a different authentication scheme."""

    code = "scheme_mismatch"
