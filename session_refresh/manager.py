"""
Session token refresh manager. Runs once per session-validation event:
scheme check -> primary access token -> resource access token (if configured) -> verdict.
Expired tokens are refreshed with the stored refresh token; any failure rejects the session.
"""
import enum
import logging
from dataclasses import dataclass, field

from session_refresh.errors import MissingRefreshToken, SchemeMismatch, TokenRefreshError
from session_refresh.expiry import expires_at, is_expired
from session_refresh.options import RefreshOptions
from session_refresh.token_client import TokenEndpointClient
from session_refresh.token_set import TokenNames, TokenSet, access_token_key, expires_at_key

logger = logging.getLogger(__name__)


class Verdict(enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"


@dataclass
class ValidationEvent:
    """
    One session-validation checkpoint. The session layer reads should_renew / rejected
    after validation to decide whether to rewrite or drop the session record.
    """

    token_set: TokenSet
    scheme: str | None = None
    should_renew: bool = False
    rejected: bool = False

    def renew(self) -> None:
        self.should_renew = True

    def reject(self) -> None:
        self.rejected = True
        self.should_renew = False


@dataclass
class ValidationResult:
    verdict: Verdict
    token_set: TokenSet
    renew: bool = False
    error: TokenRefreshError | None = None
    refreshed: list[str] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return self.verdict is Verdict.ACCEPT


class SessionTokenRefreshManager:
    """
    Checks and refreshes the tokens of one session per call. Holds no per-session state;
    options and token client are injected and may be shared across requests.
    """

    def __init__(self, options: RefreshOptions, client: TokenEndpointClient | None = None):
        self.options = options
        self.client = client or TokenEndpointClient(options.endpoint, timeout=options.timeout)

    def validate(self, event: ValidationEvent) -> ValidationResult:
        if event is None or event.token_set is None:
            raise TypeError("validate() requires an event carrying a token set")

        if event.scheme is not None and event.scheme != self.options.scheme:
            logger.debug("session scheme %r does not match %r; rejecting", event.scheme, self.options.scheme)
            return self._reject(event, SchemeMismatch(f"session belongs to scheme {event.scheme!r}"))

        # Refreshed values land in a working copy; the caller's set changes only on accept
        working = event.token_set.copy()
        refreshed: list[str] = []
        try:
            if self.refresh_tokens(working, for_resource=False):
                refreshed.append("primary")
            if self.options.resource and self.refresh_tokens(working, for_resource=True):
                refreshed.append("resource")
        except TokenRefreshError as e:
            logger.warning("session rejected: %s (%s)", e.code, e)
            return self._reject(event, e)

        if refreshed:
            event.token_set.replace(working)
            event.renew()
        return ValidationResult(
            verdict=Verdict.ACCEPT,
            token_set=event.token_set,
            renew=bool(refreshed),
            refreshed=refreshed,
        )

    def refresh_tokens(self, token_set: TokenSet, for_resource: bool = False) -> bool:
        """
        Refresh one scope of token_set in place if its access token is expired.
        Returns True if a refresh happened, False if the token was still valid.
        Raises MissingRefreshToken, RefreshFailed or MalformedResponse.
        """
        expiry_key = expires_at_key(for_resource)
        if not is_expired(token_set.get(expiry_key)):
            logger.debug("%s not expired; no refresh needed", expiry_key)
            return False

        refresh_token = token_set.refresh_token
        if not refresh_token:
            raise MissingRefreshToken("access token expired and no refresh token stored")

        tokens = self.client.refresh(
            refresh_token,
            client_id=self.options.client_id,
            client_secret=self.options.client_secret,
            resource=self.options.resource if for_resource else None,
        )

        token_set[access_token_key(for_resource)] = tokens.access_token
        token_set[expiry_key] = expires_at(tokens.expires_in)
        if tokens.refresh_token:
            token_set[TokenNames.REFRESH_TOKEN] = tokens.refresh_token
        if tokens.id_token:
            token_set[TokenNames.ID_TOKEN] = tokens.id_token
        if tokens.token_type and not for_resource:
            token_set[TokenNames.TOKEN_TYPE] = tokens.token_type

        logger.info(
            "refreshed %s access token for client_id=%s",
            "resource" if for_resource else "primary",
            self.options.client_id,
        )
        return True

    @staticmethod
    def _reject(event: ValidationEvent, error: TokenRefreshError) -> ValidationResult:
        event.reject()
        return ValidationResult(verdict=Verdict.REJECT, token_set=event.token_set, error=error)
