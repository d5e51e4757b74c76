"""
Named tokens attached to a session: access/refresh/ID tokens, expiry markers, and the
resource-scoped access token. Serialized as a flat JSON object by the session store.
"""
import json
from collections.abc import Iterator, Mapping, MutableMapping


class TokenNames:
    """Token names as stored by the OIDC client at sign-in."""

    ACCESS_TOKEN = "access_token"
    EXPIRES_AT = "expires_at"
    ACCESS_TOKEN_FOR_RESOURCE = f"{ACCESS_TOKEN}.resource"
    EXPIRES_AT_FOR_RESOURCE = f"{EXPIRES_AT}.resource"
    REFRESH_TOKEN = "refresh_token"
    ID_TOKEN = "id_token"
    TOKEN_TYPE = "token_type"


def access_token_key(for_resource: bool = False) -> str:
    return TokenNames.ACCESS_TOKEN_FOR_RESOURCE if for_resource else TokenNames.ACCESS_TOKEN


def expires_at_key(for_resource: bool = False) -> str:
    return TokenNames.EXPIRES_AT_FOR_RESOURCE if for_resource else TokenNames.EXPIRES_AT


class TokenSet(MutableMapping[str, str]):
    """
    Mapping of token name -> string value. Keys are unique; last write wins.
    Non-string values are rejected so the stored JSON stays a flat string map.
    """

    def __init__(self, tokens: Mapping[str, str] | None = None):
        self._tokens: dict[str, str] = {}
        if tokens:
            self.update(tokens)

    def __getitem__(self, name: str) -> str:
        return self._tokens[name]

    def __setitem__(self, name: str, value: str) -> None:
        if not isinstance(name, str) or not isinstance(value, str):
            raise TypeError("token names and values must be strings")
        self._tokens[name] = value

    def __delitem__(self, name: str) -> None:
        del self._tokens[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __repr__(self) -> str:
        # Values are credentials; show names only
        return f"TokenSet({sorted(self._tokens)})"

    def copy(self) -> "TokenSet":
        return TokenSet(self._tokens)

    def replace(self, other: Mapping[str, str]) -> None:
        """Replace all entries with those of other (in place)."""
        self._tokens.clear()
        self.update(other)

    def access_token(self, for_resource: bool = False) -> str | None:
        return self.get(access_token_key(for_resource))

    def expires_at(self, for_resource: bool = False) -> str | None:
        return self.get(expires_at_key(for_resource))

    @property
    def refresh_token(self) -> str | None:
        return self.get(TokenNames.REFRESH_TOKEN)

    @property
    def id_token(self) -> str | None:
        return self.get(TokenNames.ID_TOKEN)

    def to_json(self) -> str:
        return json.dumps(self._tokens, sort_keys=True)

    @classmethod
    def from_json(cls, raw: str | None) -> "TokenSet":
        """Parse stored JSON. Empty input gives an empty set; non-object JSON raises ValueError."""
        if not raw:
            return cls()
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("stored token set must be a JSON object")
        return cls({str(k): str(v) for k, v in data.items() if v is not None})
