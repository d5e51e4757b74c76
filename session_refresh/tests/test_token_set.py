"""Tests for TokenSet: key helpers, JSON persistence, no token values in repr."""
import pytest

from session_refresh.token_set import TokenNames, TokenSet


def test_scoped_accessors():
    ts = TokenSet(
        {
            "access_token": "at",
            "expires_at": "1",
            "access_token.resource": "rat",
            "expires_at.resource": "2",
            "refresh_token": "rt",
        }
    )
    assert ts.access_token() == "at"
    assert ts.access_token(for_resource=True) == "rat"
    assert ts.expires_at() == "1"
    assert ts.expires_at(for_resource=True) == "2"
    assert ts.refresh_token == "rt"
    assert ts.id_token is None


def test_last_write_wins():
    ts = TokenSet({"access_token": "a"})
    ts["access_token"] = "b"
    assert ts["access_token"] == "b"
    assert len(ts) == 1


def test_rejects_non_string_values():
    with pytest.raises(TypeError):
        TokenSet({"expires_in": 600})


def test_json_round_trip_and_empty():
    ts = TokenSet({TokenNames.ACCESS_TOKEN: "at", TokenNames.ID_TOKEN: "it"})
    assert dict(TokenSet.from_json(ts.to_json())) == dict(ts)
    assert len(TokenSet.from_json(None)) == 0
    with pytest.raises(ValueError):
        TokenSet.from_json("[1, 2]")


def test_copy_is_independent():
    ts = TokenSet({"access_token": "a"})
    other = ts.copy()
    other["access_token"] = "b"
    assert ts["access_token"] == "a"


def test_repr_hides_values():
    ts = TokenSet({"access_token": "secret-value"})
    assert "secret-value" not in repr(ts)
    assert "access_token" in repr(ts)
