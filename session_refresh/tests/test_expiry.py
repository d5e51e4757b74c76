"""Tests for expiry helpers: is_expired fails safe, expires_at round-trips."""
from datetime import datetime, timedelta, timezone

import pytest

from session_refresh.expiry import expires_at, is_expired


def _now():
    return datetime.now(timezone.utc)


@pytest.mark.parametrize(
    "value",
    [
        None,
        "",
        "foo",
        "2024-13-45T00:00:00Z",
        "1.5",
        "99999999999999999999",
        "9_999_999_999",
        " 9999999999 ",
        "\u0669\u0669\u0669\u0669\u0669\u0669\u0669\u0669\u0669\u0669\u0669",
    ],
)
def test_missing_or_unparsable_is_expired(value):
    assert is_expired(value) is True


def test_past_iso_is_expired():
    assert is_expired((_now() - timedelta(seconds=1)).isoformat()) is True


def test_future_iso_is_not_expired():
    assert is_expired((_now() + timedelta(seconds=5)).isoformat()) is False


def test_future_iso_with_z_suffix():
    value = (_now() + timedelta(minutes=5)).strftime("%Y-%m-%dT%H:%M:%SZ")
    assert is_expired(value) is False


def test_naive_iso_read_as_utc():
    naive = (_now() + timedelta(minutes=5)).replace(tzinfo=None).isoformat()
    assert is_expired(naive) is False
    naive_past = (_now() - timedelta(minutes=5)).replace(tzinfo=None).isoformat()
    assert is_expired(naive_past) is True


def test_epoch_seconds():
    assert is_expired(str(int(_now().timestamp()) + 60)) is False
    assert is_expired(str(int(_now().timestamp()) - 60)) is True


def test_expires_at_in_future_and_close_to_now_plus_lifetime():
    value = expires_at(1)
    assert is_expired(value) is False
    parsed = datetime.fromisoformat(value)
    assert parsed.tzinfo is not None
    assert abs((parsed - (_now() + timedelta(seconds=1))).total_seconds()) < 2


def test_expires_at_zero_lifetime_is_expired():
    assert is_expired(expires_at(0)) is True
