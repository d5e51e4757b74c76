"""
Expiry helpers for stored token timestamps.
Stored values are either Unix-epoch seconds or ISO-8601; anything else counts as expired.
"""
import re
from datetime import datetime, timedelta, timezone

# Plain ASCII digits only; int() would also take "1_000", " 12 " and non-ASCII digits
_EPOCH_RE = re.compile(r"-?[0-9]+")


def _parse_instant(value: str) -> datetime | None:
    """Epoch seconds first, then ISO-8601. Naive timestamps are read as UTC. None if unparsable."""
    if _EPOCH_RE.fullmatch(value):
        try:
            return datetime.fromtimestamp(int(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_expired(value: str | None) -> bool:
    """
    True if value is None/empty, cannot be parsed, or is not in the future.
    """
    if not value:
        return True
    instant = _parse_instant(value)
    if instant is None:
        return True
    return instant <= datetime.now(timezone.utc)


def expires_at(lifetime_seconds: int) -> str:
    """Now plus lifetime_seconds, as ISO-8601 with UTC offset."""
    return (datetime.now(timezone.utc) + timedelta(seconds=lifetime_seconds)).isoformat()
