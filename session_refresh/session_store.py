"""
Persistence of token sets per session (the session layer around the refresh manager).
Callers own concurrency: two requests refreshing the same session race, last write wins.
"""
import logging
import secrets

from sqlalchemy.orm import Session

from session_refresh.models import SessionRecord
from session_refresh.token_set import TokenSet

logger = logging.getLogger(__name__)


def create_session(db: Session, token_set: TokenSet, scheme: str | None = None) -> str:
    """Store a freshly signed-in token set; returns the opaque session id."""
    session_id = secrets.token_urlsafe(32)
    db.add(SessionRecord(session_id=session_id, scheme=scheme, tokens=token_set.to_json()))
    db.commit()
    logger.info("session created (scheme=%s)", scheme or "none")
    return session_id


def get_session(db: Session, session_id: str | None) -> SessionRecord | None:
    if not session_id:
        return None
    return db.query(SessionRecord).filter(SessionRecord.session_id == session_id).first()


def load_token_set(record: SessionRecord) -> TokenSet:
    return TokenSet.from_json(record.tokens)


def save_token_set(db: Session, record: SessionRecord, token_set: TokenSet) -> None:
    """Rewrite the persisted tokens after a refresh."""
    record.tokens = token_set.to_json()
    db.commit()


def delete_session(db: Session, session_id: str | None) -> bool:
    """Delete the session; True if one existed."""
    record = get_session(db, session_id)
    if record is None:
        return False
    db.delete(record)
    db.commit()
    logger.info("session deleted")
    return True
