"""
SQLite engine for the session store. One row per signed-in session (see models.SessionRecord).
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from session_refresh.config import DATABASE_URL
from session_refresh.models import Base


def _engine_options(url: str) -> dict:
    # Sessions are read and rewritten from FastAPI's threadpool
    options: dict = {"connect_args": {"check_same_thread": False}}
    # In-memory store: every connection must see the same database
    if url.startswith("sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


if not DATABASE_URL.startswith("sqlite"):
    raise ValueError(f"session store supports SQLite only, got {DATABASE_URL!r}")

engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create the sessions table if missing."""
    Base.metadata.create_all(bind=engine)


def get_db():
    """Dependency: yield a DB session scoped to one request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
