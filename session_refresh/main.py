"""
Session glue app. Every protected route validates the session through the refresh manager:
expired access tokens are refreshed transparently, sessions that cannot be refreshed are dropped.
POST /sessions stands in for the sign-in callback of the OIDC client (lab use only).
"""
import logging
import threading
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from session_refresh.claims import read_id_token_claims
from session_refresh.config import SESSION_COOKIE_NAME
from session_refresh.database import get_db, init_db
from session_refresh.manager import SessionTokenRefreshManager, ValidationEvent
from session_refresh.options import RefreshOptions
from session_refresh.session_store import (
    create_session,
    delete_session,
    get_session,
    load_token_set,
    save_token_set,
)
from session_refresh.token_set import TokenSet, access_token_key

logger = logging.getLogger(__name__)

# Single shared manager, built once on first use (tests override the dependency)
_manager: SessionTokenRefreshManager | None = None
_manager_lock = threading.Lock()


def get_refresh_manager() -> SessionTokenRefreshManager:
    global _manager
    if _manager is None:
        # Sync dependencies run in the threadpool; only one thread may build the manager
        with _manager_lock:
            if _manager is None:
                _manager = SessionTokenRefreshManager(RefreshOptions.from_env())
    return _manager


def close_refresh_manager() -> None:
    """Close the shared manager's HTTP client; the next request builds a fresh one."""
    global _manager
    with _manager_lock:
        if _manager is not None:
            _manager.client.close()
            _manager = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and check configuration on startup."""
    init_db()
    get_refresh_manager()
    yield
    close_refresh_manager()


app = FastAPI(title="Session Refresh", version="0.1.0", lifespan=lifespan)


def _clear_cookie_header() -> dict[str, str]:
    return {"Set-Cookie": f"{SESSION_COOKIE_NAME}=; Max-Age=0; Path=/; HttpOnly"}


def _unauthenticated(error: str, description: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "error_description": description},
        headers=_clear_cookie_header(),
    )


@dataclass
class ValidatedSession:
    token_set: TokenSet
    renewed: bool


def require_session(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    manager: Annotated[SessionTokenRefreshManager, Depends(get_refresh_manager)],
) -> ValidatedSession:
    """
    Dependency: load the session from the cookie and validate it.
    Reject -> session deleted, 401. Accept with renew -> refreshed tokens persisted.
    """
    session_id = request.cookies.get(SESSION_COOKIE_NAME)
    record = get_session(db, session_id)
    if record is None:
        raise _unauthenticated("login_required", "No session")

    try:
        token_set = load_token_set(record)
    except ValueError:
        logger.warning("stored token set is unreadable; dropping session")
        delete_session(db, session_id)
        raise _unauthenticated("login_required", "Session is corrupt")

    event = ValidationEvent(token_set=token_set, scheme=record.scheme)
    result = manager.validate(event)
    if not result.accepted:
        delete_session(db, session_id)
        raise _unauthenticated("login_required", f"Session rejected: {result.error.code}")

    if event.should_renew:
        save_token_set(db, record, event.token_set)
    return ValidatedSession(token_set=event.token_set, renewed=event.should_renew)


class SessionIn(BaseModel):
    tokens: dict[str, str]
    scheme: str | None = None


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "session_refresh"}


@app.post("/sessions", status_code=status.HTTP_201_CREATED)
def start_session(body: SessionIn, response: Response, db: Annotated[Session, Depends(get_db)]):
    """Hand a signed-in token set to the session store and set the session cookie."""
    if not body.tokens.get(access_token_key()):
        raise HTTPException(
            status_code=400,
            detail={"error": "invalid_request", "error_description": "access_token is required"},
        )
    session_id = create_session(db, TokenSet(body.tokens), scheme=body.scheme)
    response.set_cookie(SESSION_COOKIE_NAME, session_id, httponly=True, path="/")
    return {"status": "created"}


@app.get("/me")
def me(session: Annotated[ValidatedSession, Depends(require_session)]):
    """Identity claims from the ID token plus current token expiry."""
    claims = read_id_token_claims(session.token_set.id_token)
    return {
        "sub": claims.get("sub"),
        "claims": claims,
        "expires_at": session.token_set.expires_at(),
        "resource_expires_at": session.token_set.expires_at(for_resource=True),
        "renewed": session.renewed,
    }


@app.get("/tokens/access")
def access_token(
    session: Annotated[ValidatedSession, Depends(require_session)],
    resource: bool = False,
):
    """Current (refreshed if needed) access token for API calls; resource=true for the resource-scoped one."""
    token = session.token_set.access_token(for_resource=resource)
    if not token:
        raise HTTPException(
            status_code=404,
            detail={"error": "not_found", "error_description": "No access token for this scope"},
        )
    return {
        "access_token": token,
        "token_type": session.token_set.get("token_type", "Bearer"),
        "expires_at": session.token_set.expires_at(for_resource=resource),
    }


@app.post("/logout")
def logout(request: Request, response: Response, db: Annotated[Session, Depends(get_db)]):
    """Delete the session and clear the cookie. Idempotent."""
    delete_session(db, request.cookies.get(SESSION_COOKIE_NAME))
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return {"status": "logged_out"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "session_refresh.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
