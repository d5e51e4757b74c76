"""
Session refresh configuration. Endpoint, client credentials and resource come from env.
No secrets in this file; the client secret is only ever read from the environment.
"""
import os

# Authorization server base endpoint; the token endpoint is resolved relative to it (oidc/token)
ENDPOINT = os.environ.get("OIDC_ENDPOINT", "http://127.0.0.1:9000/")

# Our client_id (must be registered at the authorization server)
CLIENT_ID = os.environ.get("OIDC_CLIENT_ID", "test-client")

# Confidential clients only; empty means public client
CLIENT_SECRET = os.environ.get("OIDC_CLIENT_SECRET", "").strip() or None

# Optional API resource (audience) for a separately scoped access token
RESOURCE = os.environ.get("OIDC_RESOURCE", "").strip() or None

# Authentication scheme sessions must carry (if they carry one at all)
AUTH_SCHEME = os.environ.get("OIDC_AUTH_SCHEME", "oidc")

# Timeout (seconds) for the refresh call to the token endpoint
HTTP_TIMEOUT = float(os.environ.get("OIDC_HTTP_TIMEOUT", "10.0"))

# SQLite session store for development
DATABASE_URL = os.environ.get("SESSION_DATABASE_URL", "sqlite:///./sessions.db")

# Cookie holding the opaque session id
SESSION_COOKIE_NAME = os.environ.get("SESSION_COOKIE_NAME", "session_id")
