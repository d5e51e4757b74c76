"""
Pytest configuration for session_refresh. In-memory SQLite session store and a fixed test client config.
"""
import os

# In-memory SQLite; database.py uses StaticPool so all connections share the same DB
os.environ["SESSION_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["OIDC_ENDPOINT"] = "https://auth.example/"
os.environ["OIDC_CLIENT_ID"] = "test-client"
# Tests configure secret and resource per case; don't inherit them from the shell
for name in ("OIDC_CLIENT_SECRET", "OIDC_RESOURCE", "OIDC_AUTH_SCHEME"):
    if name in os.environ:
        del os.environ[name]
