"""
Read claims from the stored ID token for display.
The signature is not checked here: the OIDC client validated the ID token at sign-in,
and refreshed ID tokens come straight from the token endpoint over TLS.
"""
import logging

import jwt

logger = logging.getLogger(__name__)


def read_id_token_claims(id_token: str | None) -> dict:
    """Decoded payload of id_token, or {} when absent or not a JWT."""
    if not id_token:
        return {}
    try:
        claims = jwt.decode(id_token, options={"verify_signature": False})
    except jwt.DecodeError as e:
        logger.debug("stored id_token is not a decodable JWT: %s", e)
        return {}
    return claims if isinstance(claims, dict) else {}
