"""Access-token helpers.

The hosted auth provider signs tokens with a secret this service never sees,
so tokens are only *read* here (signature unchecked) to short-circuit obvious
expiry before a round-trip. The provider remains the authority via
``backend_gateway.get_user``.
"""

from __future__ import annotations

import time

import jwt as pyjwt

# Sessions within this window of expiry should be refreshed by the client
REFRESH_BUFFER_SECONDS = 5 * 60


def decode_token(token: str | None) -> dict | None:
    """Return the token's claims without verifying the signature, or None."""
    if not token:
        return None
    try:
        payload = pyjwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
            algorithms=["HS256", "RS256", "ES256"],
        )
    except pyjwt.InvalidTokenError:
        return None
    return payload if isinstance(payload, dict) else None


def is_token_expired(token: str | None, now: float | None = None, leeway: int = 0) -> bool:
    """True when the token is undecodable, has no ``exp``, or ``exp`` falls before now + leeway."""
    payload = decode_token(token)
    if not payload:
        return True
    exp = payload.get("exp")
    if not isinstance(exp, (int, float)):
        return True
    current = time.time() if now is None else now
    return exp < current + leeway


def needs_refresh(token: str | None, now: float | None = None) -> bool:
    """True when the token expires within REFRESH_BUFFER_SECONDS."""
    return is_token_expired(token, now=now, leeway=REFRESH_BUFFER_SECONDS)


def token_subject(token: str | None) -> str | None:
    """The ``sub`` claim (auth provider user id), if present."""
    payload = decode_token(token)
    if not payload:
        return None
    sub = payload.get("sub")
    return str(sub) if sub else None
