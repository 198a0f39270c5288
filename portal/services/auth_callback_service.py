"""
Sign-in callback service.

Completes the hosted provider's sign-in flow: trades the one-time code for
a session, then creates or refreshes the local user profile. Profile writes
are best-effort; a failure there is logged and the sign-in still succeeds.
"""

import logging
from urllib.parse import quote

from sqlalchemy.exc import SQLAlchemyError

from portal.core.exceptions import BackendError
from portal.integrations import backend_gateway as gw_module
from portal.models import db
from portal.models.base import utcnow
from portal.models.user import UserProfile

logger = logging.getLogger(__name__)

AVATAR_URL = "https://ui-avatars.com/api/?name={initials}&background=random"
VERIFIER_COOKIE_SUFFIX = "-auth-token-code-verifier"


def initials_for(first_name: str, last_name: str, email: str | None) -> str:
    """Up to two initials from the names, else the email's first letter, else "U"."""
    initials = (first_name[:1] + last_name[:1]).upper()
    if initials:
        return initials
    if email:
        return email[:1].upper()
    return "U"


def avatar_url_for(first_name: str, last_name: str, email: str | None) -> str:
    return AVATAR_URL.format(initials=quote(initials_for(first_name, last_name, email), safe=""))


def exchange_code(code: str, code_verifier: str | None = None) -> dict:
    """Trade ``code`` (plus the PKCE ``code_verifier``) for a session dict.

    Raises:
        BackendError: The provider rejected the code. ``detail`` carries the
            provider's message, which the callback shows on the sign-in page.
    """
    result = gw_module.backend_gateway.exchange_code_for_session(code, code_verifier)
    if not result.ok or not isinstance(result.data, dict):
        raise BackendError("auth.exchange", result.status_code, result.error or "Invalid session response")
    return result.data


def find_code_verifier(cookies, cookie_name: str | None = None) -> tuple[str | None, str | None]:
    """Return ``(cookie name, verifier)`` from the request cookies.

    With no configured name, the first ``sb-*-auth-token-code-verifier``
    cookie is taken. The browser client may store the value JSON-quoted.
    """
    if cookie_name:
        names = [cookie_name] if cookie_name in cookies else []
    else:
        names = [n for n in cookies if n.startswith("sb-") and n.endswith(VERIFIER_COOKIE_SUFFIX)]
    if not names:
        return None, None
    value = (cookies.get(names[0]) or "").strip().strip('"')
    return names[0], value or None


def upsert_profile(user: dict) -> UserProfile | None:
    """Create the profile on first sign-in, otherwise refresh it.

    Returns the stored profile, or None when the write failed.
    """
    user_id = user.get("id")
    if not user_id:
        return None

    now = utcnow()
    verified = bool(user.get("email_confirmed_at"))
    try:
        profile = db.session.get(UserProfile, user_id)
        if profile is None:
            meta = user.get("user_metadata") or {}
            first_name = meta.get("first_name") or ""
            last_name = meta.get("last_name") or ""
            email = user.get("email")
            profile = UserProfile(
                id=user_id,
                email=email.lower() if email else None,
                first_name=first_name or None,
                last_name=last_name or None,
                avatar_url=avatar_url_for(first_name, last_name, email),
                email_verified=verified,
                last_login=now,
            )
            db.session.add(profile)
            logger.info("Creating user profile", extra={"user_id": user_id})
        else:
            profile.email_verified = verified
            profile.last_login = now
            profile.updated_at = now
        db.session.commit()
        return profile
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Could not write user profile", extra={"user_id": user_id})
        return None


def safe_next_path(next_param: str | None, default: str = "/dashboard") -> str:
    """Only same-site absolute paths are followed (no scheme, no //host)."""
    if not next_param or not next_param.startswith("/") or next_param.startswith("//") or "\\" in next_param:
        return default
    return next_param
