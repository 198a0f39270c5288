"""
Auth blueprint: completes the hosted provider's sign-in flow.

Endpoints:
  GET /api/auth/callback?code=&next=   code → session, profile upsert, redirect
  GET /api/auth/me                     current user's profile
"""

import logging
from urllib.parse import quote

from flask import Blueprint, current_app, g, jsonify, redirect, request

from portal.core.exceptions import BackendError
from portal.middleware.session_auth import ACCESS_TOKEN_COOKIE, login_required
from portal.models import db
from portal.models.user import UserProfile
from portal.services import auth_callback_service

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

SIGNIN_PATH = "/auth/signin"


def _signin_redirect(message: str | None = None):
    target = SIGNIN_PATH if message is None else f"{SIGNIN_PATH}?error={quote(message, safe='')}"
    return redirect(target)


def _clear_verifier(response, cookie_name: str | None):
    """The verifier is single-use; drop it once an exchange was attempted."""
    if cookie_name:
        response.delete_cookie(cookie_name)
    return response


@auth_bp.route("/callback", methods=["GET"])
def callback():
    """Exchange ``code`` for a session and land the user on ``next``.

    The profile write never blocks the redirect; an exchange failure sends
    the user back to the sign-in page with the provider's message.
    """
    code = request.args.get("code")
    if not code:
        return _signin_redirect()

    verifier_cookie, code_verifier = auth_callback_service.find_code_verifier(
        request.cookies, current_app.config.get("AUTH_CODE_VERIFIER_COOKIE"),
    )
    try:
        session = auth_callback_service.exchange_code(code, code_verifier)
    except BackendError as exc:
        logger.warning("Code exchange failed: %s", exc)
        return _clear_verifier(_signin_redirect(exc.detail or "Authentication failed"), verifier_cookie)
    except Exception:
        logger.exception("Unexpected error in auth callback")
        return _clear_verifier(_signin_redirect("An unexpected error occurred"), verifier_cookie)

    user = session.get("user") or {}
    if user:
        auth_callback_service.upsert_profile(user)

    response = redirect(auth_callback_service.safe_next_path(request.args.get("next")))
    access_token = session.get("access_token")
    if access_token:
        response.set_cookie(
            ACCESS_TOKEN_COOKIE,
            access_token,
            max_age=session.get("expires_in"),
            httponly=True,
            secure=not current_app.debug and not current_app.testing,
            samesite="Lax",
        )
    return _clear_verifier(response, verifier_cookie)


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    profile = db.session.get(UserProfile, g.user_id)
    if profile is None:
        return jsonify({"user": {"id": g.user_id, "email": g.user.get("email")}}), 200
    return jsonify({"user": profile.to_dict()}), 200
