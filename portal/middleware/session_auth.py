"""
Session auth decorator: resolves the caller's hosted-backend session.

Usage:
    @bp.route("/api/comptabilite/depenses/pdf", methods=["POST"])
    @login_required
    def upload_expense_pdf():
        user_id = g.user_id
        ...

The access token is read from ``Authorization: Bearer <token>`` or, for
browser calls, the ``sb-access-token`` cookie. Expired or undecodable tokens
are rejected locally; everything else is confirmed with the auth provider.
On success sets g.user (provider user dict), g.user_id, g.access_token.
"""

import functools
import logging

from flask import g, make_response, request

from portal.integrations import backend_gateway as gw_module
from portal.services.token_utils import is_token_expired, needs_refresh
from portal.utils.errors import E, api_error

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "sb-access-token"


def _request_token():
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return request.cookies.get(ACCESS_TOKEN_COOKIE) or None


def current_user():
    """Resolve the request's user via the auth provider, or None."""
    token = _request_token()
    if not token or is_token_expired(token):
        return None
    result = gw_module.backend_gateway.get_user(token)
    if not result.ok or not isinstance(result.data, dict) or not result.data.get("id"):
        return None
    g.access_token = token
    return result.data


def login_required(f):
    """Decorator: answer 401 unless the request carries a live session."""

    @functools.wraps(f)
    def decorated(*args, **kwargs):
        user = current_user()
        if user is None:
            logger.info("Unauthenticated request to %s", request.path,
                        extra={"path": request.path})
            return api_error(E.UNAUTHORIZED, "Unauthorized")
        g.user = user
        g.user_id = user["id"]
        response = make_response(f(*args, **kwargs))
        if needs_refresh(g.access_token):
            response.headers["X-Session-Refresh"] = "true"
        return response

    return decorated
