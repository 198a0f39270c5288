"""Standardised API error responses.

Usage
-----
    from portal.utils.errors import api_error, E

    return api_error(E.NOT_FOUND, "Specification not found")
    return api_error(E.VALIDATION_REQUIRED, "Title and content are required")
"""

from __future__ import annotations

import logging

from flask import jsonify

from portal.core.exceptions import BackendError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants."""

    # Validation – HTTP 400
    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"

    # Auth – HTTP 401
    UNAUTHORIZED = "ERR_UNAUTHORIZED"

    # Not-found – HTTP 404
    NOT_FOUND = "ERR_NOT_FOUND"

    # Server – HTTP 500
    DATABASE = "ERR_DATABASE"
    BACKEND = "ERR_BACKEND"
    INTERNAL = "ERR_INTERNAL"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.UNAUTHORIZED: 401,
    E.NOT_FOUND: 404,
    E.DATABASE: 500,
    E.BACKEND: 500,
    E.INTERNAL: 500,
}


def api_error(
    code: str,
    message: str,
    *,
    status: int | None = None,
    details: dict | None = None,
):
    """Return a standard JSON error response.

    Parameters
    ----------
    code : str
        Machine-readable error code (use ``E.*`` constants).
    message : str
        Human-readable explanation for the UI.
    status : int, optional
        HTTP status override. Falls back to ``_DEFAULT_STATUS[code]``,
        then to ``400``.
    details : dict, optional
        Extra structured payload (field-level validation errors).

    Returns
    -------
    tuple[Response, int]
        ``(jsonify(body), http_status)`` – drop-in for Flask views.
    """

    http_status = status or _DEFAULT_STATUS.get(code, 400)

    body: dict = {
        "error": message,
        "code": code,
    }
    if details:
        body["details"] = details

    return jsonify(body), http_status


def error_from_exception(exc: Exception, *, generic: str = "Internal Server Error"):
    """Map a service-layer exception onto an ``api_error`` response.

    NotFoundError → 404, ValidationError → 400. Anything else is logged with
    its traceback and answered with ``generic`` so internals never leak.
    """
    if isinstance(exc, NotFoundError):
        return api_error(E.NOT_FOUND, exc.public_message)
    if isinstance(exc, ValidationError):
        code = E.VALIDATION_INVALID if exc.details else E.VALIDATION_REQUIRED
        return api_error(code, str(exc), details=exc.details or None)
    if isinstance(exc, BackendError):
        logger.error("Backend call failed: %s", exc)
        return api_error(E.BACKEND, generic)
    logger.error("Unhandled error: %s", exc, exc_info=exc)
    return api_error(E.INTERNAL, generic)
