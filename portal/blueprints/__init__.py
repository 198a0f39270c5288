"""
Pledge Portal
Blueprint helpers shared by the API blueprints.
"""

import logging

from flask import request
from sqlalchemy.exc import SQLAlchemyError

from portal.core.exceptions import BackendError, NotFoundError, ValidationError
from portal.models import db
from portal.utils.errors import E, api_error, error_from_exception

logger = logging.getLogger(__name__)


def filters_from_args(keys) -> dict:
    """Collect the query-string args named in ``keys``.

    A key given once yields its string value; a repeated key
    (``?status=new&status=qualified``) yields the list of values.
    """
    filters = {}
    for key in keys:
        values = [v for v in request.args.getlist(key) if v != ""]
        if not values:
            continue
        filters[key] = values if len(values) > 1 else values[0]
    return filters


def json_body() -> dict:
    """Request JSON object, or {} when the body is missing or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register_service_errors(bp) -> None:
    """Map service-layer exceptions raised inside ``bp`` to JSON responses."""

    @bp.errorhandler(NotFoundError)
    @bp.errorhandler(ValidationError)
    @bp.errorhandler(BackendError)
    def _handle_service_error(error):
        return error_from_exception(error)

    @bp.errorhandler(SQLAlchemyError)
    def _handle_db_error(error):
        db.session.rollback()
        logger.exception("Database error in %s endpoint=%s", bp.name, request.endpoint)
        return api_error(E.DATABASE, "Database error")
