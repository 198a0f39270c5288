"""
Expense PDF blueprint (comptabilité > dépenses).

Endpoints (session required):
    POST   /api/comptabilite/depenses/pdf               multipart: expenseId, file
    GET    /api/comptabilite/depenses/pdf?expenseId=    signed download URL
    DELETE /api/comptabilite/depenses/pdf?expenseId=    remove the stored PDF

Storage and database failures answer 500 with a per-operation message; the
cause is only logged.
"""

import logging

from flask import Blueprint, g, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from portal.core.exceptions import BackendError, NotFoundError, ValidationError
from portal.middleware.session_auth import login_required
from portal.models import db
from portal.services import expense_pdf_service
from portal.utils.errors import E, api_error, error_from_exception

logger = logging.getLogger(__name__)

expense_pdf_bp = Blueprint("expense_pdf", __name__, url_prefix="/api/comptabilite/depenses")


def _failure(exc: Exception, generic: str):
    if isinstance(exc, SQLAlchemyError):
        db.session.rollback()
    if isinstance(exc, (NotFoundError, ValidationError)):
        return error_from_exception(exc)
    logger.error("%s: %s", generic, exc, exc_info=not isinstance(exc, BackendError),
                 extra={"resource": "Expense", "user_id": g.get("user_id")})
    return api_error(E.BACKEND if isinstance(exc, BackendError) else E.INTERNAL, generic)


@expense_pdf_bp.route("/pdf", methods=["POST"])
@login_required
def upload_expense_pdf():
    expense_id = request.form.get("expenseId")
    upload = request.files.get("file")
    if not expense_id or upload is None:
        return api_error(E.VALIDATION_REQUIRED, "Expense ID and file are required")

    try:
        result = expense_pdf_service.upload_expense_pdf(
            expense_id,
            filename=upload.filename,
            content=upload.read(),
            content_type=upload.mimetype,
            user_id=g.user_id,
            access_token=g.access_token,
        )
    except Exception as exc:
        return _failure(exc, "Failed to upload PDF")
    return jsonify(result), 200


@expense_pdf_bp.route("/pdf", methods=["GET"])
@login_required
def get_expense_pdf():
    expense_id = request.args.get("expenseId")
    if not expense_id:
        return api_error(E.VALIDATION_REQUIRED, "Expense ID is required")
    try:
        result = expense_pdf_service.get_expense_pdf(expense_id, access_token=g.access_token)
    except Exception as exc:
        return _failure(exc, "Failed to generate download URL")
    return jsonify(result), 200


@expense_pdf_bp.route("/pdf", methods=["DELETE"])
@login_required
def delete_expense_pdf():
    expense_id = request.args.get("expenseId")
    if not expense_id:
        return api_error(E.VALIDATION_REQUIRED, "Expense ID is required")
    try:
        result = expense_pdf_service.delete_expense_pdf(
            expense_id, user_id=g.user_id, access_token=g.access_token,
        )
    except Exception as exc:
        return _failure(exc, "Failed to delete PDF")
    return jsonify(result), 200
