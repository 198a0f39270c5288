"""
Expense PDF service.

Expense records (comptabilité > dépenses) are rows of the ``documents``
table. Each can carry one PDF receipt stored in the hosted object storage
under ``expenses/<expense id>/<uuid>.pdf``; the row keeps the file's path,
name, size and type.

Storage calls go through the backend gateway with the caller's access token
so the storage provider applies its own access rules. Gateway failures are
raised as BackendError; the blueprint answers them with a generic 500.
"""

import logging
import uuid

from flask import current_app

from portal.core.exceptions import BackendError, NotFoundError, ValidationError
from portal.integrations import backend_gateway as gw_module
from portal.models import db
from portal.models.document import Document

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def _bucket() -> str:
    return current_app.config["STORAGE_BUCKET"]


def _get_expense(expense_id: str) -> Document:
    expense = db.session.get(Document, expense_id)
    if expense is None:
        raise NotFoundError("Expense", expense_id)
    return expense


def _get_expense_file(expense_id: str) -> Document:
    expense = _get_expense(expense_id)
    if not expense.file_path:
        raise NotFoundError("Expense PDF", expense_id, "No PDF file associated with this expense")
    return expense


def upload_expense_pdf(
    expense_id: str,
    *,
    filename: str,
    content: bytes,
    content_type: str,
    user_id: str,
    access_token: str | None = None,
) -> dict:
    """Store ``content`` as the expense's PDF and record it on the row.

    The content type is checked before anything is read or written, so a
    rejected upload leaves the row exactly as it was.

    Raises:
        ValidationError: content_type is not application/pdf.
        NotFoundError: No expense with ``expense_id``.
        BackendError: Storage rejected the upload.
    """
    if content_type != PDF_CONTENT_TYPE:
        raise ValidationError("Only PDF files are allowed")

    expense = _get_expense(expense_id)
    path = f"expenses/{expense_id}/{uuid.uuid4()}.pdf"

    result = gw_module.backend_gateway.upload(
        _bucket(), path, content,
        content_type=PDF_CONTENT_TYPE,
        access_token=access_token,
        upsert=True,
    )
    if not result.ok:
        raise BackendError("storage.upload", result.status_code, result.error)

    expense.file_path = path
    expense.file_name = filename
    expense.file_size = len(content)
    expense.file_type = content_type
    expense.last_modified_by = user_id
    db.session.commit()

    logger.info(
        "Expense PDF uploaded",
        extra={"resource": "Expense", "record_id": expense_id, "file_path": path, "user_id": user_id},
    )
    return {
        "success": True,
        "expense": expense.to_dict(),
        "file": {
            "name": filename,
            "size": len(content),
            "type": content_type,
            "path": path,
            "url": gw_module.backend_gateway.public_url(_bucket(), path),
        },
    }


def get_expense_pdf(expense_id: str, *, access_token: str | None = None) -> dict:
    """Return the file name and a short-lived signed download URL.

    Raises:
        NotFoundError: No expense, or the expense has no file.
        BackendError: Storage refused to sign the URL.
    """
    expense = _get_expense_file(expense_id)
    result = gw_module.backend_gateway.create_signed_url(
        _bucket(), expense.file_path, current_app.config["SIGNED_URL_TTL"],
        access_token=access_token,
    )
    signed = result.data.get("signedURL") if result.ok and isinstance(result.data, dict) else None
    if not signed:
        raise BackendError("storage.sign", result.status_code, result.error or "no signed URL returned")

    return {
        "success": True,
        "file": {
            "name": expense.file_name,
            "url": gw_module.backend_gateway.absolute_storage_url(signed),
        },
    }


def delete_expense_pdf(expense_id: str, *, user_id: str, access_token: str | None = None) -> dict:
    """Remove the stored object, then clear the row's file fields.

    Raises:
        NotFoundError: No expense, or the expense has no file.
        BackendError: Storage refused the removal (row untouched).
    """
    expense = _get_expense_file(expense_id)
    path = expense.file_path

    result = gw_module.backend_gateway.remove(_bucket(), [path], access_token=access_token)
    if not result.ok:
        raise BackendError("storage.remove", result.status_code, result.error)

    expense.clear_file(modified_by=user_id)
    db.session.commit()

    logger.info(
        "Expense PDF deleted",
        extra={"resource": "Expense", "record_id": expense_id, "file_path": path, "user_id": user_id},
    )
    return {"success": True, "message": "PDF deleted successfully"}
