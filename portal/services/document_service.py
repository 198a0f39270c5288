"""
Document service.

Documents are metadata rows pointing at objects in hosted storage. Deleting
through ``soft_delete_document`` only flips the status to "Deleted"; the row
and its file stay in place. ``delete_document`` removes the row itself but
leaves any stored object untouched.
"""

import logging

from portal.core.exceptions import ValidationError
from portal.models import db
from portal.models.document import DOCUMENT_STATUSES, Document
from portal.services import entity_service
from portal.services.filters import FilterSpec
from portal.services.statistics import document_statistics as _reduce_documents

logger = logging.getLogger(__name__)

DOCUMENT_FILTERS = FilterSpec(
    Document,
    match=("project_id", "contact_id", "document_type_id", "status", "is_template", "created_by"),
    search_columns=("title", "description"),
    default_order=("updated_at", "desc"),
)


def _validate(data: dict) -> None:
    status = data.get("status")
    if status not in (None, "") and status not in DOCUMENT_STATUSES:
        raise ValidationError(
            "Invalid document data",
            details={"status": f"must be one of: {', '.join(DOCUMENT_STATUSES)}"},
        )


def list_documents(filters: dict | None = None) -> list[dict]:
    return entity_service.list_records(DOCUMENT_FILTERS, filters)


def search_documents(query: str) -> list[dict]:
    return list_documents({"search": query})


def get_document(document_id: str) -> dict:
    return entity_service.get_record(Document, document_id).to_dict()


def create_document(data: dict, user_id: str | None = None) -> dict:
    entity_service.require_fields(data, ("title",))
    _validate(data)
    payload = dict(data)
    if user_id:
        payload.setdefault("created_by", user_id)
        payload["last_modified_by"] = user_id
    return entity_service.create_record(Document, payload)


def update_document(document_id: str, data: dict, user_id: str | None = None) -> dict:
    _validate(data)
    payload = dict(data)
    if user_id:
        payload["last_modified_by"] = user_id
    return entity_service.update_record(Document, document_id, payload)


def soft_delete_document(document_id: str, user_id: str | None = None) -> dict:
    """Mark the document Deleted and return the stored row."""
    doc = entity_service.get_record(Document, document_id)
    doc.status = "Deleted"
    if user_id:
        doc.last_modified_by = user_id
    db.session.commit()
    logger.info("Document soft-deleted", extra={"resource": "Document", "record_id": document_id})
    return doc.to_dict()


def delete_document(document_id: str) -> None:
    entity_service.delete_record(Document, document_id)


def document_statistics() -> dict:
    return _reduce_documents(list_documents())
