"""
Generic record operations shared by the entity services.

Each entity module (contact_service, project_service, ...) declares a
FilterSpec and its own validation, then delegates the session work here so
every entity reads, writes and logs the same way.

Functions:
    - list_records:    filtered/ordered/paginated rows as dicts
    - count_records:   total matching rows, pagination ignored
    - get_record:      single row (ORM instance) or NotFoundError
    - create_record:   insert + commit, returns the stored row
    - update_record:   partial update + commit, returns the stored row
    - delete_record:   delete + commit
    - require_fields:  ValidationError naming every missing field
"""

import logging

from portal.core.exceptions import NotFoundError, ValidationError
from portal.models import db
from portal.services.filters import FilterSpec

logger = logging.getLogger(__name__)


def require_fields(data: dict, fields, message: str | None = None) -> None:
    """Raise ValidationError unless every field in ``fields`` is non-empty."""
    missing = [f for f in fields if data.get(f) in (None, "")]
    if missing:
        raise ValidationError(
            message or f"Missing required fields: {', '.join(missing)}",
            details={f: "required" for f in missing},
        )


def list_records(spec: FilterSpec, filters: dict | None = None) -> list[dict]:
    stmt = spec.build(filters)
    return [row.to_dict() for row in db.session.execute(stmt).scalars().all()]


def count_records(spec: FilterSpec, filters: dict | None = None) -> int:
    return db.session.execute(spec.count_statement(filters)).scalar_one()


def get_record(model, record_id: str, label: str | None = None, *, pinned: dict | None = None):
    """Fetch by id. ``pinned`` columns must also match (e.g. type="lead").

    Raises:
        NotFoundError: If the id is absent or a pinned column differs.
    """
    obj = db.session.get(model, record_id)
    if obj is None or any(getattr(obj, model.column_attrs()[k].key) != v for k, v in (pinned or {}).items()):
        raise NotFoundError(label or model.__name__, record_id)
    return obj


def create_record(model, data: dict, label: str | None = None) -> dict:
    """Insert a row from ``data`` (unknown keys ignored) and return it as stored."""
    obj = model()
    obj.apply(data)
    db.session.add(obj)
    db.session.commit()
    logger.info("%s created", label or model.__name__,
                extra={"resource": label or model.__name__, "record_id": obj.id})
    return obj.to_dict()


def update_record(model, record_id: str, data: dict, label: str | None = None,
                  *, pinned: dict | None = None) -> dict:
    """Apply ``data`` to an existing row and return the stored row."""
    obj = get_record(model, record_id, label, pinned=pinned)
    obj.apply(data)
    db.session.commit()
    logger.info("%s updated", label or model.__name__,
                extra={"resource": label or model.__name__, "record_id": record_id})
    return obj.to_dict()


def delete_record(model, record_id: str, label: str | None = None, *, pinned: dict | None = None) -> None:
    obj = get_record(model, record_id, label, pinned=pinned)
    db.session.delete(obj)
    db.session.commit()
    logger.info("%s deleted", label or model.__name__,
                extra={"resource": label or model.__name__, "record_id": record_id})
