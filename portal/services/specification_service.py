"""
Specification (cahier des charges) service.

Specifications live in ``<DATA_DIR>/cahier-des-charges.json``. Records use
camelCase timestamps (``createdAt`` / ``updatedAt``) as the front end reads
them.

Functions:
    - list_specifications
    - create_specification:  title + content required; status starts at "draft"
    - update_specification:  only non-empty title / content / status applied
    - delete_specification
    - get_statistics
"""

import logging
import os

from flask import current_app

from portal.core.exceptions import ValidationError
from portal.services.flat_file_store import FlatFileStore
from portal.services.statistics import specification_statistics

logger = logging.getLogger(__name__)

FILENAME = "cahier-des-charges.json"
_EDITABLE_FIELDS = ("title", "content", "status")


def get_store() -> FlatFileStore:
    """Store bound to the current app's DATA_DIR."""
    return FlatFileStore(
        os.path.join(current_app.config["DATA_DIR"], FILENAME),
        resource="Specification",
        created_key="createdAt",
        updated_key="updatedAt",
    )


def list_specifications() -> list[dict]:
    return get_store().read_all()


def create_specification(data: dict) -> dict:
    """Create a draft specification.

    Raises:
        ValidationError: If title or content is missing or empty.
    """
    title = data.get("title")
    content = data.get("content")
    if not title or not content:
        raise ValidationError("Title and content are required")
    return get_store().create({"title": title, "content": content, "status": "draft"})


def update_specification(spec_id: str, data: dict) -> dict:
    """Apply the provided, non-empty editable fields.

    Raises:
        NotFoundError: If no specification has ``spec_id`` (file untouched).
    """
    changes = {field: data[field] for field in _EDITABLE_FIELDS if data.get(field)}
    return get_store().update(spec_id, changes)


def delete_specification(spec_id: str) -> None:
    get_store().delete(spec_id)


def get_statistics() -> dict:
    return specification_statistics(list_specifications())
