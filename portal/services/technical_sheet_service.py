"""
Technical sheet (fiche technique) service.

Technologies used by the association's tooling, kept in
``<DATA_DIR>/technologies.json``. Records are free-form; the server owns
``id``, ``created_at`` and ``updated_at``.
"""

import os

from flask import current_app

from portal.core.exceptions import ValidationError
from portal.services.flat_file_store import FlatFileStore

FILENAME = "technologies.json"
_SERVER_FIELDS = ("id", "created_at", "updated_at")


def get_store() -> FlatFileStore:
    return FlatFileStore(os.path.join(current_app.config["DATA_DIR"], FILENAME), resource="Technology")


def _client_fields(data) -> dict:
    if not isinstance(data, dict):
        raise ValidationError("Technology body must be a JSON object")
    return {k: v for k, v in data.items() if k not in _SERVER_FIELDS}


def list_technologies() -> list[dict]:
    return get_store().read_all()


def create_technology(data: dict) -> dict:
    return get_store().create(_client_fields(data))


def update_technology(technology_id: str, data: dict) -> dict:
    """Merge ``data`` into the record. Raises NotFoundError ("Technology not found")."""
    return get_store().update(technology_id, _client_fields(data))


def delete_technology(technology_id: str) -> None:
    get_store().delete(technology_id)
