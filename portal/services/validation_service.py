"""
Test & validation (test et validation) service.

Test cases live in ``<DATA_DIR>/tests.json``; each carries its checklist as
``check_items``. Listing is newest first.

Functions:
    - list_test_cases
    - create_test_case:   title required; status "draft", priority "medium"
    - update_test_case:   merge; a sent ``check_items`` replaces the checklist
    - delete_test_case
    - get_statistics
"""

import os
import uuid

from flask import current_app

from portal.core.exceptions import ValidationError
from portal.services.flat_file_store import FlatFileStore
from portal.services.statistics import validation_statistics
from portal.utils.helpers import parse_datetime, utc_iso_now

FILENAME = "tests.json"
_SERVER_FIELDS = ("id", "created_at", "updated_at")


def get_store() -> FlatFileStore:
    return FlatFileStore(os.path.join(current_app.config["DATA_DIR"], FILENAME), resource="Test")


def _check_items(items) -> list[dict]:
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise ValidationError("check_items must be a list of objects",
                              details={"check_items": "expected object[]"})
    now = utc_iso_now()
    return [
        {
            "id": item.get("id") or str(uuid.uuid4()),
            "description": item.get("description") or "",
            "is_completed": bool(item.get("is_completed")),
            "created_at": item.get("created_at") or now,
        }
        for item in items
    ]


def _client_fields(data) -> dict:
    if not isinstance(data, dict):
        raise ValidationError("Test body must be a JSON object")
    fields = {k: v for k, v in data.items() if k not in _SERVER_FIELDS}
    if "check_items" in fields:
        fields["check_items"] = _check_items(fields["check_items"] or [])
    return fields


def _created_ts(entry: dict) -> float:
    parsed = parse_datetime(entry.get("created_at"))
    return parsed.timestamp() if parsed else 0.0


def list_test_cases() -> list[dict]:
    return sorted(get_store().read_all(), key=_created_ts, reverse=True)


def create_test_case(data: dict) -> dict:
    fields = _client_fields(data)
    if not fields.get("title"):
        raise ValidationError("Title is required")
    fields.setdefault("status", "draft")
    fields.setdefault("priority", "medium")
    fields.setdefault("check_items", [])
    return get_store().create(fields)


def update_test_case(test_id: str, data: dict) -> dict:
    return get_store().update(test_id, _client_fields(data))


def delete_test_case(test_id: str) -> None:
    get_store().delete(test_id)


def get_statistics() -> dict:
    return validation_statistics(get_store().read_all())
