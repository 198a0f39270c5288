"""
Update log (mise à jour) service.

Release / maintenance entries stored in ``<DATA_DIR>/updates.json``.
Entries are free-form: whatever the client posts is kept, plus ``id``,
``created_at`` and ``updated_at`` which the server owns.

Listing order: priority rank (critical, high, medium, low, then anything
unrecognised), then most recently updated first.
"""

import logging
import os

from flask import current_app

from portal.core.exceptions import ValidationError
from portal.services.flat_file_store import FlatFileStore
from portal.services.statistics import update_statistics
from portal.utils.helpers import parse_datetime

logger = logging.getLogger(__name__)

FILENAME = "updates.json"
PRIORITY_RANK = {"critical": 0, "high": 1, "medium": 2, "low": 3}
_UNRANKED = len(PRIORITY_RANK)
_SERVER_FIELDS = ("id", "created_at", "updated_at")
_SEARCH_FIELDS = ("title", "description", "changelog")
_MATCH_FIELDS = ("type", "status", "priority")


def get_store() -> FlatFileStore:
    """Store bound to the current app's DATA_DIR."""
    return FlatFileStore(os.path.join(current_app.config["DATA_DIR"], FILENAME), resource="Update")


def _updated_ts(entry: dict) -> float:
    parsed = parse_datetime(entry.get("updated_at"))
    return parsed.timestamp() if parsed else 0.0


def _rank(entry: dict) -> int:
    priority = entry.get("priority")
    return PRIORITY_RANK.get(priority, _UNRANKED) if isinstance(priority, str) else _UNRANKED


def sort_updates(entries: list[dict]) -> list[dict]:
    """Priority rank ascending, then ``updated_at`` descending."""
    return sorted(entries, key=lambda e: (_rank(e), -_updated_ts(e)))


def list_updates(filters: dict | None = None) -> list[dict]:
    """Filter on type / status / priority (exact) and search (substring).

    ``search`` is case-insensitive and matches title, description or
    changelog; entries missing those fields simply do not match on them.
    """
    filters = filters or {}
    entries = get_store().read_all()

    for field in _MATCH_FIELDS:
        wanted = filters.get(field)
        if wanted:
            entries = [e for e in entries if e.get(field) == wanted]

    term = (filters.get("search") or "").lower()
    if term:
        entries = [
            e for e in entries
            if any(term in str(e.get(field) or "").lower() for field in _SEARCH_FIELDS)
        ]
    return sort_updates(entries)


def _client_fields(data: dict) -> dict:
    return {k: v for k, v in data.items() if k not in _SERVER_FIELDS}


def create_update(data: dict) -> dict:
    """Store a new entry.

    Raises:
        ValidationError: If the body is not an object or has no title.
    """
    if not isinstance(data, dict):
        raise ValidationError("Update body must be a JSON object")
    if not data.get("title"):
        raise ValidationError("Title is required")
    return get_store().create(_client_fields(data))


def update_update(update_id: str, data: dict) -> dict:
    """Merge ``data`` into the entry. Raises NotFoundError."""
    if not isinstance(data, dict):
        raise ValidationError("Update body must be a JSON object")
    return get_store().update(update_id, _client_fields(data))


def delete_update(update_id: str) -> None:
    get_store().delete(update_id)


def get_statistics() -> dict:
    return update_statistics(get_store().read_all())
