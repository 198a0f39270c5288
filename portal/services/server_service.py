"""
Server inventory (serveurs) service.

Servers live in ``<DATA_DIR>/servers.json``. New servers start offline with
zeroed metrics; client-sent values override those defaults but never the
server-owned ``id`` and timestamps.
"""

import os

from flask import current_app

from portal.core.exceptions import ValidationError
from portal.services.entity_service import require_fields
from portal.services.flat_file_store import FlatFileStore

FILENAME = "servers.json"
_REQUIRED = ("name", "ip_address", "type", "os", "location")
_SERVER_FIELDS = ("id", "created_at", "updated_at")


def get_store() -> FlatFileStore:
    return FlatFileStore(os.path.join(current_app.config["DATA_DIR"], FILENAME), resource="Server")


def _client_fields(data) -> dict:
    if not isinstance(data, dict):
        raise ValidationError("Server body must be a JSON object")
    return {k: v for k, v in data.items() if k not in _SERVER_FIELDS}


def list_servers() -> list[dict]:
    return get_store().read_all()


def create_server(data: dict) -> dict:
    """Register a server.

    Raises:
        ValidationError: "Missing required fields" unless name, ip_address,
            type, os and location are all present.
    """
    fields = _client_fields(data)
    require_fields(fields, _REQUIRED, "Missing required fields")
    server = {
        "status": "offline",
        "metrics": {"cpu_usage": 0, "memory_usage": 0, "disk_usage": 0, "uptime": 0},
        "services": [],
    }
    server.update(fields)
    return get_store().create(server)


def update_server(server_id: str, data: dict) -> dict:
    return get_store().update(server_id, _client_fields(data))


def delete_server(server_id: str) -> None:
    get_store().delete(server_id)
