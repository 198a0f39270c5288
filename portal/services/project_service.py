"""Project CRUD service with filtered listing and dashboard counts."""

from __future__ import annotations

import logging

from portal.core.exceptions import ValidationError
from portal.models.project import PROJECT_PRIORITIES, PROJECT_STATUSES, PROJECT_TYPES, Project
from portal.services import entity_service
from portal.services.filters import FilterSpec
from portal.services.statistics import project_statistics as _reduce_projects

logger = logging.getLogger(__name__)

PROJECT_FILTERS = FilterSpec(
    Project,
    match={"type": "project_type", "project_type": "project_type",
           "status": "status", "priority": "priority",
           "primary_contact_id": "primary_contact_id"},
    ranges={
        "start_date_from": ("start_date", ">="),
        "start_date_to": ("start_date", "<="),
        "end_date_from": ("end_date", ">="),
        "end_date_to": ("end_date", "<="),
    },
    search_columns=("name", "description"),
    default_order=("updated_at", "desc"),
)

_CHOICES = {
    "project_type": PROJECT_TYPES,
    "status": PROJECT_STATUSES,
    "priority": PROJECT_PRIORITIES,
}


def _validate(data: dict) -> None:
    errors = {}
    for field, allowed in _CHOICES.items():
        value = data.get(field)
        if value not in (None, "") and value not in allowed:
            errors[field] = f"must be one of: {', '.join(allowed)}"

    progress = data.get("progress")
    if progress not in (None, ""):
        try:
            in_range = 0 <= int(progress) <= 100
        except (TypeError, ValueError):
            in_range = False
        if not in_range:
            errors["progress"] = "must be an integer between 0 and 100"

    if errors:
        raise ValidationError("Invalid project data", details=errors)


def list_projects(filters: dict | None = None) -> list[dict]:
    """Filters: type/project_type, status, priority, search, start/end date ranges."""
    return entity_service.list_records(PROJECT_FILTERS, filters)


def count_projects(filters: dict | None = None) -> int:
    return entity_service.count_records(PROJECT_FILTERS, filters)


def get_project(project_id: str) -> dict:
    return entity_service.get_record(Project, project_id).to_dict()


def create_project(data: dict) -> dict:
    """Create a project. ``name`` is required; enums and progress are checked."""
    entity_service.require_fields(data, ("name",))
    _validate(data)
    return entity_service.create_record(Project, data)


def update_project(project_id: str, data: dict) -> dict:
    _validate(data)
    if "name" in data:
        entity_service.require_fields(data, ("name",))
    return entity_service.update_record(Project, project_id, data)


def delete_project(project_id: str) -> None:
    entity_service.delete_record(Project, project_id)


def project_statistics(project_type: str | None = None) -> dict:
    """Status counts across all projects, or only those of ``project_type``."""
    filters = {"project_type": project_type} if project_type else {}
    return _reduce_projects(list_projects(filters))
