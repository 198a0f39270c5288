"""Calendar event service. Events are listed in chronological order."""

import logging

from portal.core.exceptions import ValidationError
from portal.models.event import EVENT_PRIORITIES, EVENT_STATUSES, Event
from portal.services import entity_service
from portal.services.filters import FilterSpec
from portal.services.statistics import event_statistics as _reduce_events
from portal.utils.helpers import parse_datetime

logger = logging.getLogger(__name__)

EVENT_FILTERS = FilterSpec(
    Event,
    match=("event_type", "status", "project_id", "created_by"),
    ranges={
        "start_date": ("start_datetime", ">="),
        "end_date": ("end_datetime", "<="),
    },
    search_columns=("title", "description", "location"),
    default_order=("start_datetime", "asc"),
)

_REQUIRED = ("title", "start_datetime", "end_datetime")


def _validate(data: dict, existing: Event | None = None) -> None:
    errors = {}
    if data.get("status") not in (None, "") and data["status"] not in EVENT_STATUSES:
        errors["status"] = f"must be one of: {', '.join(EVENT_STATUSES)}"
    if data.get("priority") not in (None, ""):
        try:
            valid = int(data["priority"]) in EVENT_PRIORITIES
        except (TypeError, ValueError):
            valid = False
        if not valid:
            errors["priority"] = "must be -1, 0 or 1"

    start = parse_datetime(data.get("start_datetime") or getattr(existing, "start_datetime", None))
    end = parse_datetime(data.get("end_datetime") or getattr(existing, "end_datetime", None))
    if start is not None and end is not None and end < start:
        errors["end_datetime"] = "must not be before start_datetime"

    if errors:
        raise ValidationError("Invalid event data", details=errors)


def list_events(filters: dict | None = None) -> list[dict]:
    """Filters: event_type, status (scalar or list), start_date, end_date."""
    return entity_service.list_records(EVENT_FILTERS, filters)


def get_event(event_id: str) -> dict:
    return entity_service.get_record(Event, event_id).to_dict()


def create_event(data: dict, user_id: str | None = None) -> dict:
    entity_service.require_fields(
        data, _REQUIRED, "Missing required fields: title, start_datetime, end_datetime",
    )
    _validate(data)
    payload = dict(data)
    if user_id:
        payload.setdefault("created_by", user_id)
    return entity_service.create_record(Event, payload)


def update_event(event_id: str, data: dict) -> dict:
    _validate(data, entity_service.get_record(Event, event_id))
    return entity_service.update_record(Event, event_id, data)


def delete_event(event_id: str) -> None:
    entity_service.delete_record(Event, event_id)


def event_statistics() -> dict:
    return _reduce_events(list_events())
