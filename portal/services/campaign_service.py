"""
Campaign service.

Listing returns the requested page together with ``total``, the number of
rows matching the filters before pagination, so callers can page through
large result sets.
"""

import logging

from portal.core.exceptions import ValidationError
from portal.models.campaign import CAMPAIGN_OBJECTIVES, CAMPAIGN_STATUSES, CAMPAIGN_TYPES, Campaign
from portal.services import entity_service
from portal.services.filters import FilterSpec
from portal.services.statistics import campaign_statistics as _reduce_campaigns

logger = logging.getLogger(__name__)

CAMPAIGN_FILTERS = FilterSpec(
    Campaign,
    match={"status": "status", "type": "campaign_type", "objective": "objective"},
    ranges={
        "start_date": ("start_date", ">="),
        "end_date": ("end_date", "<="),
    },
    search_columns=("name", "description"),
    default_order=("created_at", "desc"),
)

_CHOICES = {
    "status": CAMPAIGN_STATUSES,
    "campaign_type": CAMPAIGN_TYPES,
    "objective": CAMPAIGN_OBJECTIVES,
}


def _validate(data: dict) -> None:
    errors = {
        field: f"must be one of: {', '.join(allowed)}"
        for field, allowed in _CHOICES.items()
        if data.get(field) not in (None, "") and data.get(field) not in allowed
    }
    if errors:
        raise ValidationError("Invalid campaign data", details=errors)


def list_campaigns(filters: dict | None = None) -> dict:
    """Return ``{"items": [...], "total": n}``."""
    return {
        "items": entity_service.list_records(CAMPAIGN_FILTERS, filters),
        "total": entity_service.count_records(CAMPAIGN_FILTERS, filters),
    }


def get_campaign(campaign_id: str) -> dict:
    return entity_service.get_record(Campaign, campaign_id).to_dict()


def create_campaign(data: dict, user_id: str | None = None) -> dict:
    entity_service.require_fields(data, ("name",))
    _validate(data)
    payload = dict(data)
    if user_id:
        payload.update(created_by=user_id, updated_by=user_id)
    return entity_service.create_record(Campaign, payload)


def update_campaign(campaign_id: str, data: dict, user_id: str | None = None) -> dict:
    _validate(data)
    payload = dict(data)
    if user_id:
        payload["updated_by"] = user_id
    return entity_service.update_record(Campaign, campaign_id, payload)


def delete_campaign(campaign_id: str) -> None:
    entity_service.delete_record(Campaign, campaign_id)


def campaign_statistics() -> dict:
    return _reduce_campaigns(entity_service.list_records(CAMPAIGN_FILTERS))
