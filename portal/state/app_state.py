"""
PortalState: the application's named collections plus user preferences.

One explicit object instead of module-level singletons. Callers create it,
pass it where it is needed and persist it through ``to_json`` /
``from_json``. Only preferences and each collection's initial filters are
persisted; fetched rows never are, so a restored state starts empty and is
refilled from the database.

Usage:
    state = PortalState.with_default_resources(preferences={"language": "fr"})
    state["leads"].fetch({"status": "qualified"})
    saved = state.to_json()
    ...
    state = PortalState.from_json(saved)
"""

from __future__ import annotations

import json
import logging

from portal.services import (
    campaign_service,
    contact_service,
    document_service,
    event_service,
    product_service,
    project_service,
    specification_service,
    statistics,
    update_log_service,
)
from portal.state.resource_state import ResourceOps, ResourceState

logger = logging.getLogger(__name__)

STATE_VERSION = 1

DEFAULT_PREFERENCES = {
    "language": "fr",
    "theme": "light",
    "sidebar_collapsed": False,
}


def _campaign_items(filters: dict) -> list[dict]:
    return campaign_service.list_campaigns(filters)["items"]


# name -> (ops, reducer)
DEFAULT_RESOURCES: dict[str, tuple[ResourceOps, object]] = {
    "contacts": (
        ResourceOps(contact_service.list_contacts, contact_service.create_contact,
                    contact_service.update_contact, contact_service.delete_contact),
        None,
    ),
    "leads": (
        ResourceOps(contact_service.list_leads, contact_service.create_lead,
                    contact_service.update_lead, contact_service.delete_lead),
        statistics.lead_statistics,
    ),
    "clients": (
        ResourceOps(contact_service.list_clients, contact_service.create_client,
                    contact_service.update_client, contact_service.delete_client),
        statistics.client_statistics,
    ),
    "projects": (
        ResourceOps(project_service.list_projects, project_service.create_project,
                    project_service.update_project, project_service.delete_project),
        statistics.project_statistics,
    ),
    "campaigns": (
        ResourceOps(_campaign_items, campaign_service.create_campaign,
                    campaign_service.update_campaign, campaign_service.delete_campaign),
        statistics.campaign_statistics,
    ),
    "products": (
        ResourceOps(product_service.list_products, product_service.create_product,
                    product_service.update_product, product_service.delete_product),
        statistics.product_statistics,
    ),
    "documents": (
        ResourceOps(document_service.list_documents, document_service.create_document,
                    document_service.update_document, document_service.delete_document),
        statistics.document_statistics,
    ),
    "events": (
        ResourceOps(event_service.list_events, event_service.create_event,
                    event_service.update_event, event_service.delete_event),
        statistics.event_statistics,
    ),
    "specifications": (
        ResourceOps(lambda _filters: specification_service.list_specifications(),
                    specification_service.create_specification,
                    specification_service.update_specification,
                    specification_service.delete_specification),
        statistics.specification_statistics,
    ),
    "updates": (
        ResourceOps(update_log_service.list_updates, update_log_service.create_update,
                    update_log_service.update_update, update_log_service.delete_update),
        statistics.update_statistics,
    ),
}


class PortalState:
    """Named ResourceStates and a preferences dict."""

    def __init__(self, preferences: dict | None = None) -> None:
        self.preferences = {**DEFAULT_PREFERENCES, **(preferences or {})}
        self.resources: dict[str, ResourceState] = {}

    @classmethod
    def with_default_resources(
        cls,
        preferences: dict | None = None,
        filters: dict | None = None,
    ) -> "PortalState":
        """State holding every standard collection. ``filters`` maps name -> initial filters."""
        state = cls(preferences)
        filters = filters or {}
        for name, (ops, reducer) in DEFAULT_RESOURCES.items():
            state.register(ResourceState(name, ops, reducer=reducer, initial_filters=filters.get(name)))
        return state

    def register(self, resource: ResourceState) -> ResourceState:
        if resource.name in self.resources:
            raise ValueError(f"Resource {resource.name!r} is already registered")
        self.resources[resource.name] = resource
        return resource

    def __getitem__(self, name: str) -> ResourceState:
        return self.resources[name]

    def __contains__(self, name: str) -> bool:
        return name in self.resources

    def set_preference(self, key: str, value) -> None:
        self.preferences[key] = value

    def reset(self) -> None:
        """Drop fetched rows and errors, keep preferences and filters."""
        for resource in self.resources.values():
            resource.items = []
            resource.error = None

    # ── Persistence ──────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "version": STATE_VERSION,
            "preferences": dict(self.preferences),
            "filters": {
                name: dict(resource.initial_filters)
                for name, resource in self.resources.items()
                if resource.initial_filters
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, sort_keys=True)

    @classmethod
    def from_json(cls, payload: str) -> "PortalState":
        """Rebuild a state with the default collections from ``to_json`` output.

        Payloads from another version, or that are not valid JSON objects,
        yield a fresh default state.
        """
        try:
            data = json.loads(payload) if payload else {}
        except ValueError:
            logger.warning("Discarding unreadable persisted state")
            data = {}
        if not isinstance(data, dict) or data.get("version") != STATE_VERSION:
            if data:
                logger.info("Persisted state version mismatch, starting fresh")
            data = {}
        return cls.with_default_resources(
            preferences=data.get("preferences") or {},
            filters=data.get("filters") or {},
        )
