"""
Contact service: contacts, leads and clients.

Every contact lives in the ``contacts`` table; leads and clients are the
rows whose ``type`` is "lead" / "client". The lead and client functions pin
that type on every query and mutation, so a lead id can never be read or
changed through the client functions and vice versa.

Functions:
    - list_contacts / get_contact / create_contact / update_contact / delete_contact
    - contact_counts_by_type:     {type: n} over all contacts
    - contact_counts_by_status:   {status: n}, optionally within one type
    - list_leads / get_lead / create_lead / update_lead / delete_lead
    - list_clients / get_client / create_client / update_client / delete_client
"""

import logging
from collections import Counter

from sqlalchemy import func, select

from portal.core.exceptions import ValidationError
from portal.models import db
from portal.models.contact import CONTACT_TYPES, Contact
from portal.services import entity_service
from portal.services.contact_metadata import normalize_metadata
from portal.services.filters import FilterSpec

logger = logging.getLogger(__name__)

CONTACT_FILTERS = FilterSpec(
    Contact,
    match=("type", "status", "company"),
    search_columns=("first_name", "last_name", "email", "company", "position"),
    default_order=("updated_at", "desc"),
)

LEAD_FILTERS = FilterSpec(
    Contact,
    pinned={"type": "lead"},
    match=("status", "lead_source"),
    ranges={
        "probability_min": ("probability", ">="),
        "probability_max": ("probability", "<="),
    },
    search_columns=("first_name", "last_name", "email", "company"),
    default_order=("updated_at", "desc"),
)

CLIENT_FILTERS = FilterSpec(
    Contact,
    pinned={"type": "client"},
    match=("status", "industry"),
    ranges={
        "client_since_from": ("client_since", ">="),
        "client_since_to": ("client_since", "<="),
        "total_spent_min": ("total_spent", ">="),
        "total_spent_max": ("total_spent", "<="),
    },
    search_columns=("first_name", "last_name", "email", "company"),
    default_order=("updated_at", "desc"),
)

_REQUIRED = ("first_name", "last_name", "type", "status")


def _prepare(contact_type: str, data: dict, existing: Contact | None = None) -> dict:
    """Validate type + metadata and keep member join dates in sync."""
    if contact_type not in CONTACT_TYPES:
        raise ValidationError(
            f"type must be one of: {', '.join(CONTACT_TYPES)}",
            details={"type": contact_type},
        )
    prepared = dict(data)
    prepared["type"] = contact_type

    if "metadata" in data or existing is None:
        base = data.get("metadata") if "metadata" in data else None
        prepared["metadata"] = normalize_metadata(contact_type, base)

    if contact_type == "member":
        meta = prepared.get("metadata")
        if prepared.get("joined_at"):
            meta = dict(meta if meta is not None else (existing.meta or {}))
            meta["join_date"] = str(prepared["joined_at"])
            prepared["metadata"] = meta
        elif meta and meta.get("join_date"):
            prepared["joined_at"] = meta["join_date"]
    return prepared


# ── Contacts ─────────────────────────────────────────────────────────────────


def list_contacts(filters: dict | None = None) -> list[dict]:
    """List contacts. Filters: type, status, company, search, limit, offset, order_by."""
    return entity_service.list_records(CONTACT_FILTERS, filters)


def count_contacts(filters: dict | None = None) -> int:
    return entity_service.count_records(CONTACT_FILTERS, filters)


def get_contact(contact_id: str) -> dict:
    return entity_service.get_record(Contact, contact_id).to_dict()


def create_contact(data: dict) -> dict:
    """Create a contact of any type.

    Raises:
        ValidationError: Missing first_name/last_name/type/status, unknown
            type, or metadata that does not fit the type's variant.
    """
    entity_service.require_fields(data, _REQUIRED)
    prepared = _prepare(data["type"], data)
    return entity_service.create_record(Contact, prepared)


def update_contact(contact_id: str, data: dict) -> dict:
    """Partial update. The stored type is kept when ``type`` is not sent."""
    existing = entity_service.get_record(Contact, contact_id)
    prepared = _prepare(data.get("type") or existing.type, data, existing)
    return entity_service.update_record(Contact, contact_id, prepared)


def delete_contact(contact_id: str) -> None:
    entity_service.delete_record(Contact, contact_id)


def contact_counts_by_type() -> dict:
    rows = db.session.execute(
        select(Contact.type, func.count()).group_by(Contact.type)
    ).all()
    return {contact_type: count for contact_type, count in rows}


def contact_counts_by_status(contact_type: str | None = None) -> dict:
    stmt = select(Contact.status)
    if contact_type:
        stmt = stmt.where(Contact.type == contact_type)
    return dict(Counter(db.session.execute(stmt).scalars().all()))


# ── Typed views ──────────────────────────────────────────────────────────────


def _typed_create(contact_type: str, data: dict) -> dict:
    prepared = {**data, "type": contact_type}
    prepared.setdefault("status", "new" if contact_type == "lead" else "active")
    entity_service.require_fields(prepared, ("first_name", "last_name"))
    return entity_service.create_record(
        Contact, _prepare(contact_type, prepared), label=contact_type.capitalize(),
    )


def _typed_update(contact_type: str, contact_id: str, data: dict) -> dict:
    label = contact_type.capitalize()
    pinned = {"type": contact_type}
    existing = entity_service.get_record(Contact, contact_id, label, pinned=pinned)
    prepared = _prepare(contact_type, {**data, "type": contact_type}, existing)
    return entity_service.update_record(Contact, contact_id, prepared, label, pinned=pinned)


def list_leads(filters: dict | None = None) -> list[dict]:
    """Filters: status (scalar or list), lead_source, probability_min/max, search."""
    return entity_service.list_records(LEAD_FILTERS, filters)


def get_lead(lead_id: str) -> dict:
    return entity_service.get_record(Contact, lead_id, "Lead", pinned={"type": "lead"}).to_dict()


def create_lead(data: dict) -> dict:
    return _typed_create("lead", data)


def update_lead(lead_id: str, data: dict) -> dict:
    return _typed_update("lead", lead_id, data)


def delete_lead(lead_id: str) -> None:
    entity_service.delete_record(Contact, lead_id, "Lead", pinned={"type": "lead"})


def list_clients(filters: dict | None = None) -> list[dict]:
    """Filters: status, industry, client_since_from/to, total_spent_min/max, search."""
    return entity_service.list_records(CLIENT_FILTERS, filters)


def get_client(client_id: str) -> dict:
    return entity_service.get_record(Contact, client_id, "Client", pinned={"type": "client"}).to_dict()


def create_client(data: dict) -> dict:
    return _typed_create("client", data)


def update_client(client_id: str, data: dict) -> dict:
    return _typed_update("client", client_id, data)


def delete_client(client_id: str) -> None:
    entity_service.delete_record(Contact, client_id, "Client", pinned={"type": "client"})
