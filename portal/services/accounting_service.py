"""
Accounting (comptabilité) service: expenses, invoices and quotes.

All three are rows of the ``documents`` table told apart by ``custom_type``
(``depense``, ``facture``, ``devis``). Their business fields live in the
row's ``metadata``; this module flattens them into the payloads the
accounting pages read. Deletes are soft (status ``Deleted``) and deleted
rows never appear in lists.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select

from portal.core.exceptions import NotFoundError, ValidationError
from portal.models import db
from portal.models.contact import Contact
from portal.models.document import Document
from portal.models.project import Project
from portal.services import entity_service
from portal.services.statistics import expense_statistics
from portal.utils.helpers import parse_date

logger = logging.getLogger(__name__)

EXPENSE = "depense"
INVOICE = "facture"
QUOTE = "devis"

EXPENSE_STATUSES = ("draft", "submitted", "approved", "rejected", "reimbursed")
EXPENSE_FILTER_KEYS = (
    "id", "project_id", "status", "category",
    "from_date", "to_date", "amount_min", "amount_max", "sort", "order",
)
_EXPENSE_REQUIRED = ("date", "description", "amount", "category", "beneficiary")
_EXPENSE_SORTS = {"date": "date", "amount": "total", "total": "total"}

_EMPTY_COMPANY = {"name": "", "address": "", "postal_code": "", "city": "", "country": ""}


# ── Shared helpers ───────────────────────────────────────────────────────


def _number(value, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {name}", details={name: f"not a number: {value!r}"})


def _reference(prefix: str) -> str:
    return f"{prefix}-{date.today().year}-{random.randint(0, 9999):04d}"


def _active(kind: str):
    return select(Document).where(Document.custom_type == kind, Document.status != "Deleted")


def _get(kind: str, doc_id: str, label: str) -> Document:
    doc = db.session.get(Document, doc_id)
    if doc is None or doc.custom_type != kind or doc.status == "Deleted":
        raise NotFoundError(label, doc_id)
    return doc


def _project_name(project_id) -> str:
    if not project_id:
        return ""
    project = db.session.get(Project, project_id)
    return project.name if project else ""


def _client(contact_id) -> dict:
    contact = db.session.get(Contact, contact_id) if contact_id else None
    if contact is None:
        return {"id": "", "name": "", "email": "", "address": "", "postal_code": "",
                "city": "", "country": "", "vat_number": ""}
    meta = contact.meta or {}
    return {
        "id": contact.id,
        "name": f"{contact.first_name} {contact.last_name}".strip(),
        "email": contact.email or "",
        "address": meta.get("address") or "",
        "postal_code": meta.get("postal_code") or "",
        "city": meta.get("city") or "",
        "country": meta.get("country") or "",
        "vat_number": meta.get("vat_number") or "",
    }


def _timestamps(doc: Document) -> dict:
    row = doc.to_dict()
    return {"created_at": row["created_at"], "updated_at": row["updated_at"]}


def _soft_delete(kind: str, doc_id: str, label: str, user_id: str | None) -> None:
    doc = _get(kind, doc_id, label)
    doc.status = "Deleted"
    doc.last_modified_by = user_id
    db.session.commit()
    logger.info("%s deleted", label, extra={"resource": label, "record_id": doc_id})


# ── Expenses ─────────────────────────────────────────────────────────────


def _expense_dict(doc: Document) -> dict:
    meta = doc.meta or {}
    items = meta.get("items") or []
    first = items[0] if items and isinstance(items[0], dict) else {}
    return {
        "id": doc.id,
        "title": doc.title,
        "description": doc.description or "",
        "expense_number": meta.get("expense_number") or "",
        "date": meta.get("date") or "",
        "due_date": meta.get("due_date") or "",
        "status": meta.get("expense_status") or "draft",
        "beneficiary": meta.get("beneficiary") or "",
        "amount": meta.get("total") or 0,
        "tax_rate": meta.get("tax_rate") or 0,
        "tax_amount": meta.get("tax_amount") or 0,
        "total": meta.get("total") or 0,
        "notes": meta.get("notes") or "",
        "payment_method": meta.get("payment_method") or "",
        "payment_date": meta.get("payment_date") or "",
        "category": meta.get("category") or "",
        "receipt_url": first.get("receipt_url") or "",
        "project_id": doc.project_id or "",
        "project_name": _project_name(doc.project_id),
        "currency": meta.get("currency") or "EUR",
        "file_name": doc.file_name,
        "file_path": doc.file_path,
        **_timestamps(doc),
    }


def _check_expense_status(status) -> None:
    if status not in EXPENSE_STATUSES:
        raise ValidationError(
            "Invalid expense status",
            details={"status": f"must be one of: {', '.join(EXPENSE_STATUSES)}"},
        )


def _date_bound(value, name: str) -> date:
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationError(f"Invalid {name}", details={name: f"not a date: {value!r}"})
    return parsed


def _stored_amount(expense: dict) -> float:
    """The expense total as a number; unreadable stored totals count as 0."""
    try:
        return float(expense["total"])
    except (TypeError, ValueError):
        return 0.0


def list_expenses(filters: dict | None = None) -> list[dict]:
    """Filters: id, project_id, status, category, from_date, to_date,
    amount_min, amount_max; sort=date|amount|created_at, order=asc|desc.
    """
    filters = filters or {}
    stmt = _active(EXPENSE)
    if filters.get("id"):
        stmt = stmt.where(Document.id == filters["id"])
    if filters.get("project_id"):
        stmt = stmt.where(Document.project_id == filters["project_id"])
    expenses = [_expense_dict(d) for d in db.session.execute(stmt).scalars().all()]

    for key in ("status", "category"):
        if filters.get(key):
            expenses = [e for e in expenses if e[key] == filters[key]]
    if filters.get("from_date"):
        low = _date_bound(filters["from_date"], "from_date")
        expenses = [e for e in expenses if parse_date(e["date"]) and parse_date(e["date"]) >= low]
    if filters.get("to_date"):
        high = _date_bound(filters["to_date"], "to_date")
        expenses = [e for e in expenses if parse_date(e["date"]) and parse_date(e["date"]) <= high]
    if filters.get("amount_min") not in (None, ""):
        low = _number(filters["amount_min"], "amount_min")
        expenses = [e for e in expenses if _stored_amount(e) >= low]
    if filters.get("amount_max") not in (None, ""):
        high = _number(filters["amount_max"], "amount_max")
        expenses = [e for e in expenses if _stored_amount(e) <= high]

    sort_key = _EXPENSE_SORTS.get(filters.get("sort") or "date", "created_at")
    descending = (filters.get("order") or "desc").lower() != "asc"
    if sort_key == "total":
        expenses.sort(key=_stored_amount, reverse=descending)
    else:
        expenses.sort(key=lambda e: e[sort_key] or "", reverse=descending)
    return expenses


def create_expense(data: dict, user_id: str | None = None) -> dict:
    entity_service.require_fields(
        data, _EXPENSE_REQUIRED,
        "Missing required fields: date, description, amount, category, and beneficiary are required",
    )
    amount = _number(data["amount"], "amount")
    status = data.get("status") or "draft"
    _check_expense_status(status)
    number = data.get("expense_number") or _reference("EXP")

    doc = Document(
        title=data.get("title") or f"Expense {number}",
        description=data["description"],
        custom_type=EXPENSE,
        status="Active",
        project_id=data.get("project_id") or None,
        created_by=user_id,
        last_modified_by=user_id,
        tags=["expense", "comptabilite"],
        meta={
            "expense_number": number,
            "date": data["date"],
            "due_date": data.get("due_date") or "",
            "expense_status": status,
            "beneficiary": data["beneficiary"],
            "category": data["category"],
            "items": [{
                "description": data["description"],
                "amount": amount,
                "category": data["category"],
                "date": data["date"],
                "receipt_url": data.get("receipt_url") or "",
            }],
            "tax_rate": data.get("tax_rate") or 0,
            "tax_amount": data.get("tax_amount") or 0,
            "total": _number(data["total"], "total") if data.get("total") else amount,
            "notes": data.get("notes") or "",
            "payment_method": data.get("payment_method") or "",
            "payment_date": data.get("payment_date") or "",
            "currency": data.get("currency") or "EUR",
        },
    )
    db.session.add(doc)
    db.session.commit()
    logger.info("Expense created", extra={"resource": "Expense", "record_id": doc.id})
    return _expense_dict(doc)


def update_expense(expense_id: str, data: dict, user_id: str | None = None) -> dict:
    """Merge ``data`` into the expense. Empty values keep the stored ones."""
    doc = _get(EXPENSE, expense_id, "Expense")
    meta = dict(doc.meta or {})
    if data.get("status"):
        _check_expense_status(data["status"])
        meta["expense_status"] = data["status"]
    for key in ("expense_number", "date", "due_date", "beneficiary", "category", "tax_rate",
                "tax_amount", "notes", "payment_method", "payment_date", "currency"):
        if data.get(key):
            meta[key] = data[key]
    if data.get("total") or data.get("amount"):
        meta["total"] = _number(data.get("total") or data.get("amount"), "total")
    if data.get("receipt_url"):
        items = [dict(i) for i in meta.get("items") or [] if isinstance(i, dict)] or [{}]
        items[0]["receipt_url"] = data["receipt_url"]
        meta["items"] = items

    doc.title = data.get("title") or doc.title
    doc.description = data.get("description") or doc.description
    doc.project_id = data.get("project_id") or doc.project_id
    doc.last_modified_by = user_id
    doc.meta = meta
    db.session.commit()
    logger.info("Expense updated", extra={"resource": "Expense", "record_id": expense_id})
    return _expense_dict(doc)


def delete_expense(expense_id: str, user_id: str | None = None) -> None:
    _soft_delete(EXPENSE, expense_id, "Expense", user_id)


def get_expense_statistics(from_date=None, to_date=None) -> dict:
    return expense_statistics(list_expenses({"from_date": from_date, "to_date": to_date}))


# ── Invoices and quotes ──────────────────────────────────────────────────


@dataclass(frozen=True)
class BillingKind:
    """How one billing document type maps onto a ``documents`` row."""

    custom_type: str
    label: str
    number_key: str
    status_key: str
    title_prefix: str
    tag: str
    number_prefix: str | None = None
    extra: dict = field(default_factory=dict)


INVOICE_KIND = BillingKind(
    INVOICE, "Invoice", "invoice_number", "invoice_status", "Facture", "invoice",
    extra={"payment_method": "", "paid_at": None},
)
QUOTE_KIND = BillingKind(
    QUOTE, "Quote", "quote_number", "quote_status", "Quote", "quote",
    number_prefix="QT", extra={"validity_period": 30},
)

_BILLING_DEFAULTS = {
    "due_date": "",
    "items": [],
    "subtotal": 0,
    "tax_rate": 0,
    "tax_amount": 0,
    "total": 0,
    "notes": "",
    "payment_terms": "",
    "currency": "EUR",
    "language": "fr",
    "company_details": _EMPTY_COMPANY,
}


def _billing_defaults(kind: BillingKind) -> dict:
    return {**_BILLING_DEFAULTS, **kind.extra}


def _check_billing(data: dict) -> None:
    if data.get("items") not in (None, "") and not isinstance(data["items"], list):
        raise ValidationError("Invalid items", details={"items": "must be a list"})
    for key in ("subtotal", "tax_rate", "tax_amount", "total"):
        if data.get(key) not in (None, ""):
            _number(data[key], key)


def _client_id(data: dict):
    client = data.get("client")
    if isinstance(client, dict):
        return client.get("id") or None
    return data.get("contact_id") or None


def _billing_dict(kind: BillingKind, doc: Document) -> dict:
    meta = doc.meta or {}
    out = {
        "id": doc.id,
        "title": doc.title,
        "description": doc.description or "",
        kind.number_key: meta.get(kind.number_key) or "",
        "date": meta.get("date") or "",
        "status": meta.get(kind.status_key) or "draft",
        "client": _client(doc.contact_id),
        "project_id": doc.project_id or "",
        "project_name": _project_name(doc.project_id),
        "file_name": doc.file_name,
        "file_path": doc.file_path,
        **_timestamps(doc),
    }
    for key, default in _billing_defaults(kind).items():
        out[key] = meta.get(key) or default
    return out


def list_billing(kind: BillingKind) -> list[dict]:
    stmt = _active(kind.custom_type).order_by(Document.created_at.desc())
    return [_billing_dict(kind, d) for d in db.session.execute(stmt).scalars().all()]


def create_billing(kind: BillingKind, data: dict, user_id: str | None = None) -> dict:
    _check_billing(data)
    number = data.get(kind.number_key) or (_reference(kind.number_prefix) if kind.number_prefix else "")
    meta = {
        kind.number_key: number,
        "date": data.get("date") or date.today().isoformat(),
        kind.status_key: data.get("status") or "draft",
    }
    for key, default in _billing_defaults(kind).items():
        meta[key] = data.get(key) or default

    doc = Document(
        title=data.get("title") or f"{kind.title_prefix} {number}".strip(),
        description=data.get("description") or "",
        custom_type=kind.custom_type,
        status="Active",
        project_id=data.get("project_id") or None,
        contact_id=_client_id(data),
        file_name=data.get("file_name") or None,
        file_path=data.get("file_path") or None,
        created_by=user_id,
        last_modified_by=user_id,
        tags=[kind.tag, "comptabilite"],
        meta=meta,
    )
    db.session.add(doc)
    db.session.commit()
    logger.info("%s created", kind.label, extra={"resource": kind.label, "record_id": doc.id})
    return _billing_dict(kind, doc)


def update_billing(kind: BillingKind, doc_id: str, data: dict, user_id: str | None = None) -> dict:
    """Merge ``data`` into the document. Empty values keep the stored ones."""
    doc = _get(kind.custom_type, doc_id, kind.label)
    _check_billing(data)
    meta = dict(doc.meta or {})
    if data.get("status"):
        meta[kind.status_key] = data["status"]
    for key in (kind.number_key, "date", *_billing_defaults(kind)):
        if data.get(key):
            meta[key] = data[key]

    doc.title = data.get("title") or doc.title
    doc.description = data.get("description") or doc.description
    doc.project_id = data.get("project_id") or doc.project_id
    doc.contact_id = _client_id(data) or doc.contact_id
    doc.file_name = data.get("file_name") or doc.file_name
    doc.file_path = data.get("file_path") or doc.file_path
    doc.last_modified_by = user_id
    doc.meta = meta
    db.session.commit()
    logger.info("%s updated", kind.label, extra={"resource": kind.label, "record_id": doc_id})
    return _billing_dict(kind, doc)


def delete_billing(kind: BillingKind, doc_id: str, user_id: str | None = None) -> None:
    _soft_delete(kind.custom_type, doc_id, kind.label, user_id)
