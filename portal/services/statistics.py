"""
Dashboard statistics reducers.

Pure folds over an in-memory list of row dicts (as returned by the entity
services / flat-file stores). No database access: figures describe exactly
the rows passed in, so callers wanting totals must pass the full collection.

Functions:
    - lead_statistics
    - client_statistics
    - project_statistics
    - campaign_statistics
    - product_statistics
    - document_statistics
    - event_statistics
    - specification_statistics
    - update_statistics
    - validation_statistics
    - expense_statistics
"""

from collections import Counter
from datetime import date

from portal.utils.helpers import parse_date

UPDATE_TYPES = ("feature", "bugfix", "security", "performance", "documentation", "other")
UPDATE_STATUSES = ("planned", "in_progress", "completed", "cancelled")
UPDATE_PRIORITIES = ("low", "medium", "high", "critical")
SPECIFICATION_STATUSES = ("draft", "review", "approved", "archived")
PRODUCT_TYPES = ("service", "package", "membership", "software", "tool", "hardware")
PRODUCT_STATUSES = ("active", "discontinued", "draft", "archived")
TEST_TYPES = ("unit", "integration", "e2e", "performance", "security", "accessibility", "other")
TEST_STATUSES = ("draft", "in_progress", "passed", "failed", "blocked", "skipped")
TEST_ENVIRONMENTS = ("development", "staging", "production")

_TOP_N = 5


def _number(value) -> float:
    if value is None or value == "" or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _count_by(rows: list[dict], key: str) -> dict:
    """Occurrences of each non-empty string value of ``key``."""
    return dict(Counter(r.get(key) for r in rows if r.get(key) and isinstance(r.get(key), str)))


def _fixed_counts(rows: list[dict], key: str, values) -> dict:
    """Count rows per value, always listing every value in ``values``."""
    counts = Counter(r.get(key) for r in rows if isinstance(r.get(key), str))
    return {v: counts.get(v, 0) for v in values}


# ── CRM ──────────────────────────────────────────────────────────────────────


def lead_statistics(leads: list[dict]) -> dict:
    """Pipeline figures: counts, mean probability, pipeline value.

    ``average_probability`` only averages leads that have a probability;
    ``high_probability`` counts leads at 70 % or above.
    """
    with_probability = [lead for lead in leads if lead.get("probability") is not None]
    average = (
        sum(_number(lead["probability"]) for lead in with_probability) / len(with_probability)
        if with_probability else 0
    )
    return {
        "total": len(leads),
        "by_status": _count_by(leads, "status"),
        "by_source": _count_by(leads, "lead_source"),
        "average_probability": average,
        "total_estimated_value": sum(_number(lead.get("estimated_value")) for lead in leads),
        "high_probability": sum(1 for lead in leads if _number(lead.get("probability")) >= 70),
    }


def client_statistics(clients: list[dict]) -> dict:
    """Revenue figures plus the top spenders and the newest clients."""
    total_revenue = sum(_number(c.get("total_spent")) for c in clients)
    spenders = [c for c in clients if _number(c.get("total_spent")) > 0]

    top_clients = sorted(spenders, key=lambda c: _number(c.get("total_spent")), reverse=True)[:_TOP_N]
    dated = [(parse_date(c.get("client_since")), c) for c in clients if c.get("client_since")]
    recent_clients = [
        c for _, c in sorted(dated, key=lambda pair: pair[0] or date.min, reverse=True)
    ][:_TOP_N]

    return {
        "total": len(clients),
        "by_status": _count_by(clients, "status"),
        "total_revenue": total_revenue,
        "average_spent": total_revenue / len(spenders) if spenders else 0,
        "top_clients": top_clients,
        "recent_clients": recent_clients,
    }


# ── Projects / marketing / catalogue ─────────────────────────────────────────


def project_statistics(projects: list[dict]) -> dict:
    counts = Counter(p.get("status") for p in projects)
    return {
        "total": len(projects),
        "active": counts.get("Active", 0),
        "completed": counts.get("Completed", 0),
        "on_hold": counts.get("On Hold", 0),
        "cancelled": counts.get("Cancelled", 0),
    }


def campaign_statistics(campaigns: list[dict]) -> dict:
    return {
        "total": len(campaigns),
        "by_status": _count_by(campaigns, "status"),
        "by_type": _count_by(campaigns, "campaign_type"),
        "total_budget": sum(_number(c.get("budget")) for c in campaigns),
        "total_spent": sum(_number(c.get("spent")) for c in campaigns),
    }


def product_statistics(products: list[dict]) -> dict:
    """Catalogue counts, summed price/cost and the resulting margin in percent."""
    total_revenue = sum(_number(p.get("price")) for p in products)
    total_cost = sum(_number(p.get("cost")) for p in products)
    stats = {"total": len(products)}
    stats.update(_fixed_counts(products, "status", PRODUCT_STATUSES))
    stats.update({
        "total_revenue": total_revenue,
        "total_cost": total_cost,
        "profit_margin": ((total_revenue - total_cost) / total_revenue * 100) if total_revenue > 0 else 0,
        "by_type": _fixed_counts(products, "type", PRODUCT_TYPES),
    })
    return stats


def document_statistics(documents: list[dict]) -> dict:
    return {
        "total": len(documents),
        "by_status": _count_by(documents, "status"),
        "with_file": sum(1 for d in documents if d.get("file_path")),
        "templates": sum(1 for d in documents if d.get("is_template")),
    }


def event_statistics(events: list[dict]) -> dict:
    return {
        "total": len(events),
        "by_status": _count_by(events, "status"),
        "by_type": _count_by(events, "event_type"),
        "all_day": sum(1 for e in events if e.get("is_all_day")),
    }


# ── Flat-file stores ─────────────────────────────────────────────────────────


def specification_statistics(specifications: list[dict]) -> dict:
    stats = {"total": len(specifications)}
    stats.update(_fixed_counts(specifications, "status", SPECIFICATION_STATUSES))
    return stats


def update_statistics(updates: list[dict]) -> dict:
    return {
        "total": len(updates),
        "by_type": _fixed_counts(updates, "type", UPDATE_TYPES),
        "by_status": _fixed_counts(updates, "status", UPDATE_STATUSES),
        "by_priority": _fixed_counts(updates, "priority", UPDATE_PRIORITIES),
    }


def validation_statistics(tests: list[dict]) -> dict:
    """Test-case counts, pass rate over decided (passed/failed) tests and mean run time.

    ``success_rate`` and ``average_execution_time`` are rounded to integers.
    """
    by_status = _fixed_counts(tests, "status", TEST_STATUSES)
    decided = by_status["passed"] + by_status["failed"]
    timed = [_number(t.get("execution_time")) for t in tests if _number(t.get("execution_time"))]
    return {
        "total": len(tests),
        "by_type": _fixed_counts(tests, "type", TEST_TYPES),
        "by_status": by_status,
        "by_priority": _fixed_counts(tests, "priority", UPDATE_PRIORITIES),
        "by_environment": _fixed_counts(tests, "environment", TEST_ENVIRONMENTS),
        "success_rate": round(by_status["passed"] / decided * 100) if decided else 0,
        "average_execution_time": round(sum(timed) / len(timed)) if timed else 0,
    }


# ── Accounting ───────────────────────────────────────────────────────────────


def expense_statistics(expenses: list[dict]) -> dict:
    """Counts and summed totals per expense status (submitted counts as pending)."""

    def _of(status):
        return [e for e in expenses if e.get("status") == status]

    def _amount(rows):
        return sum(_number(e.get("total")) for e in rows)

    pending, approved = _of("submitted"), _of("approved")
    rejected, reimbursed = _of("rejected"), _of("reimbursed")
    return {
        "total_count": len(expenses),
        "draft_count": len(_of("draft")),
        "pending_count": len(pending),
        "approved_count": len(approved),
        "refused_count": len(rejected),
        "reimbursed_count": len(reimbursed),
        "total_amount": _amount(expenses),
        "pending_amount": _amount(pending),
        "approved_amount": _amount(approved),
        "reimbursed_amount": _amount(reimbursed),
    }
