"""
Entity filter builder.

Translates a plain filter dict (query-string args or a service caller's
dict) into predicates on a SQLAlchemy ``Select``:

    scalar value            → column = value
    list / tuple value      → column IN (...)
    range key               → column >= value / column <= value
    "search"                → OR of ILIKE %term% across the FilterSpec's search_columns
    "order_by"/"order_direction"
                            → ORDER BY (ascending unless "desc")
    "limit" / "offset"      → window; with offset and no limit the window is 10

Unknown keys are ignored and empty values (None, "", []) attach nothing.
Values are only coerced to the column type, never range-checked, so a
min above its max simply matches no rows.

Usage:
    LEAD_FILTERS = FilterSpec(
        Contact,
        pinned={"type": "lead"},
        match=("status", "lead_source"),
        ranges={"probability_min": ("probability", ">="),
                "probability_max": ("probability", "<=")},
        default_order=("updated_at", "desc"),
    )
    stmt = LEAD_FILTERS.build({"status": ["new", "qualified"], "probability_min": 50})
    rows = db.session.execute(stmt).scalars().all()
"""

from __future__ import annotations

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.sql import Select

from portal.core.exceptions import ValidationError
from portal.models.base import coerce_value

logger = logging.getLogger(__name__)

RESERVED_KEYS = frozenset({"search", "limit", "offset", "order_by", "order_direction"})
DEFAULT_PAGE_SIZE = 10

_RANGE_OPS = (">=", "<=")


def _is_empty(value) -> bool:
    return value is None or value == "" or (isinstance(value, (list, tuple, set)) and not value)


def _as_int(key: str, value) -> int | None:
    if _is_empty(value):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer", details={key: str(value)})
    return max(number, 0)


class FilterSpec:
    """Declares which filter keys an entity understands and how they map to columns.

    Args:
        model: RecordModel subclass being queried.
        match: equality/IN keys. Either column names, or a dict of
               filter key → column name (e.g. {"type": "campaign_type"}).
        ranges: filter key → (column name, ">=" | "<=").
        search_columns: columns OR-chained for the ``search`` key.
        default_order: (column name, "asc" | "desc") used when ``order_by``
               is absent or names no column of the model.
        pinned: column → value applied to every query (e.g. type="lead").
    """

    def __init__(
        self,
        model,
        *,
        match=(),
        ranges: dict | None = None,
        search_columns=(),
        default_order: tuple[str, str] = ("created_at", "desc"),
        pinned: dict | None = None,
    ) -> None:
        self.model = model
        self.match = dict(match) if isinstance(match, dict) else {name: name for name in match}
        self.ranges = dict(ranges or {})
        self.search_columns = tuple(search_columns)
        self.default_order = default_order
        self.pinned = dict(pinned or {})

        known = model.column_names()
        referenced = (
            set(self.match.values())
            | {col for col, _ in self.ranges.values()}
            | set(self.search_columns)
            | set(self.pinned)
            | {default_order[0]}
        )
        missing = referenced - known
        if missing:
            raise ValueError(f"{model.__name__} has no column(s): {', '.join(sorted(missing))}")
        for key, (_, op) in self.ranges.items():
            if op not in _RANGE_OPS:
                raise ValueError(f"Range {key!r} uses unsupported operator {op!r}")

    @property
    def keys(self) -> frozenset:
        """Every filter key this spec reacts to."""
        keys = set(self.match) | set(self.ranges) | {"limit", "offset", "order_by", "order_direction"}
        if self.search_columns:
            keys.add("search")
        return frozenset(keys)

    # ── Building blocks ──────────────────────────────────────────────────────

    def _coerce(self, column_name: str, value):
        column = self.model.column_attrs()[column_name].columns[0]
        return coerce_value(column, value)

    def where(self, stmt: Select, filters: dict) -> Select:
        """Attach pinned, equality/IN, range and search predicates."""
        for column_name, value in self.pinned.items():
            stmt = stmt.where(self.model.column(column_name) == value)

        for key, column_name in self.match.items():
            value = filters.get(key)
            if _is_empty(value):
                continue
            column = self.model.column(column_name)
            if isinstance(value, (list, tuple, set)):
                stmt = stmt.where(column.in_([self._coerce(column_name, v) for v in value]))
            else:
                stmt = stmt.where(column == self._coerce(column_name, value))

        for key, (column_name, op) in self.ranges.items():
            value = filters.get(key)
            if _is_empty(value):
                continue
            column = self.model.column(column_name)
            bound = self._coerce(column_name, value)
            stmt = stmt.where(column >= bound if op == ">=" else column <= bound)

        term = filters.get("search")
        if self.search_columns and not _is_empty(term):
            pattern = f"%{str(term).strip()}%"
            stmt = stmt.where(or_(*[
                self.model.column(name).ilike(pattern) for name in self.search_columns
            ]))
        return stmt

    def order(self, stmt: Select, filters: dict) -> Select:
        """ORDER BY the requested column, falling back to ``default_order``."""
        order_by = filters.get("order_by")
        column = self.model.column(order_by) if isinstance(order_by, str) and order_by else None
        if column is None:
            if order_by:
                logger.debug("Ignoring unknown order_by=%s for %s", order_by, self.model.__name__)
            name, direction = self.default_order
            column = self.model.column(name)
        else:
            direction = "desc" if filters.get("order_direction") == "desc" else "asc"
        return stmt.order_by(column.desc() if direction == "desc" else column.asc())

    def paginate(self, stmt: Select, filters: dict) -> Select:
        """Apply ``limit`` / ``offset``. Offset without limit takes a page of 10."""
        limit = _as_int("limit", filters.get("limit"))
        offset = _as_int("offset", filters.get("offset"))
        if offset is not None:
            return stmt.offset(offset).limit(limit or DEFAULT_PAGE_SIZE)
        if limit:
            return stmt.limit(limit)
        return stmt

    # ── Entry points ─────────────────────────────────────────────────────────

    def build(self, filters: dict | None = None, stmt: Select | None = None) -> Select:
        """Full statement: predicates, ordering, pagination."""
        filters = filters or {}
        if stmt is None:
            stmt = select(self.model)
        stmt = self.where(stmt, filters)
        stmt = self.order(stmt, filters)
        return self.paginate(stmt, filters)

    def count_statement(self, filters: dict | None = None) -> Select:
        """COUNT(*) of the filtered rows, ignoring ordering and pagination."""
        filtered = self.where(select(self.model), filters or {})
        return select(func.count()).select_from(filtered.subquery())
