"""
RecordModel: abstract base for every table mirrored from the hosted database.

Rows are keyed by a UUID string and carry created_at / updated_at. This adds:
  - to_dict(): column-name keyed dict (JSON column ``metadata`` included as-is)
  - apply(data): partial update from a request payload, coercing
    ISO strings / numbers into the column's Python type
  - column_names(): the set of filterable / sortable column names
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import inspect as sa_inspect

from portal.core.exceptions import ValidationError
from portal.models import db
from portal.utils.helpers import parse_date, parse_datetime

_PROTECTED = frozenset({"id", "created_at", "updated_at"})


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_value(column, value):
    """Convert a JSON / query-string value into what ``column`` stores.

    Raises ValidationError when the value cannot be interpreted.
    """
    col_type = column.type
    if value is None:
        return None
    if isinstance(col_type, (db.String, db.Text)):
        return str(value)
    if value == "":
        return None
    try:
        if isinstance(col_type, db.DateTime):
            parsed = parse_datetime(value)
            if parsed is None:
                raise ValueError(value)
            return parsed
        if isinstance(col_type, db.Date):
            parsed = parse_date(value)
            if parsed is None:
                raise ValueError(value)
            return parsed
        if isinstance(col_type, db.Boolean):
            if isinstance(value, str):
                return value.lower() in ("true", "1", "yes")
            return bool(value)
        if isinstance(col_type, db.Integer):
            return int(value)
        if isinstance(col_type, db.Float):
            return float(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Invalid value for {column.name}",
            details={column.name: f"could not interpret {value!r}"},
        )
    return value


class RecordModel(db.Model):
    """Abstract base for UUID-keyed, timestamped tables."""

    __abstract__ = True

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    @classmethod
    def column_attrs(cls) -> dict:
        """Map database column name -> mapped attribute (``metadata`` -> ``meta``)."""
        return {attr.columns[0].name: attr for attr in sa_inspect(cls).column_attrs}

    @classmethod
    def column_names(cls) -> set[str]:
        return set(cls.column_attrs())

    @classmethod
    def column(cls, name: str):
        """Return the mapped column for a database column name, or None."""
        attr = cls.column_attrs().get(name)
        return getattr(cls, attr.key) if attr is not None else None

    def apply(self, data: dict) -> None:
        """Copy known, non-protected columns from ``data`` onto the row."""
        attrs = self.column_attrs()
        for name, value in data.items():
            if name in _PROTECTED or name not in attrs:
                continue
            attr = attrs[name]
            setattr(self, attr.key, coerce_value(attr.columns[0], value))

    def to_dict(self) -> dict:
        out = {}
        for name, attr in self.column_attrs().items():
            value = getattr(self, attr.key)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            out[name] = value
        return out
