"""
Typed ``metadata`` variants per contact type.

The ``contacts.metadata`` JSON column carries subtype-specific details. Each
contact type that uses it declares the shape of its known keys here;
``normalize_metadata`` checks those keys and fills list defaults. Keys not
declared for a type are kept unchanged, and types without a variant accept
any object.
"""

from portal.core.exceptions import ValidationError
from portal.utils.helpers import parse_date

# Field kinds
STRING = "string"
NUMBER = "number"
DATE = "date"
RATING = "rating"          # integer 1..5
OBJECT = "object"
STRING_LIST = "string[]"
OBJECT_LIST = "object[]"

METADATA_VARIANTS: dict[str, dict[str, str]] = {
    "freelance": {
        "skills": STRING_LIST,
        "hourly_rate": NUMBER,
        "daily_rate": NUMBER,
        "availability": STRING,
        "experience": OBJECT_LIST,      # [{company, role, duration, description}]
        "education": OBJECT_LIST,       # [{degree, institution, year}]
        "languages": OBJECT_LIST,       # [{language, level}]
    },
    "member": {
        "department": STRING,
        "join_date": DATE,
        "responsibilities": STRING_LIST,
        "job_description": OBJECT,      # {summary, roles, missions}
        "languages": OBJECT_LIST,
        "education": OBJECT_LIST,
    },
    "network": {
        "connection_strength": RATING,
    },
    "partner": {
        "partnership_type": STRING,
        "since": DATE,
    },
    "investor": {
        "investment_focus": STRING_LIST,
        "portfolio_companies": STRING_LIST,
        "preferred_industries": STRING_LIST,
    },
}

# List fields that are always present (empty) on a normalized variant
LIST_DEFAULTS: dict[str, tuple[str, ...]] = {
    "freelance": ("skills",),
    "investor": ("investment_focus", "portfolio_companies", "preferred_industries"),
}


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check(kind: str, value) -> bool:
    if value is None:
        return True
    if kind == STRING:
        return isinstance(value, str)
    if kind == NUMBER:
        return _is_number(value)
    if kind == DATE:
        return isinstance(value, str) and parse_date(value) is not None
    if kind == RATING:
        return _is_number(value) and int(value) == value and 1 <= value <= 5
    if kind == OBJECT:
        return isinstance(value, dict)
    if kind == STRING_LIST:
        return isinstance(value, list) and all(isinstance(v, str) for v in value)
    if kind == OBJECT_LIST:
        return isinstance(value, list) and all(isinstance(v, dict) for v in value)
    return True


def normalize_metadata(contact_type: str, metadata) -> dict:
    """Validate ``metadata`` for ``contact_type`` and return a normalized copy.

    Raises:
        ValidationError: If metadata is not an object or a declared key has
            the wrong shape. ``details`` names every offending key.
    """
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise ValidationError("metadata must be an object", details={"metadata": "expected object"})

    variant = METADATA_VARIANTS.get(contact_type, {})
    errors = {
        key: f"expected {kind}"
        for key, kind in variant.items()
        if key in metadata and not _check(kind, metadata[key])
    }
    if errors:
        raise ValidationError(f"Invalid metadata for {contact_type} contact", details=errors)

    normalized = dict(metadata)
    for key in LIST_DEFAULTS.get(contact_type, ()):
        if normalized.get(key) is None:
            normalized[key] = []
    return normalized
