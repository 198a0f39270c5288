"""Product catalogue service."""

import logging

from portal.core.exceptions import ValidationError
from portal.models.product import PRODUCT_STATUSES, PRODUCT_TYPES, Product
from portal.services import entity_service
from portal.services.filters import FilterSpec
from portal.services.statistics import product_statistics as _reduce_products

logger = logging.getLogger(__name__)

PRODUCT_FILTERS = FilterSpec(
    Product,
    match=("type", "status", "currency"),
    ranges={
        "price_min": ("price", ">="),
        "price_max": ("price", "<="),
    },
    search_columns=("name", "description", "supplier_name"),
    default_order=("created_at", "desc"),
)


def _validate(data: dict) -> None:
    errors = {}
    if data.get("type") not in (None, "") and data["type"] not in PRODUCT_TYPES:
        errors["type"] = f"must be one of: {', '.join(PRODUCT_TYPES)}"
    if data.get("status") not in (None, "") and data["status"] not in PRODUCT_STATUSES:
        errors["status"] = f"must be one of: {', '.join(PRODUCT_STATUSES)}"
    if errors:
        raise ValidationError("Invalid product data", details=errors)


def list_products(filters: dict | None = None) -> list[dict]:
    return entity_service.list_records(PRODUCT_FILTERS, filters)


def search_products(query: str) -> list[dict]:
    """Case-insensitive match on name, description or supplier name."""
    return list_products({"search": query})


def get_product(product_id: str) -> dict:
    return entity_service.get_record(Product, product_id).to_dict()


def create_product(data: dict) -> dict:
    entity_service.require_fields(data, ("name",))
    _validate(data)
    return entity_service.create_record(Product, data)


def update_product(product_id: str, data: dict) -> dict:
    _validate(data)
    return entity_service.update_record(Product, product_id, data)


def delete_product(product_id: str) -> None:
    entity_service.delete_record(Product, product_id)


def product_statistics() -> dict:
    return _reduce_products(list_products())
