"""
Products blueprint.

Endpoints:
    /api/products               GET (filters), POST
    /api/products/search        GET   ?q=
    /api/products/statistics    GET
    /api/products/<id>          GET, PUT/PATCH, DELETE
"""

import logging

from flask import Blueprint, jsonify, request

from portal.blueprints import filters_from_args, json_body, register_service_errors
from portal.services import product_service

logger = logging.getLogger(__name__)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")
register_service_errors(products_bp)


@products_bp.route("", methods=["GET"])
def list_products():
    filters = filters_from_args(product_service.PRODUCT_FILTERS.keys)
    return jsonify({"items": product_service.list_products(filters)})


@products_bp.route("", methods=["POST"])
def create_product():
    return jsonify(product_service.create_product(json_body())), 201


@products_bp.route("/search", methods=["GET"])
def search_products():
    query = (request.args.get("q") or "").strip()
    if not query:
        return jsonify({"items": []})
    return jsonify({"items": product_service.search_products(query)})


@products_bp.route("/statistics", methods=["GET"])
def product_statistics():
    return jsonify(product_service.product_statistics())


@products_bp.route("/<product_id>", methods=["GET"])
def get_product(product_id):
    return jsonify(product_service.get_product(product_id))


@products_bp.route("/<product_id>", methods=["PUT", "PATCH"])
def update_product(product_id):
    return jsonify(product_service.update_product(product_id, json_body()))


@products_bp.route("/<product_id>", methods=["DELETE"])
def delete_product(product_id):
    product_service.delete_product(product_id)
    return "", 204
