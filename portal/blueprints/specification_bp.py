"""
Specification (cahier des charges) blueprint.

Endpoints:
    GET    /api/cahier-des-charges              list every specification
    POST   /api/cahier-des-charges              create {title, content} as draft
    GET    /api/cahier-des-charges/statistics   counts per status
    PATCH  /api/cahier-des-charges/<id>         update title / content / status
    DELETE /api/cahier-des-charges/<id>         204
"""

import logging

from flask import Blueprint, jsonify

from portal.blueprints import json_body, register_service_errors
from portal.services import specification_service

logger = logging.getLogger(__name__)

specification_bp = Blueprint("specification", __name__, url_prefix="/api/cahier-des-charges")
register_service_errors(specification_bp)


@specification_bp.route("", methods=["GET"])
def list_specifications():
    return jsonify(specification_service.list_specifications()), 200


@specification_bp.route("", methods=["POST"])
def create_specification():
    spec = specification_service.create_specification(json_body())
    return jsonify(spec), 201


@specification_bp.route("/statistics", methods=["GET"])
def specification_statistics():
    return jsonify(specification_service.get_statistics()), 200


@specification_bp.route("/<spec_id>", methods=["PATCH"])
def update_specification(spec_id):
    spec = specification_service.update_specification(spec_id, json_body())
    return jsonify(spec), 200


@specification_bp.route("/<spec_id>", methods=["DELETE"])
def delete_specification(spec_id):
    specification_service.delete_specification(spec_id)
    return "", 204
