"""
Technical sheet (fiche technique) blueprint.

Endpoints:
    GET    /api/fiche-technique
    POST   /api/fiche-technique          201
    PATCH  /api/fiche-technique/<id>
    DELETE /api/fiche-technique/<id>     204
"""

from flask import Blueprint, jsonify, request

from portal.blueprints import register_service_errors
from portal.services import technical_sheet_service

technical_sheet_bp = Blueprint("technical_sheet", __name__, url_prefix="/api/fiche-technique")
register_service_errors(technical_sheet_bp)


@technical_sheet_bp.route("", methods=["GET"])
def list_technologies():
    return jsonify(technical_sheet_service.list_technologies()), 200


@technical_sheet_bp.route("", methods=["POST"])
def create_technology():
    technology = technical_sheet_service.create_technology(request.get_json(silent=True))
    return jsonify(technology), 201


@technical_sheet_bp.route("/<technology_id>", methods=["PATCH"])
def update_technology(technology_id):
    technology = technical_sheet_service.update_technology(technology_id, request.get_json(silent=True))
    return jsonify(technology), 200


@technical_sheet_bp.route("/<technology_id>", methods=["DELETE"])
def delete_technology(technology_id):
    technical_sheet_service.delete_technology(technology_id)
    return "", 204
