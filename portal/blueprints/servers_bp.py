"""
Server inventory (serveurs) blueprint.

Endpoints (the record id travels in the query string):
    GET    /api/serveurs
    POST   /api/serveurs                 name, ip_address, type, os, location
    PATCH  /api/serveurs?id=
    DELETE /api/serveurs?id=             {"success": true}
"""

from flask import Blueprint, jsonify, request

from portal.blueprints import register_service_errors
from portal.services import server_service
from portal.utils.errors import E, api_error

servers_bp = Blueprint("servers", __name__, url_prefix="/api/serveurs")
register_service_errors(servers_bp)


@servers_bp.route("", methods=["GET"])
def list_servers():
    return jsonify(server_service.list_servers()), 200


@servers_bp.route("", methods=["POST"])
def create_server():
    return jsonify(server_service.create_server(request.get_json(silent=True))), 201


@servers_bp.route("", methods=["PATCH"])
def update_server():
    server_id = request.args.get("id")
    if not server_id:
        return api_error(E.VALIDATION_REQUIRED, "Server ID is required")
    return jsonify(server_service.update_server(server_id, request.get_json(silent=True))), 200


@servers_bp.route("", methods=["DELETE"])
def delete_server():
    server_id = request.args.get("id")
    if not server_id:
        return api_error(E.VALIDATION_REQUIRED, "Server ID is required")
    server_service.delete_server(server_id)
    return jsonify({"success": True}), 200
