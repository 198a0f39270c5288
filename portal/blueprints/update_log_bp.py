"""
Update log (mise à jour) blueprint.

Endpoints:
    GET    /api/mise-a-jour              ?type=&status=&priority=&search=
    POST   /api/mise-a-jour              title required
    GET    /api/mise-a-jour/statistics
    PATCH  /api/mise-a-jour/<id>
    DELETE /api/mise-a-jour/<id>         204
"""

import logging

from flask import Blueprint, jsonify, request

from portal.blueprints import register_service_errors
from portal.services import update_log_service

logger = logging.getLogger(__name__)

update_log_bp = Blueprint("update_log", __name__, url_prefix="/api/mise-a-jour")
register_service_errors(update_log_bp)


@update_log_bp.route("", methods=["GET"])
def list_updates():
    filters = {key: request.args.get(key) for key in ("type", "status", "priority", "search")}
    return jsonify(update_log_service.list_updates(filters)), 200


@update_log_bp.route("", methods=["POST"])
def create_update():
    entry = update_log_service.create_update(request.get_json(silent=True))
    return jsonify(entry), 201


@update_log_bp.route("/statistics", methods=["GET"])
def update_statistics():
    return jsonify(update_log_service.get_statistics()), 200


@update_log_bp.route("/<update_id>", methods=["PATCH"])
def update_update(update_id):
    entry = update_log_service.update_update(update_id, request.get_json(silent=True))
    return jsonify(entry), 200


@update_log_bp.route("/<update_id>", methods=["DELETE"])
def delete_update(update_id):
    update_log_service.delete_update(update_id)
    return "", 204
