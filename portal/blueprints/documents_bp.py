"""
Documents blueprint.

Endpoints:
    /api/documents               GET (filters), POST
    /api/documents/statistics    GET
    /api/documents/<id>          GET, PUT/PATCH
    /api/documents/<id>          DELETE   soft delete (status → Deleted)
                                          ?hard=true removes the row
"""

import logging

from flask import Blueprint, jsonify, request

from portal.blueprints import filters_from_args, json_body, register_service_errors
from portal.middleware.session_auth import current_user
from portal.services import document_service

logger = logging.getLogger(__name__)

documents_bp = Blueprint("documents", __name__, url_prefix="/api/documents")
register_service_errors(documents_bp)


def _user_id():
    user = current_user()
    return user["id"] if user else None


@documents_bp.route("", methods=["GET"])
def list_documents():
    filters = filters_from_args(document_service.DOCUMENT_FILTERS.keys)
    return jsonify({"items": document_service.list_documents(filters)})


@documents_bp.route("", methods=["POST"])
def create_document():
    return jsonify(document_service.create_document(json_body(), _user_id())), 201


@documents_bp.route("/statistics", methods=["GET"])
def document_statistics():
    return jsonify(document_service.document_statistics())


@documents_bp.route("/<document_id>", methods=["GET"])
def get_document(document_id):
    return jsonify(document_service.get_document(document_id))


@documents_bp.route("/<document_id>", methods=["PUT", "PATCH"])
def update_document(document_id):
    return jsonify(document_service.update_document(document_id, json_body(), _user_id()))


@documents_bp.route("/<document_id>", methods=["DELETE"])
def delete_document(document_id):
    if request.args.get("hard") == "true":
        document_service.delete_document(document_id)
        return "", 204
    return jsonify(document_service.soft_delete_document(document_id, _user_id()))
