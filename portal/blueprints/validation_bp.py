"""
Test & validation blueprint.

Endpoints (the record id travels in the query string):
    GET    /api/test-et-validation
    POST   /api/test-et-validation              title required
    PATCH  /api/test-et-validation?id=
    DELETE /api/test-et-validation?id=          {"success": true}
    GET    /api/test-et-validation/statistics
"""

from flask import Blueprint, jsonify, request

from portal.blueprints import register_service_errors
from portal.services import validation_service
from portal.utils.errors import E, api_error

validation_bp = Blueprint("validation", __name__, url_prefix="/api/test-et-validation")
register_service_errors(validation_bp)


def _test_id():
    return request.args.get("id")


@validation_bp.route("", methods=["GET"])
def list_test_cases():
    return jsonify(validation_service.list_test_cases()), 200


@validation_bp.route("", methods=["POST"])
def create_test_case():
    return jsonify(validation_service.create_test_case(request.get_json(silent=True))), 201


@validation_bp.route("", methods=["PATCH"])
def update_test_case():
    if not _test_id():
        return api_error(E.VALIDATION_REQUIRED, "Test ID is required")
    return jsonify(validation_service.update_test_case(_test_id(), request.get_json(silent=True))), 200


@validation_bp.route("", methods=["DELETE"])
def delete_test_case():
    if not _test_id():
        return api_error(E.VALIDATION_REQUIRED, "Test ID is required")
    validation_service.delete_test_case(_test_id())
    return jsonify({"success": True}), 200


@validation_bp.route("/statistics", methods=["GET"])
def test_statistics():
    return jsonify(validation_service.get_statistics()), 200
