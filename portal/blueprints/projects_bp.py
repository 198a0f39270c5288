"""
Projects blueprint.

Endpoints:
    /api/projects               GET (filters), POST
    /api/projects/statistics    GET   ?type=
    /api/projects/<id>          GET, PUT/PATCH, DELETE
"""

import logging

from flask import Blueprint, jsonify, request

from portal.blueprints import filters_from_args, json_body, register_service_errors
from portal.services import project_service

logger = logging.getLogger(__name__)

projects_bp = Blueprint("projects", __name__, url_prefix="/api/projects")
register_service_errors(projects_bp)


@projects_bp.route("", methods=["GET"])
def list_projects():
    filters = filters_from_args(project_service.PROJECT_FILTERS.keys)
    return jsonify({
        "items": project_service.list_projects(filters),
        "total": project_service.count_projects(filters),
    })


@projects_bp.route("", methods=["POST"])
def create_project():
    return jsonify(project_service.create_project(json_body())), 201


@projects_bp.route("/statistics", methods=["GET"])
def project_statistics():
    return jsonify(project_service.project_statistics(request.args.get("type")))


@projects_bp.route("/<project_id>", methods=["GET"])
def get_project(project_id):
    return jsonify(project_service.get_project(project_id))


@projects_bp.route("/<project_id>", methods=["PUT", "PATCH"])
def update_project(project_id):
    return jsonify(project_service.update_project(project_id, json_body()))


@projects_bp.route("/<project_id>", methods=["DELETE"])
def delete_project(project_id):
    project_service.delete_project(project_id)
    return "", 204
