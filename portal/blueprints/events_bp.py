"""
Calendar events blueprint.

Endpoints (session required):
    GET    /api/events           ?event_type=&status=&start_date=&end_date=
    POST   /api/events           title, start_datetime, end_datetime required
    GET    /api/events/<id>
    PUT    /api/events/<id>
    DELETE /api/events/<id>

Responses are wrapped: {"events": [...]} for lists, {"event": {...}} for
single rows.
"""

import logging

from flask import Blueprint, g, jsonify

from portal.blueprints import filters_from_args, json_body, register_service_errors
from portal.middleware.session_auth import login_required
from portal.services import event_service

logger = logging.getLogger(__name__)

events_bp = Blueprint("events", __name__, url_prefix="/api/events")
register_service_errors(events_bp)


@events_bp.route("", methods=["GET"])
@login_required
def list_events():
    filters = filters_from_args(event_service.EVENT_FILTERS.keys)
    return jsonify({"events": event_service.list_events(filters)})


@events_bp.route("", methods=["POST"])
@login_required
def create_event():
    event = event_service.create_event(json_body(), g.user_id)
    return jsonify({"event": event}), 201


@events_bp.route("/<event_id>", methods=["GET"])
@login_required
def get_event(event_id):
    return jsonify({"event": event_service.get_event(event_id)})


@events_bp.route("/<event_id>", methods=["PUT", "PATCH"])
@login_required
def update_event(event_id):
    return jsonify({"event": event_service.update_event(event_id, json_body())})


@events_bp.route("/<event_id>", methods=["DELETE"])
@login_required
def delete_event(event_id):
    event_service.delete_event(event_id)
    return jsonify({"success": True})
