"""
Campaigns blueprint.

Endpoints:
    /api/campaigns               GET (filters, paging), POST
    /api/campaigns/statistics    GET
    /api/campaigns/<id>          GET, PUT/PATCH, DELETE

Writes record the signed-in user as created_by / updated_by when a session
is present; campaigns themselves do not require one.
"""

import logging

from flask import Blueprint, jsonify

from portal.blueprints import filters_from_args, json_body, register_service_errors
from portal.middleware.session_auth import current_user
from portal.services import campaign_service

logger = logging.getLogger(__name__)

campaigns_bp = Blueprint("campaigns", __name__, url_prefix="/api/campaigns")
register_service_errors(campaigns_bp)


def _user_id():
    user = current_user()
    return user["id"] if user else None


@campaigns_bp.route("", methods=["GET"])
def list_campaigns():
    filters = filters_from_args(campaign_service.CAMPAIGN_FILTERS.keys)
    return jsonify(campaign_service.list_campaigns(filters))


@campaigns_bp.route("", methods=["POST"])
def create_campaign():
    return jsonify(campaign_service.create_campaign(json_body(), _user_id())), 201


@campaigns_bp.route("/statistics", methods=["GET"])
def campaign_statistics():
    return jsonify(campaign_service.campaign_statistics())


@campaigns_bp.route("/<campaign_id>", methods=["GET"])
def get_campaign(campaign_id):
    return jsonify(campaign_service.get_campaign(campaign_id))


@campaigns_bp.route("/<campaign_id>", methods=["PUT", "PATCH"])
def update_campaign(campaign_id):
    return jsonify(campaign_service.update_campaign(campaign_id, json_body(), _user_id()))


@campaigns_bp.route("/<campaign_id>", methods=["DELETE"])
def delete_campaign(campaign_id):
    campaign_service.delete_campaign(campaign_id)
    return "", 204
