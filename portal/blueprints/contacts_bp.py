"""
Contacts blueprint: every contact type, plus lead and client views.

Endpoints:
    CONTACTS  /api/contacts                  GET (filters), POST
              /api/contacts/counts           GET   {by_type, by_status}
              /api/contacts/<id>             GET, PUT/PATCH, DELETE

    LEADS     /api/leads                     GET (filters), POST
              /api/leads/statistics          GET
              /api/leads/<id>                GET, PUT/PATCH, DELETE

    CLIENTS   /api/clients                   GET (filters), POST
              /api/clients/statistics        GET
              /api/clients/<id>              GET, PUT/PATCH, DELETE

The lead and client endpoints only ever see rows of their own type; an id of
another type answers 404.
"""

import logging

from flask import Blueprint, jsonify, request

from portal.blueprints import filters_from_args, json_body, register_service_errors
from portal.services import contact_service, entity_service
from portal.services.statistics import client_statistics, lead_statistics

logger = logging.getLogger(__name__)

contacts_bp = Blueprint("contacts", __name__, url_prefix="/api")
register_service_errors(contacts_bp)

_PAGING = ("limit", "offset")


def _listing(spec, rows):
    filters = filters_from_args(spec.keys)
    return jsonify({"items": rows(filters), "total": entity_service.count_records(spec, filters)})


# ═══════════════════════════════════════════════════════════════════════════
#  CONTACTS
# ═══════════════════════════════════════════════════════════════════════════

@contacts_bp.route("/contacts", methods=["GET"])
def list_contacts():
    return _listing(contact_service.CONTACT_FILTERS, contact_service.list_contacts)


@contacts_bp.route("/contacts", methods=["POST"])
def create_contact():
    return jsonify(contact_service.create_contact(json_body())), 201


@contacts_bp.route("/contacts/counts", methods=["GET"])
def contact_counts():
    return jsonify({
        "by_type": contact_service.contact_counts_by_type(),
        "by_status": contact_service.contact_counts_by_status(request.args.get("type")),
    })


@contacts_bp.route("/contacts/<contact_id>", methods=["GET"])
def get_contact(contact_id):
    return jsonify(contact_service.get_contact(contact_id))


@contacts_bp.route("/contacts/<contact_id>", methods=["PUT", "PATCH"])
def update_contact(contact_id):
    return jsonify(contact_service.update_contact(contact_id, json_body()))


@contacts_bp.route("/contacts/<contact_id>", methods=["DELETE"])
def delete_contact(contact_id):
    contact_service.delete_contact(contact_id)
    return "", 204


# ═══════════════════════════════════════════════════════════════════════════
#  LEADS
# ═══════════════════════════════════════════════════════════════════════════

@contacts_bp.route("/leads", methods=["GET"])
def list_leads():
    return _listing(contact_service.LEAD_FILTERS, contact_service.list_leads)


@contacts_bp.route("/leads", methods=["POST"])
def create_lead():
    return jsonify(contact_service.create_lead(json_body())), 201


@contacts_bp.route("/leads/statistics", methods=["GET"])
def lead_stats():
    filters = filters_from_args(contact_service.LEAD_FILTERS.keys - set(_PAGING))
    return jsonify(lead_statistics(contact_service.list_leads(filters)))


@contacts_bp.route("/leads/<lead_id>", methods=["GET"])
def get_lead(lead_id):
    return jsonify(contact_service.get_lead(lead_id))


@contacts_bp.route("/leads/<lead_id>", methods=["PUT", "PATCH"])
def update_lead(lead_id):
    return jsonify(contact_service.update_lead(lead_id, json_body()))


@contacts_bp.route("/leads/<lead_id>", methods=["DELETE"])
def delete_lead(lead_id):
    contact_service.delete_lead(lead_id)
    return "", 204


# ═══════════════════════════════════════════════════════════════════════════
#  CLIENTS
# ═══════════════════════════════════════════════════════════════════════════

@contacts_bp.route("/clients", methods=["GET"])
def list_clients():
    return _listing(contact_service.CLIENT_FILTERS, contact_service.list_clients)


@contacts_bp.route("/clients", methods=["POST"])
def create_client():
    return jsonify(contact_service.create_client(json_body())), 201


@contacts_bp.route("/clients/statistics", methods=["GET"])
def client_stats():
    filters = filters_from_args(contact_service.CLIENT_FILTERS.keys - set(_PAGING))
    return jsonify(client_statistics(contact_service.list_clients(filters)))


@contacts_bp.route("/clients/<client_id>", methods=["GET"])
def get_client(client_id):
    return jsonify(contact_service.get_client(client_id))


@contacts_bp.route("/clients/<client_id>", methods=["PUT", "PATCH"])
def update_client(client_id):
    return jsonify(contact_service.update_client(client_id, json_body()))


@contacts_bp.route("/clients/<client_id>", methods=["DELETE"])
def delete_client(client_id):
    contact_service.delete_client(client_id)
    return "", 204
