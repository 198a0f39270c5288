"""
Accounting (comptabilité) blueprint: expenses, invoices and quotes.

Endpoints (writes require a session):
    GET    /api/comptabilite/depenses        ?id=&project_id=&status=&category=
                                             &from_date=&to_date=&amount_min=&amount_max=
                                             &sort=date|amount|created_at&order=asc|desc
    POST   /api/comptabilite/depenses        date, description, amount, category, beneficiary
    PUT    /api/comptabilite/depenses        id in the body
    DELETE /api/comptabilite/depenses?id=
    GET    /api/comptabilite/depenses/stats  ?from_date=&to_date=

    GET    /api/comptabilite/facture
    POST   /api/comptabilite/facture
    PATCH  /api/comptabilite/facture?id=
    DELETE /api/comptabilite/facture?id=

    GET    /api/comptabilite/devis
    POST   /api/comptabilite/devis
    PATCH  /api/comptabilite/devis?id=
    DELETE /api/comptabilite/devis?id=
"""

from flask import Blueprint, g, jsonify, request

from portal.blueprints import filters_from_args, json_body, register_service_errors
from portal.middleware.session_auth import login_required
from portal.services import accounting_service as svc
from portal.utils.errors import E, api_error

accounting_bp = Blueprint("accounting", __name__, url_prefix="/api/comptabilite")
register_service_errors(accounting_bp)


# ── Expenses ─────────────────────────────────────────────────────────────


@accounting_bp.route("/depenses", methods=["GET"])
def list_expenses():
    return jsonify(svc.list_expenses(filters_from_args(svc.EXPENSE_FILTER_KEYS)))


@accounting_bp.route("/depenses", methods=["POST"])
@login_required
def create_expense():
    return jsonify(svc.create_expense(json_body(), g.user_id)), 201


@accounting_bp.route("/depenses", methods=["PUT"])
@login_required
def update_expense():
    data = json_body()
    if not data.get("id"):
        return api_error(E.VALIDATION_REQUIRED, "ID is required for updating expense records")
    return jsonify(svc.update_expense(data["id"], data, g.user_id))


@accounting_bp.route("/depenses", methods=["DELETE"])
@login_required
def delete_expense():
    expense_id = request.args.get("id")
    if not expense_id:
        return api_error(E.VALIDATION_REQUIRED, "ID is required for deleting expense records")
    svc.delete_expense(expense_id, g.user_id)
    return jsonify({"message": "Expense deleted successfully"})


@accounting_bp.route("/depenses/stats", methods=["GET"])
def expense_statistics():
    stats = svc.get_expense_statistics(request.args.get("from_date"), request.args.get("to_date"))
    return jsonify(stats)


# ── Invoices and quotes ──────────────────────────────────────────────────


def _billing_id(kind):
    doc_id = request.args.get("id")
    if not doc_id:
        return None, api_error(E.VALIDATION_REQUIRED, f"{kind.label} ID is required")
    return doc_id, None


@accounting_bp.route("/facture", methods=["GET"])
def list_invoices():
    return jsonify(svc.list_billing(svc.INVOICE_KIND))


@accounting_bp.route("/facture", methods=["POST"])
@login_required
def create_invoice():
    return jsonify(svc.create_billing(svc.INVOICE_KIND, json_body(), g.user_id)), 201


@accounting_bp.route("/facture", methods=["PATCH"])
@login_required
def update_invoice():
    invoice_id, error = _billing_id(svc.INVOICE_KIND)
    if error:
        return error
    return jsonify(svc.update_billing(svc.INVOICE_KIND, invoice_id, json_body(), g.user_id))


@accounting_bp.route("/facture", methods=["DELETE"])
@login_required
def delete_invoice():
    invoice_id, error = _billing_id(svc.INVOICE_KIND)
    if error:
        return error
    svc.delete_billing(svc.INVOICE_KIND, invoice_id, g.user_id)
    return jsonify({"success": True})


@accounting_bp.route("/devis", methods=["GET"])
def list_quotes():
    return jsonify(svc.list_billing(svc.QUOTE_KIND))


@accounting_bp.route("/devis", methods=["POST"])
@login_required
def create_quote():
    return jsonify(svc.create_billing(svc.QUOTE_KIND, json_body(), g.user_id)), 201


@accounting_bp.route("/devis", methods=["PATCH"])
@login_required
def update_quote():
    quote_id, error = _billing_id(svc.QUOTE_KIND)
    if error:
        return error
    return jsonify(svc.update_billing(svc.QUOTE_KIND, quote_id, json_body(), g.user_id))


@accounting_bp.route("/devis", methods=["DELETE"])
@login_required
def delete_quote():
    quote_id, error = _billing_id(svc.QUOTE_KIND)
    if error:
        return error
    svc.delete_billing(svc.QUOTE_KIND, quote_id, g.user_id)
    return jsonify({"message": "Quote deleted successfully"})
