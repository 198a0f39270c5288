"""API tests for /api/comptabilite (expenses, invoices, quotes)."""

import pytest

from portal.models import db
from portal.models.contact import Contact
from portal.models.document import Document
from portal.models.project import Project
from portal.services.statistics import expense_statistics

_EXPENSE = {
    "date": "2026-03-10",
    "description": "Train tickets",
    "amount": 120.5,
    "category": "travel",
    "beneficiary": "Camille",
}


def _create_expense(client, headers, **overrides):
    res = client.post("/api/comptabilite/depenses", json={**_EXPENSE, **overrides}, headers=headers)
    assert res.status_code == 201
    return res.get_json()


class TestExpenseCreate:
    def test_create_flattens_metadata(self, client, auth_headers):
        project = Project(name="Hackathon")
        db.session.add(project)
        db.session.commit()

        expense = _create_expense(client, auth_headers, project_id=project.id,
                                  receipt_url="https://files.test/r.pdf")
        assert expense["status"] == "draft"
        assert expense["amount"] == 120.5
        assert expense["total"] == 120.5
        assert expense["currency"] == "EUR"
        assert expense["project_name"] == "Hackathon"
        assert expense["receipt_url"] == "https://files.test/r.pdf"
        assert expense["expense_number"].startswith("EXP-")

        row = db.session.get(Document, expense["id"])
        assert row.custom_type == "depense"
        assert row.status == "Active"
        assert row.meta["expense_status"] == "draft"

    def test_missing_fields_is_400(self, client, auth_headers):
        res = client.post("/api/comptabilite/depenses", json={"date": "2026-03-10"}, headers=auth_headers)
        assert res.status_code == 400
        assert res.get_json()["error"].startswith("Missing required fields: date, description")

    def test_bad_status_and_amount_are_400(self, client, auth_headers):
        res = client.post("/api/comptabilite/depenses", json={**_EXPENSE, "status": "paid"},
                          headers=auth_headers)
        assert res.status_code == 400
        res = client.post("/api/comptabilite/depenses", json={**_EXPENSE, "amount": "lots"},
                          headers=auth_headers)
        assert res.status_code == 400

    def test_writes_require_session(self, client):
        assert client.post("/api/comptabilite/depenses", json=_EXPENSE).status_code == 401
        assert client.delete("/api/comptabilite/depenses?id=x").status_code == 401


class TestExpenseList:
    @pytest.fixture()
    def expenses(self, client, auth_headers):
        return [
            _create_expense(client, auth_headers, date="2026-01-05", amount=50, category="food"),
            _create_expense(client, auth_headers, date="2026-02-05", amount=300, status="approved"),
            _create_expense(client, auth_headers, date="2026-03-05", amount=10, status="submitted"),
        ]

    def test_default_order_is_date_desc(self, client, expenses):
        dates = [e["date"] for e in client.get("/api/comptabilite/depenses").get_json()]
        assert dates == ["2026-03-05", "2026-02-05", "2026-01-05"]

    def test_sort_by_amount_ascending(self, client, expenses):
        res = client.get("/api/comptabilite/depenses?sort=amount&order=asc")
        assert [e["total"] for e in res.get_json()] == [10, 50, 300]

    def test_filters(self, client, expenses):
        def ids(query):
            return {e["id"] for e in client.get(f"/api/comptabilite/depenses?{query}").get_json()}

        assert ids("status=approved") == {expenses[1]["id"]}
        assert ids("category=food") == {expenses[0]["id"]}
        assert ids("from_date=2026-02-01&to_date=2026-02-28") == {expenses[1]["id"]}
        assert ids("amount_min=20&amount_max=100") == {expenses[0]["id"]}
        assert ids(f"id={expenses[2]['id']}") == {expenses[2]["id"]}

    def test_bad_amount_filter_is_400(self, client, expenses):
        assert client.get("/api/comptabilite/depenses?amount_min=abc").status_code == 400

    def test_other_document_types_are_excluded(self, client, expenses):
        db.session.add(Document(title="Contract", custom_type="contrat", status="Active"))
        db.session.commit()
        assert len(client.get("/api/comptabilite/depenses").get_json()) == 3


class TestExpenseUpdateDelete:
    def test_put_merges_and_keeps_missing_values(self, client, auth_headers):
        expense = _create_expense(client, auth_headers)
        res = client.put("/api/comptabilite/depenses", json={
            "id": expense["id"], "status": "approved", "notes": "",
        }, headers=auth_headers)
        assert res.status_code == 200
        body = res.get_json()
        assert body["status"] == "approved"
        assert body["beneficiary"] == "Camille"
        assert body["total"] == 120.5

    def test_put_requires_id(self, client, auth_headers):
        res = client.put("/api/comptabilite/depenses", json={"status": "approved"}, headers=auth_headers)
        assert res.status_code == 400
        assert res.get_json()["error"] == "ID is required for updating expense records"

    def test_put_unknown_is_404(self, client, auth_headers):
        res = client.put("/api/comptabilite/depenses", json={"id": "nope"}, headers=auth_headers)
        assert res.status_code == 404
        assert res.get_json()["error"] == "Expense not found"

    def test_delete_is_soft(self, client, auth_headers):
        expense = _create_expense(client, auth_headers)
        res = client.delete(f"/api/comptabilite/depenses?id={expense['id']}", headers=auth_headers)
        assert res.get_json() == {"message": "Expense deleted successfully"}
        assert client.get("/api/comptabilite/depenses").get_json() == []
        assert db.session.get(Document, expense["id"]).status == "Deleted"

        again = client.delete(f"/api/comptabilite/depenses?id={expense['id']}", headers=auth_headers)
        assert again.status_code == 404

    def test_delete_requires_id(self, client, auth_headers):
        res = client.delete("/api/comptabilite/depenses", headers=auth_headers)
        assert res.status_code == 400
        assert res.get_json()["error"] == "ID is required for deleting expense records"


class TestExpenseStatistics:
    def test_stats_endpoint_counts_and_sums(self, client, auth_headers):
        _create_expense(client, auth_headers, amount=100)
        _create_expense(client, auth_headers, amount=40, status="submitted")
        _create_expense(client, auth_headers, amount=60, status="approved")
        _create_expense(client, auth_headers, amount=5, status="rejected", date="2025-12-31")

        stats = client.get("/api/comptabilite/depenses/stats").get_json()
        assert stats["total_count"] == 4
        assert stats["pending_count"] == 1
        assert stats["refused_count"] == 1
        assert stats["total_amount"] == 205
        assert stats["approved_amount"] == 60

        ranged = client.get("/api/comptabilite/depenses/stats?from_date=2026-01-01").get_json()
        assert ranged["total_count"] == 3
        assert ranged["refused_count"] == 0

    def test_reducer_tolerates_bad_totals(self):
        stats = expense_statistics([
            {"status": "reimbursed", "total": "12.5"},
            {"status": "reimbursed", "total": "n/a"},
            {"status": "draft", "total": None},
        ])
        assert stats["reimbursed_count"] == 2
        assert stats["reimbursed_amount"] == 12.5
        assert stats["draft_count"] == 1


class TestInvoices:
    def test_create_with_client_and_defaults(self, client, auth_headers):
        contact = Contact(first_name="Ada", last_name="Lovelace", type="client",
                          email="ada@example.test", meta={"city": "London"})
        db.session.add(contact)
        db.session.commit()

        res = client.post("/api/comptabilite/facture", json={
            "invoice_number": "F-001", "client": {"id": contact.id}, "total": 240,
            "items": [{"description": "Workshop", "amount": 240}],
        }, headers=auth_headers)
        assert res.status_code == 201
        invoice = res.get_json()
        assert invoice["title"] == "Facture F-001"
        assert invoice["status"] == "draft"
        assert invoice["client"]["name"] == "Ada Lovelace"
        assert invoice["client"]["city"] == "London"
        assert invoice["language"] == "fr"
        assert invoice["paid_at"] is None
        assert invoice["date"]

        listed = client.get("/api/comptabilite/facture").get_json()
        assert [i["id"] for i in listed] == [invoice["id"]]

    def test_patch_merges_and_delete_hides(self, client, auth_headers):
        invoice = client.post("/api/comptabilite/facture", json={"total": 10},
                              headers=auth_headers).get_json()
        res = client.patch(f"/api/comptabilite/facture?id={invoice['id']}",
                           json={"status": "paid"}, headers=auth_headers)
        assert res.get_json()["status"] == "paid"
        assert res.get_json()["total"] == 10

        res = client.delete(f"/api/comptabilite/facture?id={invoice['id']}", headers=auth_headers)
        assert res.get_json() == {"success": True}
        assert client.get("/api/comptabilite/facture").get_json() == []

    def test_errors(self, client, auth_headers):
        res = client.patch("/api/comptabilite/facture", json={}, headers=auth_headers)
        assert res.get_json()["error"] == "Invoice ID is required"
        res = client.patch("/api/comptabilite/facture?id=nope", json={}, headers=auth_headers)
        assert res.status_code == 404
        assert res.get_json()["error"] == "Invoice not found"
        res = client.post("/api/comptabilite/facture", json={"items": "many"}, headers=auth_headers)
        assert res.status_code == 400


class TestQuotes:
    def test_quote_defaults_and_delete_message(self, client, auth_headers):
        res = client.post("/api/comptabilite/devis", json={"total": 99}, headers=auth_headers)
        assert res.status_code == 201
        quote = res.get_json()
        assert quote["quote_number"].startswith("QT-")
        assert quote["validity_period"] == 30
        assert quote["client"]["name"] == ""

        res = client.delete(f"/api/comptabilite/devis?id={quote['id']}", headers=auth_headers)
        assert res.get_json() == {"message": "Quote deleted successfully"}

        res = client.delete(f"/api/comptabilite/devis?id={quote['id']}", headers=auth_headers)
        assert res.status_code == 404
        assert res.get_json()["error"] == "Quote not found"

    def test_invoice_id_is_not_a_quote(self, client, auth_headers):
        invoice = client.post("/api/comptabilite/facture", json={}, headers=auth_headers).get_json()
        res = client.patch(f"/api/comptabilite/devis?id={invoice['id']}", json={"notes": "x"},
                           headers=auth_headers)
        assert res.status_code == 404
