"""API tests for /api/comptabilite/depenses/pdf.

All storage and auth calls are mocked via patch.object on the module-level
``backend_gateway`` singleton; no network access.
"""

import io
from unittest.mock import patch

import pytest

import portal.integrations.backend_gateway as gw_module
from portal.models import db
from portal.models.document import Document
from conftest import TEST_USER_ID, gateway_error, gateway_ok, make_token

URL = "/api/comptabilite/depenses/pdf"


@pytest.fixture()
def expense():
    doc = Document(title="Facture traiteur", status="Active", custom_type="depense")
    db.session.add(doc)
    db.session.commit()
    return doc


@pytest.fixture()
def expense_with_file(expense):
    expense.file_path = f"expenses/{expense.id}/existing.pdf"
    expense.file_name = "receipt.pdf"
    expense.file_size = 1234
    expense.file_type = "application/pdf"
    db.session.commit()
    return expense


def _upload(client, headers, expense_id, content_type="application/pdf", name="receipt.pdf"):
    return client.post(
        URL,
        headers=headers,
        data={"expenseId": expense_id, "file": (io.BytesIO(b"%PDF-1.4 test"), name, content_type)},
        content_type="multipart/form-data",
    )


class TestAuth:
    def test_no_token_is_401(self, client):
        assert client.get(f"{URL}?expenseId=x").status_code == 401

    def test_expired_token_is_401_without_provider_call(self, client):
        with patch.object(gw_module.backend_gateway, "get_user") as get_user:
            res = client.get(f"{URL}?expenseId=x",
                             headers={"Authorization": f"Bearer {make_token(expires_in=-60)}"})
        assert res.status_code == 401
        get_user.assert_not_called()

    def test_rejected_token_is_401(self, client):
        with patch.object(gw_module.backend_gateway, "get_user", return_value=gateway_error("bad jwt", 401)):
            res = client.delete(f"{URL}?expenseId=x",
                                headers={"Authorization": f"Bearer {make_token()}"})
        assert res.status_code == 401
        assert res.get_json()["error"] == "Unauthorized"


class TestUpload:
    def test_upload_updates_row_and_returns_public_url(self, client, auth_headers, expense):
        with patch.object(gw_module.backend_gateway, "upload",
                          return_value=gateway_ok({"Key": "documents/x"})) as upload:
            res = _upload(client, auth_headers, expense.id)

        assert res.status_code == 200
        body = res.get_json()
        assert body["success"] is True
        path = body["file"]["path"]
        assert path.startswith(f"expenses/{expense.id}/") and path.endswith(".pdf")
        assert body["file"]["name"] == "receipt.pdf"
        assert body["file"]["size"] == len(b"%PDF-1.4 test")
        assert body["file"]["url"] == f"https://backend.test/storage/v1/object/public/documents/{path}"
        assert body["expense"]["file_path"] == path
        assert body["expense"]["last_modified_by"] == TEST_USER_ID

        args, kwargs = upload.call_args
        assert args[0] == "documents"
        assert args[1] == path
        assert kwargs["upsert"] is True
        assert kwargs["content_type"] == "application/pdf"

        stored = db.session.get(Document, expense.id)
        assert stored.file_name == "receipt.pdf"

    def test_non_pdf_is_400_and_row_untouched(self, client, auth_headers, expense_with_file):
        with patch.object(gw_module.backend_gateway, "upload") as upload:
            res = _upload(client, auth_headers, expense_with_file.id,
                          content_type="image/png", name="photo.png")
        assert res.status_code == 400
        assert res.get_json()["error"] == "Only PDF files are allowed"
        upload.assert_not_called()
        db.session.expire_all()
        assert db.session.get(Document, expense_with_file.id).file_path.endswith("existing.pdf")

    def test_missing_file_is_400(self, client, auth_headers, expense):
        res = client.post(URL, headers=auth_headers, data={"expenseId": expense.id},
                          content_type="multipart/form-data")
        assert res.status_code == 400
        assert res.get_json()["error"] == "Expense ID and file are required"

    def test_unknown_expense_is_404(self, client, auth_headers):
        with patch.object(gw_module.backend_gateway, "upload") as upload:
            res = _upload(client, auth_headers, "00000000-0000-0000-0000-000000000000")
        assert res.status_code == 404
        assert res.get_json()["error"] == "Expense not found"
        upload.assert_not_called()

    def test_storage_failure_is_generic_500(self, client, auth_headers, expense):
        with patch.object(gw_module.backend_gateway, "upload",
                          return_value=gateway_error("bucket quota exceeded", 413)):
            res = _upload(client, auth_headers, expense.id)
        assert res.status_code == 500
        assert res.get_json()["error"] == "Failed to upload PDF"
        assert "quota" not in res.get_data(as_text=True)
        db.session.expire_all()
        assert db.session.get(Document, expense.id).file_path is None


class TestDownload:
    def test_signed_url(self, client, auth_headers, expense_with_file):
        signed = gateway_ok({"signedURL": "/object/sign/documents/x.pdf?token=abc"})
        with patch.object(gw_module.backend_gateway, "create_signed_url", return_value=signed) as sign:
            res = client.get(f"{URL}?expenseId={expense_with_file.id}", headers=auth_headers)
        assert res.status_code == 200
        assert res.get_json() == {
            "success": True,
            "file": {
                "name": "receipt.pdf",
                "url": "https://backend.test/storage/v1/object/sign/documents/x.pdf?token=abc",
            },
        }
        assert sign.call_args.args[2] == 60

    def test_missing_id_is_400(self, client, auth_headers):
        res = client.get(URL, headers=auth_headers)
        assert res.status_code == 400
        assert res.get_json()["error"] == "Expense ID is required"

    def test_no_file_is_404(self, client, auth_headers, expense):
        res = client.get(f"{URL}?expenseId={expense.id}", headers=auth_headers)
        assert res.status_code == 404
        assert res.get_json()["error"] == "No PDF file associated with this expense"


class TestDelete:
    def test_delete_clears_file_fields(self, client, auth_headers, expense_with_file):
        path = expense_with_file.file_path
        with patch.object(gw_module.backend_gateway, "remove", return_value=gateway_ok([])) as remove:
            res = client.delete(f"{URL}?expenseId={expense_with_file.id}", headers=auth_headers)
        assert res.status_code == 200
        assert res.get_json() == {"success": True, "message": "PDF deleted successfully"}
        assert remove.call_args.args == ("documents", [path])

        db.session.expire_all()
        stored = db.session.get(Document, expense_with_file.id)
        assert stored.file_path is None
        assert stored.file_name is None
        assert stored.file_size is None
        assert stored.file_type is None
        assert stored.last_modified_by == TEST_USER_ID

    def test_storage_failure_keeps_row(self, client, auth_headers, expense_with_file):
        with patch.object(gw_module.backend_gateway, "remove", return_value=gateway_error("boom", 500)):
            res = client.delete(f"{URL}?expenseId={expense_with_file.id}", headers=auth_headers)
        assert res.status_code == 500
        assert res.get_json()["error"] == "Failed to delete PDF"
        db.session.expire_all()
        assert db.session.get(Document, expense_with_file.id).file_path is not None
