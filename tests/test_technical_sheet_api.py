"""API tests for /api/fiche-technique (technical sheet)."""

import json

from portal.services.technical_sheet_service import FILENAME


class TestTechnicalSheet:
    def test_create_list_update_delete(self, client, data_dir):
        res = client.post("/api/fiche-technique", json={
            "name": "Flask", "category": "backend", "id": "mine", "created_at": "1999-01-01",
        })
        assert res.status_code == 201
        tech = res.get_json()
        assert tech["id"] != "mine"
        assert tech["created_at"] != "1999-01-01"

        assert [t["name"] for t in client.get("/api/fiche-technique").get_json()] == ["Flask"]

        res = client.patch(f"/api/fiche-technique/{tech['id']}", json={"version": "3.0"})
        assert res.status_code == 200
        assert res.get_json()["version"] == "3.0"
        assert res.get_json()["name"] == "Flask"

        assert client.delete(f"/api/fiche-technique/{tech['id']}").status_code == 204
        assert json.loads((data_dir / FILENAME).read_text()) == []

    def test_empty_store_lists_nothing(self, client):
        res = client.get("/api/fiche-technique")
        assert res.status_code == 200
        assert res.get_json() == []

    def test_unknown_id_is_404(self, client):
        res = client.patch("/api/fiche-technique/nope", json={"name": "x"})
        assert res.status_code == 404
        assert res.get_json()["error"] == "Technology not found"
        assert client.delete("/api/fiche-technique/nope").status_code == 404

    def test_non_object_body_is_400(self, client):
        res = client.post("/api/fiche-technique", json=["Flask"])
        assert res.status_code == 400
