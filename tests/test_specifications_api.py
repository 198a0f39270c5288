"""API tests for /api/cahier-des-charges (flat-file specifications)."""

import json
import uuid

from portal.services.specification_service import FILENAME


def _create(client, title="Cahier v1", content="Scope and deliverables"):
    return client.post("/api/cahier-des-charges", json={"title": title, "content": content})


class TestListAndCreate:
    def test_empty_list(self, client):
        res = client.get("/api/cahier-des-charges")
        assert res.status_code == 200
        assert res.get_json() == []

    def test_create_returns_draft_with_new_uuid(self, client):
        res = _create(client)
        assert res.status_code == 201
        body = res.get_json()
        uuid.UUID(body["id"])
        assert body["status"] == "draft"
        assert body["title"] == "Cahier v1"
        assert body["createdAt"] == body["updatedAt"]

    def test_ids_are_unique(self, client):
        first = _create(client).get_json()
        second = _create(client).get_json()
        assert first["id"] != second["id"]
        ids = [s["id"] for s in client.get("/api/cahier-des-charges").get_json()]
        assert ids == [first["id"], second["id"]]

    def test_status_from_client_is_ignored(self, client):
        res = client.post("/api/cahier-des-charges",
                          json={"title": "T", "content": "C", "status": "approved"})
        assert res.get_json()["status"] == "draft"

    def test_missing_title_is_400(self, client):
        res = client.post("/api/cahier-des-charges", json={"content": "C"})
        assert res.status_code == 400
        assert res.get_json()["error"] == "Title and content are required"

    def test_empty_content_is_400(self, client):
        res = client.post("/api/cahier-des-charges", json={"title": "T", "content": ""})
        assert res.status_code == 400

    def test_non_json_body_is_415(self, client):
        res = client.post("/api/cahier-des-charges", data="title=T", content_type="text/plain")
        assert res.status_code == 415


class TestUpdate:
    def test_patch_applies_non_empty_fields(self, client):
        spec = _create(client).get_json()
        res = client.patch(f"/api/cahier-des-charges/{spec['id']}",
                           json={"status": "review", "title": ""})
        assert res.status_code == 200
        body = res.get_json()
        assert body["status"] == "review"
        assert body["title"] == "Cahier v1"
        assert body["createdAt"] == spec["createdAt"]
        assert body["updatedAt"] >= spec["updatedAt"]

    def test_patch_unknown_is_404_and_file_unchanged(self, client, data_dir):
        _create(client)
        before = (data_dir / FILENAME).read_bytes()
        res = client.patch(f"/api/cahier-des-charges/{uuid.uuid4()}", json={"title": "X"})
        assert res.status_code == 404
        assert res.get_json()["error"] == "Specification not found"
        assert (data_dir / FILENAME).read_bytes() == before


class TestDelete:
    def test_delete_then_list(self, client):
        spec = _create(client).get_json()
        res = client.delete(f"/api/cahier-des-charges/{spec['id']}")
        assert res.status_code == 204
        assert res.data == b""
        ids = [s["id"] for s in client.get("/api/cahier-des-charges").get_json()]
        assert spec["id"] not in ids

    def test_delete_unknown_is_404(self, client):
        assert client.delete(f"/api/cahier-des-charges/{uuid.uuid4()}").status_code == 404


class TestStatistics:
    def test_counts_per_status(self, client, data_dir):
        (data_dir / FILENAME).write_text(json.dumps([
            {"id": "1", "status": "draft"},
            {"id": "2", "status": "approved"},
            {"id": "3", "status": "approved"},
        ]))
        res = client.get("/api/cahier-des-charges/statistics")
        assert res.status_code == 200
        assert res.get_json() == {"total": 3, "draft": 1, "review": 0, "approved": 2, "archived": 0}
