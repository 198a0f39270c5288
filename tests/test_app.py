"""App-level behaviour: health checks, guards, headers, error bodies, session refresh."""

from unittest.mock import patch

import portal.integrations.backend_gateway as gw_module
from portal.integrations.backend_gateway import BackendGateway
from portal.middleware.rate_limiter import BLUEPRINT_LIMITS

from conftest import gateway_ok, make_token


class TestHealth:
    def test_ready(self, client):
        res = client.get("/api/health/ready")
        assert res.status_code == 200
        assert res.get_json() == {"status": "ok"}

    def test_live_checks_database_and_data_dir(self, client):
        res = client.get("/api/health/live")
        assert res.status_code == 200
        checks = res.get_json()["checks"]
        assert checks["database"]["status"] == "ok"
        assert checks["data_dir"]["status"] == "ok"


class TestGuardsAndErrors:
    def test_unknown_api_path_is_json_404(self, client):
        res = client.get("/api/nothing-here")
        assert res.status_code == 404
        assert res.get_json()["code"] == "ERR_NOT_FOUND"

    def test_wrong_method_is_405(self, client):
        assert client.put("/api/health/ready", json={}).status_code == 405

    def test_form_body_on_json_route_is_415(self, client):
        res = client.post("/api/mise-a-jour", data={"title": "x"})
        assert res.status_code == 415

    def test_security_headers(self, client):
        res = client.get("/api/health/ready")
        assert res.headers["X-Content-Type-Options"] == "nosniff"
        assert res.headers["X-Frame-Options"] == "DENY"
        assert "X-Request-ID" in res.headers


class TestRateLimitTable:
    def test_every_limited_blueprint_is_registered(self, app):
        assert set(BLUEPRINT_LIMITS) <= set(app.blueprints)

    def test_every_api_blueprint_is_limited(self, app):
        assert set(app.blueprints) - set(BLUEPRINT_LIMITS) == {"health"}


class TestSessionRefresh:
    def test_near_expiry_token_gets_refresh_header(self, client):
        user = {"id": "u-1", "email": "u@x.io"}
        token = make_token(sub="u-1", expires_in=60)
        with patch.object(gw_module.backend_gateway, "get_user", return_value=gateway_ok(user)):
            res = client.get("/api/events", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 200
        assert res.headers.get("X-Session-Refresh") == "true"

    def test_cookie_token_accepted(self, client):
        user = {"id": "u-1"}
        client.set_cookie("sb-access-token", make_token(sub="u-1"))
        with patch.object(gw_module.backend_gateway, "get_user", return_value=gateway_ok(user)):
            res = client.get("/api/auth/me")
        assert res.status_code == 200
        assert res.get_json()["user"]["id"] == "u-1"


class TestGatewayRequests:
    def test_headers_and_error_message(self, app):
        class FakeResponse:
            ok = False
            status_code = 400
            content = b'{"error_description": "invalid grant"}'

            def json(self):
                return {"error_description": "invalid grant"}

        class FakeSession:
            def __init__(self):
                self.calls = []

            def request(self, method, url, **kwargs):
                self.calls.append((method, url, kwargs))
                return FakeResponse()

        session = FakeSession()
        gateway = BackendGateway(session, base_url="https://b.test", anon_key="anon")
        result = gateway.exchange_code_for_session("code-1")

        assert result.ok is False
        assert result.status_code == 400
        assert result.error == "invalid grant"
        method, url, kwargs = session.calls[0]
        assert (method, url) == ("POST", "https://b.test/auth/v1/token")
        assert kwargs["headers"]["apikey"] == "anon"
        assert kwargs["json"] == {"auth_code": "code-1"}
        assert kwargs["params"] == {"grant_type": "pkce"}

    def test_public_url_quotes_path(self, app):
        gateway = BackendGateway(base_url="https://b.test", anon_key="anon")
        assert gateway.public_url("documents", "expenses/1/a b.pdf") == \
            "https://b.test/storage/v1/object/public/documents/expenses/1/a%20b.pdf"
