"""
Shared pytest fixtures for the Pledge Portal test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - data_dir: Per-test DATA_DIR for the flat-file stores (autouse)
    - client: Flask test client (function-scoped)
    - auth_user / auth_headers: a signed-in user; gateway.get_user is mocked
"""

import time
from unittest.mock import patch

import jwt as pyjwt
import pytest

import portal.integrations.backend_gateway as gw_module
from portal import create_app
from portal.integrations.backend_gateway import GatewayResult
from portal.models import db as _db

TEST_USER_ID = "5b0c1c4e-7d8e-4f0a-9a34-2f1f5c7e9b10"


def make_token(sub: str = TEST_USER_ID, expires_in: int = 3600) -> str:
    """Unsigned-looking provider token; only ``exp`` and ``sub`` are read locally."""
    return pyjwt.encode({"sub": sub, "exp": int(time.time()) + expires_in}, "pledge-portal-test-signing-key-0123456789", algorithm="HS256")


def gateway_ok(data, status_code: int = 200) -> GatewayResult:
    return GatewayResult(ok=True, status_code=status_code, data=data, error=None, duration_ms=1)


def gateway_error(error: str, status_code: int = 400) -> GatewayResult:
    return GatewayResult(ok=False, status_code=status_code, data=None, error=error, duration_ms=1)


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture(autouse=True)
def data_dir(app, tmp_path):
    """Point the flat-file stores at an empty per-test directory."""
    previous = app.config["DATA_DIR"]
    app.config["DATA_DIR"] = str(tmp_path)
    yield tmp_path
    app.config["DATA_DIR"] = previous


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Auth fixtures ────────────────────────────────────────────────────────


@pytest.fixture()
def auth_user():
    return {"id": TEST_USER_ID, "email": "camille@pledge.test", "user_metadata": {}}


@pytest.fixture()
def auth_headers(auth_user):
    """Bearer headers for a live session; the provider lookup is mocked."""
    with patch.object(gw_module.backend_gateway, "get_user", return_value=gateway_ok(auth_user)):
        yield {"Authorization": f"Bearer {make_token()}"}
