import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from community import create_app
from community.core.runtime import CLIENT_ID_SESSION_KEY
from community.extensions import db

# Imported so create_all() sees every table.
from community.core.auth import models as auth_models  # noqa: F401
from community.domains.posts import models as post_models  # noqa: F401

DEFAULT_PASSWORD = "secret123"


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")


@pytest.fixture()
def app():
    """Per-test app on a fresh in-memory database."""
    app = create_app("testing")
    ctx = app.app_context()
    ctx.push()
    db.create_all()
    try:
        yield app
    finally:
        app.extensions["runtime_registry"].close_all()
        db.session.remove()
        db.drop_all()
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def bus(app):
    return app.extensions["event_bus"]


@pytest.fixture()
def identity(app):
    return app.extensions["identity_provider"]


@pytest.fixture()
def store(app):
    return app.extensions["post_store"]


def _sign_up(client, email="alice@example.com", password=DEFAULT_PASSWORD):
    return client.post("/signup", data={"email": email, "password": password})


@pytest.fixture()
def sign_up():
    return _sign_up


@pytest.fixture()
def runtime_for(app):
    """Look up the server-side runtime bound to a test client's session cookie."""

    def _lookup(client):
        with client.session_transaction() as sess:
            client_id = sess[CLIENT_ID_SESSION_KEY]
        return app.extensions["runtime_registry"].get(client_id)

    return _lookup


@pytest.fixture()
def auth_client(client):
    resp = _sign_up(client)
    assert resp.status_code == 302
    return client


class FakeGenerator:
    """Stands in for the Gemini client."""

    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.calls = 0

    def generate_json(self, prompt, schema):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture()
def generator():
    return FakeGenerator(payload={"title": "Morning light", "content": "<p>Open the <b>window</b>.</p>"})
