"""
Test configuration.
APP_ENV must be set before the storage singleton is created so that
DBStorage picks the in-memory SQLite database.
"""
import os

os.environ["APP_ENV"] = "test"

from types import SimpleNamespace

import pytest

from api import create_app
from models import storage
from models.token import Token
from models.user import Role


@pytest.fixture
def app():
    app = create_app("test")
    storage.reload()
    with app.app_context():
        yield app
    storage.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def alice_payload():
    return {
        "firstname": "Alice",
        "lastname": "Liddell",
        "email": "alice@example.com",
        "password": "wonderland-42",
        "role": "USER",
    }


@pytest.fixture
def signed_up(client, alice_payload):
    """Register alice through the API and return the token pair."""
    resp = client.post("/api/v1/auth/signup", json=alice_payload)
    assert resp.status_code == 200
    return resp.get_json()


@pytest.fixture
def fake_user():
    return SimpleNamespace(email="bob@example.com", role=Role.USER)


@pytest.fixture
def stored_tokens():
    """Return a lookup of all stored token rows for a user email."""
    def _lookup(email):
        user = storage.find_user_by_email(email)
        session = storage.get_session()
        return session.query(Token).filter(Token.user_id == user.id).all()
    return _lookup
