import copy

import pytest

from billing import create_app, db
from billing.config import TestConfig
from billing.routes.auth import register_user
from billing.services.gateway import FakeGateway, set_gateway

BASE_QUOTATION = {
    "number": "Q1",
    "client": "Acme",
    "date": "2024-01-15",
    "expireDate": "2024-02-15",
    "items": [{"item": "Widget", "quantity": 2, "unitPrice": 100, "lineTotal": 200}],
    "subTotal": 200,
    "total": 200,
    "status": "Draft",
}


@pytest.fixture
def app(tmp_path):
    class _Config(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'billing-test.db'}"

    app = create_app(_Config)
    set_gateway(app, FakeGateway())
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def gateway(app):
    return app.extensions["payment_gateway"]


@pytest.fixture
def user_id(app):
    with app.app_context():
        user = register_user("tester", "Test User", "password123", "tester@example.com")
        return user.id


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client, user_id):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
    return client


@pytest.fixture
def quotation_payload():
    """Return a fresh quotation body, optionally with overrides."""

    def _make(**overrides):
        body = copy.deepcopy(BASE_QUOTATION)
        body.update(overrides)
        return body

    return _make
