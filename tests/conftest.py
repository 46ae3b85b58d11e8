import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

import app.services.auth_service as auth_service_module
from app.db.base import Base
from app.db.session import engine
from app.main import app


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    sent = []

    def fake_send(to_email, subject, body):
        sent.append({"to": to_email, "subject": subject, "body": body})

    monkeypatch.setattr(auth_service_module, "send_email", fake_send)
    return sent


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def _token_from(outbox):
    body = outbox[-1]["body"]
    return body.split("token=", 1)[1].split()[0]


@pytest.fixture
def register(client, outbox):
    """Sign up, verify and log in; returns auth headers."""

    def _register(email="alice@example.com", password="s3cret-pass", verify=True):
        r = client.post(
            "/api/auth/signup",
            json={"first_name": "Alice", "last_name": "Doe", "email": email, "password": password},
        )
        assert r.status_code == 201, r.text
        if verify:
            r = client.get("/api/auth/verify-email", params={"token": _token_from(outbox)})
            assert r.status_code == 200, r.text
            r = client.post("/api/auth/login", json={"email": email, "password": password})
            assert r.status_code == 200, r.text
            return {"Authorization": f"Bearer {r.json()['access_token']}"}
        return None

    return _register


@pytest.fixture
def auth_headers(register):
    return register()
