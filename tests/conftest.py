import os

# Must be set before mibalance is imported: the engine and settings are module-level
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from mibalance.db import tables  # noqa: F401
from mibalance.db.database import Base, engine
from mibalance.main import app


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def register_user(client):
    def register(email="ana@mail.com", name="Ana", password="secret123"):
        response = client.post(
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return register


@pytest.fixture
def auth_headers(register_user):
    token = register_user()["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_headers(register_user):
    token = register_user(email="luis@mail.com", name="Luis")["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def category_id(client):
    def lookup(headers, name):
        categories = client.get("/api/categories", headers=headers).json()["data"]["categories"]
        return next(c["id"] for c in categories if c["name"] == name)

    return lookup
