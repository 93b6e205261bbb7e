import mongomock
import pytest
from fastapi.testclient import TestClient

import database
from database import create_document
from main import app
from schemas import User
from security import hash_password


@pytest.fixture(autouse=True)
def db(monkeypatch):
    test_db = mongomock.MongoClient()["food_ordering_test"]
    monkeypatch.setattr(database, "db", test_db)
    database.ensure_indexes()
    return test_db


@pytest.fixture
def client(db):
    return TestClient(app)


def signup(client, name, email, password="pw", phone="1"):
    resp = client.post("/users/signup", json={"name": name, "email": email, "password": password, "phone": phone})
    assert resp.status_code == 201, resp.text
    return resp.json()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_headers(client):
    return bearer(signup(client, "User U", "u@x.com")["token"])


@pytest.fixture
def other_headers(client):
    return bearer(signup(client, "User V", "v@x.com")["token"])


@pytest.fixture
def admin_headers(client):
    create_document("user", User(name="Admin", email="admin@x.com", password_hash=hash_password("password"), role="admin"))
    resp = client.post("/users/signin", json={"email": "admin@x.com", "password": "password"})
    assert resp.status_code == 200, resp.text
    return bearer(resp.json()["token"])


@pytest.fixture
def make_food(client, admin_headers):
    def _make(name="Burger", price=120, category="Fast Food", description=None):
        payload = {"name": name, "price": price, "category": category, "description": description}
        resp = client.post("/foods", json=payload, headers=admin_headers)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make
