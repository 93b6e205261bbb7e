import jwt

import config
from database import find_document, delete_document
from security import create_access_token
from tests.conftest import bearer, signup


def test_signup_returns_user_and_token(client):
    resp = client.post("/users/signup", json={"name": "A", "email": "a@x.com", "password": "pw", "phone": "1"})
    assert resp.status_code == 201
    data = resp.json()
    assert data["token"]
    assert data["user"]["email"] == "a@x.com"
    assert data["user"]["role"] == "user"
    assert "password_hash" not in data["user"]


def test_password_is_not_stored_in_plaintext(client, db):
    signup(client, "A", "a@x.com", password="secret-pw")
    stored = find_document("user", {"email": "a@x.com"})
    assert stored["password_hash"] != "secret-pw"
    assert "secret-pw" not in stored["password_hash"]


def test_signin_with_original_password(client):
    created = signup(client, "A", "a@x.com", password="pw")
    resp = client.post("/users/signin", json={"email": "a@x.com", "password": "pw"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["user"]["_id"] == created["user"]["_id"]
    assert data["token"].count(".") == created["token"].count(".") == 2


def test_signin_wrong_password(client):
    signup(client, "A", "a@x.com", password="pw")
    resp = client.post("/users/signin", json={"email": "a@x.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json() == {"message": "Invalid credentials"}


def test_signin_unknown_email(client):
    resp = client.post("/users/signin", json={"email": "ghost@x.com", "password": "pw"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"


def test_signup_cannot_choose_role(client):
    resp = client.post("/users/signup", json={"name": "A", "email": "a@x.com", "password": "pw", "role": "admin"})
    assert resp.status_code == 201
    assert resp.json()["user"]["role"] == "user"


def test_duplicate_email_rejected(client):
    signup(client, "A", "a@x.com")
    resp = client.post("/users/signup", json={"name": "B", "email": "a@x.com", "password": "pw2"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email already registered"


def test_signup_missing_fields(client):
    resp = client.post("/users/signup", json={"name": "A", "email": "a@x.com"})
    assert resp.status_code == 400
    assert "password" in resp.json()["message"]

    resp = client.post("/users/signup", json={"name": "  ", "email": "b@x.com", "password": "pw"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "name is required"


def test_signup_invalid_email(client):
    resp = client.post("/users/signup", json={"name": "A", "email": "not-an-email", "password": "pw"})
    assert resp.status_code == 400
    assert "email" in resp.json()["message"]


def test_profile_requires_token(client):
    resp = client.get("/users/profile")
    assert resp.status_code == 401
    assert resp.json() == {"message": "Not authenticated"}


def test_profile_rejects_bad_tokens(client):
    assert client.get("/users/profile", headers=bearer("garbage")).status_code == 401
    assert client.get("/users/profile", headers={"Authorization": "Token abc"}).status_code == 401

    forged = jwt.encode({"sub": "64b7f0c2a1b2c3d4e5f60718"}, "a-completely-different-signing-secret-value", algorithm="HS256")
    resp = client.get("/users/profile", headers=bearer(forged))
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid token"


def test_profile_returns_actor_without_secrets(client, user_headers):
    resp = client.get("/users/profile", headers=user_headers)
    assert resp.status_code == 200
    profile = resp.json()
    assert profile["email"] == "u@x.com"
    assert "password_hash" not in profile


def test_token_for_removed_user_is_rejected(client):
    created = signup(client, "A", "a@x.com")
    delete_document("user", created["user"]["_id"])
    resp = client.get("/users/profile", headers=bearer(created["token"]))
    assert resp.status_code == 401
    assert resp.json()["message"] == "User not found"


def test_tokens_do_not_expire_by_default(client, monkeypatch):
    monkeypatch.setattr(config, "JWT_EXPIRES_MINUTES", None)
    claims = jwt.decode(create_access_token("abc"), config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    assert claims["sub"] == "abc"
    assert "exp" not in claims


def test_expired_token_is_rejected(client, monkeypatch):
    created = signup(client, "A", "a@x.com")
    monkeypatch.setattr(config, "JWT_EXPIRES_MINUTES", -1)
    token = create_access_token(created["user"]["_id"])
    resp = client.get("/users/profile", headers=bearer(token))
    assert resp.status_code == 401
    assert resp.json()["message"] == "Token expired"


def test_update_profile(client, user_headers):
    resp = client.put("/users/profile", json={"name": "New Name", "phone": "999"}, headers=user_headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == "New Name"
    assert resp.json()["phone"] == "999"
    assert client.get("/users/profile", headers=user_headers).json()["name"] == "New Name"


def test_profile_name_is_trimmed_like_signup(client):
    created = signup(client, "  Padded  ", "p@x.com")
    assert created["user"]["name"] == "Padded"
    headers = bearer(created["token"])

    resp = client.put("/users/profile", json={"name": "  Renamed  "}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Renamed"

    resp = client.put("/users/profile", json={"name": "   "}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "name is required"
