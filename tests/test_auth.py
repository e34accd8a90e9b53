from jose import jwt

from tastebox.app.core.config import get_settings
from tastebox.app.core.security import create_access_token, hash_password, verify_password


def test_password_hash_roundtrip():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong-pass", hashed)


def test_verify_password_rejects_malformed_hash():
    assert verify_password("secret123", "not-a-bcrypt-hash") is False


def test_token_carries_user_and_seven_day_expiry():
    settings = get_settings()
    token = create_access_token("user-1", "ana@tastebox.io")
    payload = jwt.decode(token, settings.auth_secret_key, algorithms=[settings.auth_algorithm])
    assert payload["sub"] == "user-1"
    assert payload["email"] == "ana@tastebox.io"
    assert payload["exp"] - payload["iat"] == 7 * 24 * 3600


def test_register_returns_user_and_token(client):
    response = client.post(
        "/auth/register",
        json={"email": "Carla@TasteBox.io", "name": "Carla", "password": "secret123"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "carla@tastebox.io"
    assert body["user"]["name"] == "Carla"
    assert body["token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["id"] == body["user"]["id"]


def test_register_duplicate_email(client, user):
    response = client.post(
        "/auth/register",
        json={"email": "ana@tastebox.io", "name": "Ana Again", "password": "secret123"},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "User already exists with this email"


def test_register_validation_errors(client):
    response = client.post("/auth/register", json={"email": "not-an-email", "name": "A", "password": "123"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation error"
    fields = {detail["field"] for detail in body["details"]}
    assert {"body.email", "body.name", "body.password"} <= fields


def test_login_success(client, user):
    response = client.post("/auth/login", json={"email": "ana@tastebox.io", "password": "secret123"})
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["id"] == user.id
    assert body["token"]


def test_login_wrong_password(client, user):
    response = client.post("/auth/login", json={"email": "ana@tastebox.io", "password": "wrong-pass"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid credentials"}


def test_login_unknown_email(client):
    response = client.post("/auth/login", json={"email": "nobody@tastebox.io", "password": "secret123"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid credentials"
