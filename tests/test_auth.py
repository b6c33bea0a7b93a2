"""Auth API tests."""


def _register(client, email, role="citizen", **extra):
    return client.post(
        "/auth/register",
        json={"email": email, "password": "pass", "full_name": email.split("@")[0], "role": role, **extra},
    )


def test_register_and_login(client):
    r = _register(client, "cit@test.com")
    assert r.status_code == 201
    assert r.json()["role"] == "citizen"
    assert r.json()["has_push_token"] is False

    r = client.post("/auth/login", json={"email": "cit@test.com", "password": "pass"})
    assert r.status_code == 200
    token = r.json()["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "cit@test.com"


def test_duplicate_email_rejected(client):
    _register(client, "dup@test.com")
    r = _register(client, "dup@test.com")
    assert r.status_code == 400
    assert "already registered" in r.json()["detail"]


def test_cannot_self_register_as_admin(client):
    r = _register(client, "boss@test.com", role="admin")
    assert r.status_code == 422


def test_wrong_password_is_401(client):
    _register(client, "pw@test.com")
    r = client.post("/auth/login", json={"email": "pw@test.com", "password": "nope"})
    assert r.status_code == 401
    assert r.json()["code"] == "NOT_AUTHENTICATED"


def test_me_requires_token(client):
    r = client.get("/auth/me")
    assert r.status_code == 401
    assert r.headers["www-authenticate"] == "Bearer"

    r = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_update_profile_name(client):
    _register(client, "named@test.com")
    token = client.post("/auth/login", json={"email": "named@test.com", "password": "pass"}).json()["access_token"]
    r = client.put("/auth/me", headers={"Authorization": f"Bearer {token}"}, json={"full_name": "Asha Rao"})
    assert r.status_code == 200
    assert r.json()["full_name"] == "Asha Rao"
