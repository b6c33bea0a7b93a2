"""Location, push token and nearby volunteer API tests."""


def _register(client, email, role="volunteer"):
    client.post(
        "/auth/register",
        json={"email": email, "password": "pass", "full_name": email.split("@")[0], "role": role},
    )
    return client.post("/auth/login", json={"email": email, "password": "pass"}).json()["access_token"]


def test_set_location(client):
    token = _register(client, "loc@test.com")
    r = client.post("/location", headers={"Authorization": f"Bearer {token}"}, json={"latitude": 12.97, "longitude": 77.59})
    assert r.status_code == 200
    assert r.json()["latitude"] == 12.97
    assert r.json()["location_updated_at"] is not None


def test_location_out_of_range(client):
    token = _register(client, "badloc@test.com")
    r = client.post("/location", headers={"Authorization": f"Bearer {token}"}, json={"latitude": 95, "longitude": 0})
    assert r.status_code == 422


def test_register_and_clear_push_token(client):
    token = _register(client, "push@test.com")
    headers = {"Authorization": f"Bearer {token}"}

    r = client.put("/push-token", headers=headers, json={"push_token": "fcm-abc"})
    assert r.status_code == 200
    assert r.json() == {"has_push_token": True}
    assert client.get("/auth/me", headers=headers).json()["has_push_token"] is True

    r = client.put("/push-token", headers=headers, json={"push_token": None})
    assert r.json() == {"has_push_token": False}

    r = client.put("/push-token", headers=headers, json={"push_token": "   "})
    assert r.status_code == 400


def test_only_volunteers_register_push_tokens(client):
    token = _register(client, "citpush@test.com", role="citizen")
    r = client.put("/push-token", headers={"Authorization": f"Bearer {token}"}, json={"push_token": "x"})
    assert r.status_code == 403


def test_nearby_volunteers_within_radius_without_tokens_exposed(client):
    near = _register(client, "near@test.com")
    far = _register(client, "far@test.com")
    for token, lat in ((far, 13.02), (near, 12.971)):
        headers = {"Authorization": f"Bearer {token}"}
        client.post("/location", headers=headers, json={"latitude": lat, "longitude": 77.59})
        client.put("/push-token", headers=headers, json={"push_token": f"tok-{lat}"})

    r = client.get(
        "/volunteers/nearby",
        params={"latitude": 12.97, "longitude": 77.59, "radius_m": 5000},
        headers={"Authorization": f"Bearer {near}"},
    )
    assert r.status_code == 200
    body = r.json()
    assert [v["volunteer_name"] for v in body] == ["near"]
    assert "push_token" not in body[0]
    assert body[0]["distance_m"] < 200
