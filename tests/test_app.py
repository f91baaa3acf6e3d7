import pytest


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "healthy"}


def test_root_redirects_to_docs(client):
    r = client.get("/", follow_redirects=False)
    assert r.status_code in (302, 307)
    assert r.headers["location"] == "/docs"


@pytest.mark.parametrize("path", [
    "/api/v1/auth/me",
    "/api/v1/dashboard/stats",
    "/api/v1/patients",
    "/api/v1/appointments",
    "/api/v1/inventory",
    "/api/v1/admin/profiles",
])
def test_routers_mounted_under_api_v1(client, path):
    # Mounted routes reject anonymous callers instead of 404
    assert client.get(path).status_code == 401


def test_login_route_validates_body(client, db_session):
    assert client.post("/api/v1/auth/login", json={}).status_code == 422


def test_unprefixed_route_not_found(client):
    assert client.get("/patients").status_code == 404
