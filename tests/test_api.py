# File: tests/test_api.py

"""
Basic smoke tests for the API.

These use FastAPI's TestClient. To run:
    pytest -q
"""


def test_health_endpoint(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_projects_require_authentication(client):
    resp = client.get("/api/v1/projects")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Not authenticated"


def test_garbage_bearer_token_is_rejected(client):
    resp = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_token_of_deleted_user_is_rejected(client, db, user, auth_headers):
    headers = auth_headers(user)
    db.delete(user)
    db.commit()
    resp = client.get("/api/v1/auth/me", headers=headers)
    assert resp.status_code == 401
