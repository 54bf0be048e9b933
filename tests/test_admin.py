# File: tests/test_admin.py

from datetime import timedelta

from app.core.config import settings
from app.core.roles import Group
from app.core.security import verify_password
from app.models.analysis import ProjectAnalysis
from app.models.base import utcnow
from app.models.domain import Domain
from app.models.llm_key import LlmApiKey, LLMProvider
from app.models.project import Project
from app.models.user import User
from app.services.llm_keys import get_openai_key
from app.services.stats_service import build_admin_stats

API = "/api/v1/admin"


def test_admin_routes_need_the_admin_group(client, user, auth_headers):
    headers = auth_headers(user)
    assert client.get(f"{API}/users", headers=headers).status_code == 403
    assert client.get(f"{API}/llm-keys", headers=headers).status_code == 403
    assert client.get(f"{API}/stats", headers=headers).status_code == 403


# ---------- Users ----------

def test_search_users(client, admin, make_user, auth_headers):
    make_user("alice@example.com", name="Alice")
    make_user("bob@example.com", name="Bob", group=Group.AGENCE)

    resp = client.get(f"{API}/users", params={"q": "ali"}, headers=auth_headers(admin))
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 1
    assert body["items"][0]["email"] == "alice@example.com"
    assert body["pageSize"] == 10

    resp = client.get(f"{API}/users", params={"group": "AGENCE"}, headers=auth_headers(admin))
    assert [u["email"] for u in resp.json()["items"]] == ["bob@example.com"]


def test_users_paging_and_sorting(client, admin, make_user, auth_headers):
    for index in range(6):
        make_user(f"user{index}@example.com")

    resp = client.get(
        f"{API}/users",
        params={"sort": "email", "order": "asc", "pageSize": 1, "page": 2},
        headers=auth_headers(admin),
    )
    body = resp.json()
    assert body["total"] == 7
    assert body["pageSize"] == 5
    assert [u["email"] for u in body["items"]] == [f"user{i}@example.com" for i in range(4, 6)]

    resp = client.get(
        f"{API}/users",
        params={"sort": "name", "order": "sideways", "pageSize": 500},
        headers=auth_headers(admin),
    )
    body = resp.json()
    assert body["sort"] == "createdAt"
    assert body["order"] == "desc"
    assert body["pageSize"] == 50


def test_create_user(client, db, admin, auth_headers):
    resp = client.post(
        f"{API}/users",
        json={"email": "New@Example.com", "password": "longpass", "name": "New", "group": "AGENCE"},
        headers=auth_headers(admin),
    )
    assert resp.status_code == 201
    assert resp.json()["email"] == "new@example.com"
    assert resp.json()["group"] == "AGENCE"

    created = db.get(User, resp.json()["id"])
    assert verify_password("longpass", created.password_hash)


def test_create_user_defaults_unknown_group(client, admin, auth_headers):
    resp = client.post(
        f"{API}/users",
        json={"email": "new@example.com", "password": "longpass", "group": "ROOT"},
        headers=auth_headers(admin),
    )
    assert resp.json()["group"] == "UTILISATEUR"


def test_create_user_validation(client, admin, user, auth_headers):
    headers = auth_headers(admin)
    assert client.post(f"{API}/users", json={"email": "x@example.com"}, headers=headers).status_code == 400
    resp = client.post(
        f"{API}/users",
        json={"email": "x@example.com", "password": "short"},
        headers=headers,
    )
    assert resp.status_code == 400
    resp = client.post(
        f"{API}/users",
        json={"email": "OWNER@example.com", "password": "longpass"},
        headers=headers,
    )
    assert resp.status_code == 409


def test_create_user_rejects_malformed_email(client, admin, auth_headers):
    resp = client.post(
        f"{API}/users",
        json={"email": "not-an-email", "password": "longpass"},
        headers=auth_headers(admin),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid email"


def test_update_user(client, db, admin, user, auth_headers):
    headers = auth_headers(admin)
    resp = client.patch(
        f"{API}/users/{user.id}",
        json={"password": "newpassword", "group": "AGENCE"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["group"] == "AGENCE"
    db.refresh(user)
    assert verify_password("newpassword", user.password_hash)

    assert client.patch(f"{API}/users/{user.id}", json={"group": "ROOT"}, headers=headers).status_code == 400
    assert client.patch(f"{API}/users/{user.id}", json={"password": "abc"}, headers=headers).status_code == 400
    assert client.patch(f"{API}/users/9999", json={"group": "AGENCE"}, headers=headers).status_code == 404


def test_delete_user(client, db, admin, user, auth_headers):
    headers = auth_headers(admin)
    assert client.delete(f"{API}/users/{admin.id}", headers=headers).status_code == 400
    assert client.delete(f"{API}/users/{user.id}", headers=headers).status_code == 204
    db.expire_all()
    assert db.get(User, user.id) is None
    assert client.delete(f"{API}/users/{user.id}", headers=headers).status_code == 404


# ---------- Provider keys ----------

def test_store_and_list_llm_keys(client, db, admin, auth_headers):
    headers = auth_headers(admin)
    resp = client.post(
        f"{API}/llm-keys",
        json={"provider": "openai", "apiKey": "sk-live-12345678"},
        headers=headers,
    )
    assert resp.status_code == 201
    assert resp.json()["provider"] == "OPENAI"
    assert resp.json()["last4"] == "5678"
    assert "apiKey" not in resp.json()

    client.post(f"{API}/llm-keys", json={"provider": "OPENAI", "apiKey": "sk-live-abcdwxyz"}, headers=headers)
    listed = client.get(f"{API}/llm-keys", headers=headers).json()
    assert len(listed) == 1
    assert listed[0]["last4"] == "wxyz"

    stored = db.query(LlmApiKey).one()
    assert "sk-live" not in stored.key_ciphertext
    assert stored.created_by_id == admin.id
    assert get_openai_key(db) == "sk-live-abcdwxyz"


def test_llm_key_validation(client, admin, auth_headers):
    headers = auth_headers(admin)
    assert client.post(f"{API}/llm-keys", json={"provider": "OPENAI"}, headers=headers).status_code == 400
    resp = client.post(f"{API}/llm-keys", json={"provider": "MISTRAL", "apiKey": "k"}, headers=headers)
    assert resp.status_code == 400
    assert client.delete(f"{API}/llm-keys/mistral", headers=headers).status_code == 400


def test_llm_key_needs_encryption_key(client, admin, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "encryption_key_base64", None)
    resp = client.post(
        f"{API}/llm-keys",
        json={"provider": "OPENAI", "apiKey": "sk-live-12345678"},
        headers=auth_headers(admin),
    )
    assert resp.status_code == 500


def test_delete_llm_key(client, db, admin, openai_key, auth_headers):
    headers = auth_headers(admin)
    assert client.delete(f"{API}/llm-keys/openai", headers=headers).status_code == 204
    assert db.query(LlmApiKey).count() == 0
    assert client.delete(f"{API}/llm-keys/OPENAI", headers=headers).status_code == 204


# ---------- Dashboard ----------

def test_stats(client, db, admin, user, openai_key, auth_headers, sample_report):
    project = Project(name="Acme", owner_id=user.id)
    db.add(project)
    db.commit()
    db.add_all([
        Domain(project_id=project.id, name="Conseil", competitors='["A", "B", "C"]'),
        Domain(project_id=project.id, name="Audit", competitors="[]"),
        ProjectAnalysis(project_id=project.id, report=sample_report),
    ])
    openai_key.updated_at = utcnow() - timedelta(days=90)
    db.commit()

    resp = client.get(f"{API}/stats", headers=auth_headers(admin))
    assert resp.status_code == 200
    body = resp.json()
    assert body["totals"] == {"users": 2, "projects": 1, "domains": 2, "analyses": 1}
    assert body["analyses"]["last30Days"] == 1
    assert body["analyses"]["latest"][0]["projectName"] == "Acme"
    assert body["analyses"]["latest"][0]["summary"]["questionCount"] == 2
    assert body["domains"]["withoutCompetitors"] == 1
    assert [d["name"] for d in body["domains"]["alerts"]] == ["Audit"]
    assert body["llm"]["configured"] == 1
    assert body["llm"]["stale"][0]["provider"] == LLMProvider.OPENAI.value
    assert body["users"]["newLast30Days"] == 2


def test_stats_window(db, user):
    db.add(Project(name="Acme", owner_id=user.id))
    db.commit()
    later = utcnow() + timedelta(days=45)
    stats = build_admin_stats(db, now=later)
    assert stats["users"]["newLast30Days"] == 0
    assert stats["totals"]["projects"] == 1
