from datetime import datetime, timedelta, timezone

from conftest import auth
from crud.token_crud import create_token


def test_requires_bearer_token(client, project):
    resp = client.get(f"/projects/{project.id}")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Not authenticated"}

    resp = client.get(f"/projects/{project.id}", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid token"


def test_expired_token_rejected(client, db, users, project):
    create_token(db, users["client"].id, "stale-token", datetime.now(timezone.utc) - timedelta(minutes=1))
    resp = client.get(f"/projects/{project.id}", headers={"Authorization": "Bearer stale-token"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Token expired"


def test_staff_creates_project_with_system_folders(client, users):
    resp = client.post(
        "/projects/",
        json={
            "title": "Spring campaign",
            "clientId": users["client"].id,
            "staffIds": [users["staff"].id, users["staff"].id],
        },
        headers=auth("staff"),
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "PENDING"
    assert body["clientId"] == users["client"].id
    assert body["createdById"] == users["staff"].id
    assert body["staffIds"] == [users["staff"].id]

    folders = client.get(f"/projects/{body['id']}/folders/", headers=auth("client")).json()
    assert sorted((f["name"], f["type"]) for f in folders) == [
        ("Deliverables", "DELIVERABLES"),
        ("Shared Assets", "ASSETS"),
    ]
    assert all(f["parentId"] is None for f in folders)


def test_client_cannot_create_project(client, users):
    resp = client.post("/projects/", json={"clientId": users["client"].id}, headers=auth("client"))
    assert resp.status_code == 403


def test_create_project_validates_people(client, users):
    resp = client.post("/projects/", json={"clientId": users["staff"].id}, headers=auth("admin"))
    assert resp.status_code == 400

    resp = client.post(
        "/projects/",
        json={"clientId": users["client"].id, "staffIds": [users["client"].id]},
        headers=auth("admin"),
    )
    assert resp.status_code == 400
    assert resp.json()["missing"] == [users["client"].id]


def test_missing_body_field_is_400(client, users):
    resp = client.post("/projects/", json={}, headers=auth("admin"))
    assert resp.status_code == 400
    assert resp.json()["error"] == "Validation failed"


def test_project_visibility(client, project):
    assert client.get(f"/projects/{project.id}", headers=auth("client")).status_code == 200
    assert client.get(f"/projects/{project.id}", headers=auth("staff")).status_code == 200
    assert client.get(f"/projects/{project.id}", headers=auth("other_client")).status_code == 403
    assert client.get(f"/projects/{project.id}", headers=auth("outsider")).status_code == 403
    assert client.get("/projects/does-not-exist", headers=auth("admin")).status_code == 404
