import pytest

from conftest import auth
from crud.asset_crud import create_asset
from crud.delivery_crud import create_delivery


@pytest.fixture
def asset(db, users, project, system_folders):
    return create_asset(
        db,
        key=f"assets/{project.id}/1700000000000-logo.png",
        filename="logo.png",
        content_type="image/png",
        size_bytes=2048,
        type="IMAGE",
        project_id=project.id,
        folder_id=system_folders["ASSETS"]["id"],
        uploaded_by_id=users["client"].id,
    )


@pytest.fixture
def delivery(db, users, project, system_folders):
    return create_delivery(
        db,
        key=f"deliveries/{project.id}/1700000000000-final.mp4",
        filename="final.mp4",
        content_type="video/mp4",
        size_bytes=4096,
        project_id=project.id,
        folder_id=system_folders["DELIVERABLES"]["id"],
        uploaded_by_id=users["staff"].id,
    )


def test_list_assets_by_folder(client, project, asset, system_folders):
    resp = client.get(
        f"/projects/{project.id}/assets",
        params={"folderId": system_folders["ASSETS"]["id"]},
        headers=auth("client"),
    )
    assert resp.status_code == 200
    assert [a["id"] for a in resp.json()] == [asset.id]

    resp = client.get(
        f"/projects/{project.id}/assets",
        params={"folderId": system_folders["DELIVERABLES"]["id"]},
        headers=auth("client"),
    )
    assert resp.json() == []


def test_asset_cannot_move_to_project_folder(client, project, asset):
    folder = client.post(f"/projects/{project.id}/folders/", json={"name": "Edits"}, headers=auth("staff")).json()
    resp = client.patch(f"/assets/{asset.id}", json={"folderId": folder["id"]}, headers=auth("client"))
    assert resp.status_code == 400


def test_asset_move_to_root(client, asset):
    resp = client.patch(f"/assets/{asset.id}", json={"folderId": None}, headers=auth("client"))
    assert resp.status_code == 200
    assert resp.json()["folderId"] is None


def test_delivery_moves_into_project_folder(client, project, delivery):
    folder = client.post(f"/projects/{project.id}/folders/", json={"name": "Cuts"}, headers=auth("staff")).json()
    resp = client.patch(f"/deliveries/{delivery.id}", json={"folderId": folder["id"]}, headers=auth("staff"))
    assert resp.status_code == 200
    assert resp.json()["folderId"] == folder["id"]


def test_client_cannot_move_delivery(client, delivery):
    resp = client.patch(f"/deliveries/{delivery.id}", json={"folderId": None}, headers=auth("client"))
    assert resp.status_code == 403


def test_delete_asset_removes_object(client, store, asset):
    assert client.delete(f"/assets/{asset.id}", headers=auth("other_client")).status_code == 403

    resp = client.delete(f"/assets/{asset.id}", headers=auth("client"))
    assert resp.status_code == 200
    assert store.deleted == [asset.key]
    assert client.delete(f"/assets/{asset.id}", headers=auth("client")).status_code == 404


def test_download_redirects_to_presigned_url(client, store, delivery):
    resp = client.get(f"/deliveries/{delivery.id}/download", headers=auth("client"), follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"].startswith(f"https://storage.test/test-bucket/{delivery.key}")

    resp = client.get(f"/deliveries/{delivery.id}/download", headers=auth("other_client"), follow_redirects=False)
    assert resp.status_code == 403
