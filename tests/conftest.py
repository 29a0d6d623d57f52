"""Pytest configuration helpers.

Puts the project root on ``sys.path``, points settings at an in-memory
SQLite database and a fake object store, and seeds users, tokens and a
project for the API tests.
"""
import os
import sys
from datetime import datetime, timedelta, timezone

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Must be set before core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["S3_ENDPOINT_URL"] = "https://storage.test"
os.environ["S3_BUCKET"] = "test-bucket"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.database import get_db
from core.errors import UpstreamError
from crud.project_crud import create_project
from crud.token_crud import create_token
from crud.user_crud import create_user
from main import app
from models.base import Base
from models.enums import Role
from services.object_store import get_object_store


class FakeObjectStore:
    """In-memory stand-in for services.object_store.ObjectStore."""

    def __init__(self):
        self.bucket = "test-bucket"
        self.created = []
        self.completed = []
        self.aborted = []
        self.deleted = []
        self.fail_abort = False

    def create_multipart_upload(self, key, content_type):
        self.created.append((key, content_type))
        return f"upload-{len(self.created)}"

    def presign_upload_part(self, key, upload_id, part_number, expires_in):
        return f"https://storage.test/{self.bucket}/{key}?partNumber={part_number}&uploadId={upload_id}"

    def complete_multipart_upload(self, key, upload_id, parts):
        self.completed.append({"key": key, "upload_id": upload_id, "parts": parts})
        return f"https://storage.test/{self.bucket}/{key}"

    def abort_multipart_upload(self, key, upload_id):
        if self.fail_abort:
            raise UpstreamError("Failed to abort upload", details="InternalError")
        self.aborted.append((key, upload_id))

    def delete_object(self, key):
        self.deleted.append(key)

    def presign_download(self, key, filename, expires_in):
        return f"https://storage.test/{self.bucket}/{key}?download={filename}"


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store():
    return FakeObjectStore()


@pytest.fixture
def client(session_factory, store):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_object_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def users(db):
    """admin, staff (assigned), outsider (unassigned staff), client, other_client."""
    out = {
        "admin": create_user(db, "admin@portal.test", Role.ADMIN, name="Ada Admin"),
        "staff": create_user(db, "staff@portal.test", Role.STAFF, name="Sam Staff"),
        "outsider": create_user(db, "outsider@portal.test", Role.STAFF, name="Olly Outsider"),
        "client": create_user(db, "client@portal.test", Role.CLIENT, name="Cleo Client"),
        "other_client": create_user(db, "other@portal.test", Role.CLIENT, name="Otto Other"),
    }
    expires = datetime.now(timezone.utc) + timedelta(days=1)
    for name, user in out.items():
        create_token(db, user.id, f"{name}-token", expires)
    return out


def auth(name: str) -> dict:
    return {"Authorization": f"Bearer {name}-token"}


@pytest.fixture
def project(db, users):
    return create_project(
        db,
        client_id=users["client"].id,
        created_by_id=users["admin"].id,
        title="Launch video",
        staff_ids=[users["staff"].id],
    )


@pytest.fixture
def system_folders(client, project):
    """{type: folder JSON} for the two folders every project starts with."""
    resp = client.get(f"/projects/{project.id}/folders/", headers=auth("admin"))
    assert resp.status_code == 200
    return {f["type"]: f for f in resp.json()}
