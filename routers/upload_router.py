from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from core.auth import get_current_user, require_role
from core.database import get_db
from crud.project_crud import require_project
from models.enums import Role, UploadKind
from schemas.upload_schema import (
    RelayResponse,
    SweepResponse,
    UploadAbortRequest,
    UploadCompleteRequest,
    UploadCompleteResponse,
    UploadInitRequest,
    UploadInitResponse,
)
from services.object_store import get_object_store
from services.relay import relay_part
from services.session_sweeper import sweep_expired_sessions
from services.upload_service import abort_upload, complete_upload, init_upload


router = APIRouter(tags=["Upload"])


@router.post("/projects/{project_id}/assets", response_model=UploadInitResponse)
def init_asset_upload(
    project_id: str,
    body: UploadInitRequest,
    request: Request,
    db: Session = Depends(get_db),
    store = Depends(get_object_store),
    current_user = Depends(get_current_user),
):
    """Open a multipart upload for an asset and return the part plan."""
    proj = require_project(db, project_id)
    return init_upload(db, store, current_user, proj, UploadKind.ASSET, body, str(request.base_url))


@router.post("/projects/{project_id}/assets/complete", response_model=UploadCompleteResponse)
def complete_asset_upload(
    project_id: str,
    body: UploadCompleteRequest,
    db: Session = Depends(get_db),
    store = Depends(get_object_store),
    current_user = Depends(get_current_user),
):
    proj = require_project(db, project_id)
    return complete_upload(db, store, current_user, proj, UploadKind.ASSET, body)


@router.post("/projects/{project_id}/deliveries", response_model=UploadInitResponse)
def init_delivery_upload(
    project_id: str,
    body: UploadInitRequest,
    request: Request,
    db: Session = Depends(get_db),
    store = Depends(get_object_store),
    current_user = Depends(get_current_user),
):
    """Open a multipart upload for a delivery (staff and admins only)."""
    proj = require_project(db, project_id)
    return init_upload(db, store, current_user, proj, UploadKind.DELIVERY, body, str(request.base_url))


@router.post("/projects/{project_id}/deliveries/complete", response_model=UploadCompleteResponse)
def complete_delivery_upload(
    project_id: str,
    body: UploadCompleteRequest,
    db: Session = Depends(get_db),
    store = Depends(get_object_store),
    current_user = Depends(get_current_user),
):
    """Finalize the delivery; the record and the project's COMPLETED status commit together."""
    proj = require_project(db, project_id)
    return complete_upload(db, store, current_user, proj, UploadKind.DELIVERY, body)


@router.post("/projects/{project_id}/uploads/abort")
def abort(
    project_id: str,
    body: UploadAbortRequest,
    db: Session = Depends(get_db),
    store = Depends(get_object_store),
    current_user = Depends(get_current_user),
):
    proj = require_project(db, project_id)
    return abort_upload(db, store, current_user, proj, body)


@router.put("/upload-relay", response_model=RelayResponse)
async def upload_relay(
    request: Request,
    url: str | None = Query(None),
    current_user = Depends(get_current_user),
):
    """
    Forward one part's raw bytes to its presigned URL and return the ETag.
    The blocking upstream PUT runs in the threadpool.
    """
    data = await request.body()
    content_type = request.headers.get("content-type")
    etag = await run_in_threadpool(relay_part, url, data, content_type)
    return RelayResponse(etag=etag)


@router.post("/uploads/sweep", response_model=SweepResponse)
def sweep(
    db: Session = Depends(get_db),
    store = Depends(get_object_store),
    current_user = Depends(require_role(Role.ADMIN)),
):
    return sweep_expired_sessions(db, store)
