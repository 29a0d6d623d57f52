from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from core.auth import get_current_user
from core.config import settings
from core.database import get_db
from core.errors import NotFoundError
from core.permissions import Operation, authorize
from crud.asset_crud import delete_asset, get_asset, list_assets, move_asset
from crud.folder_crud import get_folder
from crud.project_crud import require_project
from schemas.asset_schema import AssetResponse, FileMove
from services.object_store import get_object_store


router = APIRouter(tags=["Assets"])


def _require_asset(db: Session, asset_id: str):
    asset = get_asset(db, asset_id)
    if not asset:
        raise NotFoundError("Asset not found")
    return asset


@router.get("/projects/{project_id}/assets", response_model=list[AssetResponse])
def list_all(
    project_id: str,
    folder_id: str | None = Query(None, alias="folderId"),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    proj = require_project(db, project_id)
    authorize(current_user, proj, Operation.PROJECT_READ)
    return list_assets(db, project_id, folder_id=folder_id, skip=skip, limit=limit)


@router.patch("/assets/{asset_id}", response_model=AssetResponse)
def move(asset_id: str, payload: FileMove, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    asset = _require_asset(db, asset_id)
    proj = require_project(db, asset.project_id)
    authorize(current_user, proj, Operation.ASSET_MOVE, uploaded_by_id=asset.uploaded_by_id)
    if payload.folder_id:
        folder = get_folder(db, proj.id, payload.folder_id)
        if not folder:
            raise NotFoundError("Target folder not found or invalid")
        authorize(current_user, proj, Operation.ASSET_MOVE, folder_type=folder.type, uploaded_by_id=asset.uploaded_by_id)
    return move_asset(db, asset, payload.folder_id or None)


@router.delete("/assets/{asset_id}")
def delete(
    asset_id: str,
    db: Session = Depends(get_db),
    store = Depends(get_object_store),
    current_user = Depends(get_current_user),
):
    asset = _require_asset(db, asset_id)
    proj = require_project(db, asset.project_id)
    authorize(current_user, proj, Operation.ASSET_DELETE, uploaded_by_id=asset.uploaded_by_id)
    store.delete_object(asset.key)
    delete_asset(db, asset)
    return {"ok": True}


@router.get("/assets/{asset_id}/download")
def download(
    asset_id: str,
    db: Session = Depends(get_db),
    store = Depends(get_object_store),
    current_user = Depends(get_current_user),
):
    asset = _require_asset(db, asset_id)
    proj = require_project(db, asset.project_id)
    authorize(current_user, proj, Operation.PROJECT_READ)
    url = store.presign_download(asset.key, asset.filename, settings.DOWNLOAD_URL_EXPIRES)
    return RedirectResponse(url=url, status_code=302)
