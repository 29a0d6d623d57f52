from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from core.auth import get_current_user
from core.config import settings
from core.database import get_db
from core.errors import NotFoundError
from core.permissions import Operation, authorize
from crud.delivery_crud import delete_delivery, get_delivery, list_deliveries, move_delivery
from crud.folder_crud import get_folder
from crud.project_crud import require_project
from schemas.asset_schema import DeliveryResponse, FileMove
from services.object_store import get_object_store


router = APIRouter(tags=["Deliveries"])


def _require_delivery(db: Session, delivery_id: str):
    delivery = get_delivery(db, delivery_id)
    if not delivery:
        raise NotFoundError("Delivery not found")
    return delivery


@router.get("/projects/{project_id}/deliveries", response_model=list[DeliveryResponse])
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
    return list_deliveries(db, project_id, folder_id=folder_id, skip=skip, limit=limit)


@router.patch("/deliveries/{delivery_id}", response_model=DeliveryResponse)
def move(delivery_id: str, payload: FileMove, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    delivery = _require_delivery(db, delivery_id)
    proj = require_project(db, delivery.project_id)
    authorize(current_user, proj, Operation.DELIVERY_MOVE, uploaded_by_id=delivery.uploaded_by_id)
    if payload.folder_id:
        folder = get_folder(db, proj.id, payload.folder_id)
        if not folder:
            raise NotFoundError("Target folder not found or invalid")
        authorize(current_user, proj, Operation.DELIVERY_MOVE, folder_type=folder.type, uploaded_by_id=delivery.uploaded_by_id)
    return move_delivery(db, delivery, payload.folder_id or None)


@router.delete("/deliveries/{delivery_id}")
def delete(
    delivery_id: str,
    db: Session = Depends(get_db),
    store = Depends(get_object_store),
    current_user = Depends(get_current_user),
):
    delivery = _require_delivery(db, delivery_id)
    proj = require_project(db, delivery.project_id)
    authorize(current_user, proj, Operation.DELIVERY_DELETE, uploaded_by_id=delivery.uploaded_by_id)
    store.delete_object(delivery.key)
    delete_delivery(db, delivery)
    return {"ok": True}


@router.get("/deliveries/{delivery_id}/download")
def download(
    delivery_id: str,
    db: Session = Depends(get_db),
    store = Depends(get_object_store),
    current_user = Depends(get_current_user),
):
    delivery = _require_delivery(db, delivery_id)
    proj = require_project(db, delivery.project_id)
    authorize(current_user, proj, Operation.PROJECT_READ)
    url = store.presign_download(delivery.key, delivery.filename, settings.DOWNLOAD_URL_EXPIRES)
    return RedirectResponse(url=url, status_code=302)
