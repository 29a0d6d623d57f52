import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from core.auth import get_current_user
from core.database import get_db
from core.errors import ConflictError, NotFoundError
from core.permissions import Operation, authorize, check_folder_type
from crud.folder_crud import (
    create_folder,
    delete_folder,
    direct_counts,
    get_folder,
    list_folders,
    load_folders,
    move_guard,
    parent_snapshot,
    update_folder,
)
from crud.project_crud import require_project
from schemas.folder_schema import FolderCreate, FolderNode, FolderResponse, FolderUpdate
from services.folder_tree import aggregate_counts, build_tree, would_create_cycle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects/{project_id}/folders", tags=["Folders"])


def _serialize(db: Session, project_id: str, folders) -> list[dict]:
    """Attach direct and descendant-inclusive counts to each folder."""
    parent_of = parent_snapshot(db, project_id)
    assets, deliveries = direct_counts(db, project_id)
    agg_assets = aggregate_counts(parent_of, assets)
    agg_deliveries = aggregate_counts(parent_of, deliveries)
    return [
        {
            "id": f.id,
            "name": f.name,
            "type": f.type,
            "project_id": f.project_id,
            "parent_id": f.parent_id,
            "created_at": f.created_at,
            "updated_at": f.updated_at,
            "counts": {"assets": assets.get(f.id, 0), "deliveries": deliveries.get(f.id, 0)},
            "aggregate_counts": {
                "assets": agg_assets.get(f.id, 0),
                "deliveries": agg_deliveries.get(f.id, 0),
            },
        }
        for f in folders
    ]


def _require_folder(db: Session, project_id: str, folder_id: str):
    folder = get_folder(db, project_id, folder_id)
    if not folder:
        raise NotFoundError("Folder not found")
    return folder


@router.get("/", response_model=list[FolderResponse])
def list_all(project_id: str, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    proj = require_project(db, project_id)
    authorize(current_user, proj, Operation.PROJECT_READ)
    return _serialize(db, project_id, list_folders(db, project_id))


@router.get("/tree", response_model=list[FolderNode])
def read_tree(project_id: str, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    """Nested folders, ordered ASSETS, DELIVERABLES, then PROJECT folders by name."""
    proj = require_project(db, project_id)
    authorize(current_user, proj, Operation.PROJECT_READ)
    return build_tree(_serialize(db, project_id, list_folders(db, project_id)))


@router.post("/", response_model=FolderResponse, status_code=201)
def create(
    project_id: str,
    payload: FolderCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    # System folder types are refused before anything else, whatever the role
    check_folder_type(Operation.FOLDER_CREATE, payload.type)
    proj = require_project(db, project_id)
    authorize(current_user, proj, Operation.FOLDER_CREATE)
    if payload.parent_id is not None:
        _require_folder(db, project_id, payload.parent_id)
    folder = create_folder(db, project_id, payload.name, payload.type, parent_id=payload.parent_id)
    return _serialize(db, project_id, [folder])[0]


@router.patch("/{folder_id}", response_model=FolderResponse)
def update(
    project_id: str,
    folder_id: str,
    payload: FolderUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    proj = require_project(db, project_id)
    authorize(current_user, proj, Operation.FOLDER_RENAME)
    folder = _require_folder(db, project_id, folder_id)

    new_parent = None
    guard = ()
    if payload.moves:
        authorize(current_user, proj, Operation.FOLDER_MOVE, folder_type=folder.type)
        if payload.parent_id == folder.id:
            raise ConflictError("Folder cannot be its own parent")
        if payload.parent_id is not None:
            folders = load_folders(db, project_id)
            new_parent = folders.get(payload.parent_id)
            if not new_parent:
                raise NotFoundError("Parent folder not found")
            parent_of = {fid: f.parent_id for fid, f in folders.items()}
            if would_create_cycle(parent_of, folder.id, new_parent.id):
                raise ConflictError("Cannot move folder into its descendant")
            guard = move_guard(folders, new_parent)

    try:
        folder = update_folder(db, folder, name=payload.name, move=payload.moves, new_parent=new_parent, guard=guard)
    except StaleDataError:
        db.rollback()
        raise ConflictError("Folder was modified concurrently, reload and retry")

    if payload.moves:
        logger.info("Moved folder %s under %s in project %s", folder.id, folder.parent_id, project_id)
    return _serialize(db, project_id, [folder])[0]


@router.delete("/{folder_id}")
def delete(
    project_id: str,
    folder_id: str,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    proj = require_project(db, project_id)
    authorize(current_user, proj, Operation.FOLDER_DELETE)
    folder = _require_folder(db, project_id, folder_id)
    authorize(current_user, proj, Operation.FOLDER_DELETE, folder_type=folder.type)
    delete_folder(db, folder)
    logger.info("Deleted folder %s in project %s; contents moved to root", folder_id, project_id)
    return {"success": True}
