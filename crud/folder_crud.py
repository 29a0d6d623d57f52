from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified
from models.asset import Asset
from models.delivery import Delivery
from models.enums import FolderType
from models.folder import Folder
from services.folder_tree import ancestors

SYSTEM_FOLDERS = (
    ("Shared Assets", FolderType.ASSETS),
    ("Deliverables", FolderType.DELIVERABLES),
)


def get_folder(db: Session, project_id: str, folder_id: str):
    return db.query(Folder).filter(Folder.id == folder_id, Folder.project_id == project_id).first()


def list_folders(db: Session, project_id: str):
    return db.query(Folder).filter(Folder.project_id == project_id).order_by(Folder.created_at.desc()).all()


def load_folders(db: Session, project_id: str) -> dict:
    """Every folder of a project keyed by id, read in one query so parents and versions agree."""
    return {f.id: f for f in db.query(Folder).filter(Folder.project_id == project_id).all()}


def move_guard(folders: dict, new_parent: Folder) -> list:
    """The new parent and every ancestor the cycle check walked through.

    Bumping all of them at flush makes a concurrent move that rewires any link
    of that chain fail its version check instead of closing a loop.
    """
    parent_of = {fid: f.parent_id for fid, f in folders.items()}
    return [new_parent] + [folders[a] for a in ancestors(parent_of, new_parent.id) if a in folders]


def parent_snapshot(db: Session, project_id: str) -> dict:
    rows = db.query(Folder.id, Folder.parent_id).filter(Folder.project_id == project_id).all()
    return {folder_id: parent_id for folder_id, parent_id in rows}


def _count_by_folder(db: Session, model, project_id: str) -> dict:
    rows = (
        db.query(model.folder_id, func.count(model.id))
        .filter(model.project_id == project_id, model.folder_id.isnot(None))
        .group_by(model.folder_id)
        .all()
    )
    return {folder_id: count for folder_id, count in rows}


def direct_counts(db: Session, project_id: str) -> tuple[dict, dict]:
    """Per-folder (assets, deliveries) counts, not including descendants."""
    return _count_by_folder(db, Asset, project_id), _count_by_folder(db, Delivery, project_id)


def provision_system_folders(db: Session, project_id: str):
    """Add the ASSETS and DELIVERABLES folders; the caller commits."""
    folders = [Folder(project_id=project_id, name=name, type=ftype.value) for name, ftype in SYSTEM_FOLDERS]
    db.add_all(folders)
    return folders


def create_folder(db: Session, project_id: str, name: str, folder_type: FolderType, parent_id: str | None = None):
    folder = Folder(project_id=project_id, name=name, type=folder_type.value, parent_id=parent_id)
    db.add(folder)
    db.commit()
    db.refresh(folder)
    return folder


def update_folder(db: Session, folder: Folder, name: str | None = None, move: bool = False, new_parent: Folder | None = None, guard=()):
    """Rename and/or reparent.

    The folder and every folder in ``guard`` (see ``move_guard``) are
    version-checked at flush.
    """
    if name:
        folder.name = name
    if move:
        folder.parent_id = new_parent.id if new_parent is not None else None
        for held in guard:
            flag_modified(held, "name")
    db.commit()
    db.refresh(folder)
    return folder


def delete_folder(db: Session, folder: Folder) -> None:
    """Delete a folder, detaching its sub-folders and files to the project root."""
    db.query(Folder).filter(Folder.parent_id == folder.id).update(
        {Folder.parent_id: None, Folder.version: Folder.version + 1},
        synchronize_session=False,
    )
    for model in (Asset, Delivery):
        db.query(model).filter(model.folder_id == folder.id).update(
            {model.folder_id: None},
            synchronize_session=False,
        )
    db.delete(folder)
    db.commit()
