from sqlalchemy.orm import Session
from sqlalchemy import desc
from models.asset import Asset


def get_asset(db: Session, asset_id: str):
    return db.query(Asset).filter(Asset.id == asset_id).first()


def list_assets(db: Session, project_id: str, folder_id: str | None = None, skip: int = 0, limit: int = 100):
    q = db.query(Asset).filter(Asset.project_id == project_id)
    if folder_id is not None:
        q = q.filter(Asset.folder_id == folder_id)
    return q.order_by(desc(Asset.created_at)).offset(skip).limit(limit).all()


def create_asset(db: Session, commit: bool = True, **fields):
    asset = Asset(**fields)
    db.add(asset)
    if commit:
        db.commit()
        db.refresh(asset)
    return asset


def move_asset(db: Session, asset: Asset, folder_id: str | None):
    asset.folder_id = folder_id
    db.commit()
    db.refresh(asset)
    return asset


def delete_asset(db: Session, asset: Asset) -> None:
    db.delete(asset)
    db.commit()
