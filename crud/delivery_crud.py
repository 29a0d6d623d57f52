from sqlalchemy.orm import Session
from sqlalchemy import desc
from models.delivery import Delivery


def get_delivery(db: Session, delivery_id: str):
    return db.query(Delivery).filter(Delivery.id == delivery_id).first()


def list_deliveries(db: Session, project_id: str, folder_id: str | None = None, skip: int = 0, limit: int = 100):
    q = db.query(Delivery).filter(Delivery.project_id == project_id)
    if folder_id is not None:
        q = q.filter(Delivery.folder_id == folder_id)
    return q.order_by(desc(Delivery.created_at)).offset(skip).limit(limit).all()


def create_delivery(db: Session, commit: bool = True, **fields):
    delivery = Delivery(**fields)
    db.add(delivery)
    if commit:
        db.commit()
        db.refresh(delivery)
    return delivery


def move_delivery(db: Session, delivery: Delivery, folder_id: str | None):
    delivery.folder_id = folder_id
    db.commit()
    db.refresh(delivery)
    return delivery


def delete_delivery(db: Session, delivery: Delivery) -> None:
    db.delete(delivery)
    db.commit()
