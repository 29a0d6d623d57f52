from datetime import datetime, timezone
from sqlalchemy.orm import Session
from models.enums import UploadSessionStatus
from models.upload_session import UploadSession


def create_upload_session(db: Session, **fields):
    s = UploadSession(status=UploadSessionStatus.INITIATED.value, **fields)
    db.add(s)
    db.commit()
    db.refresh(s)
    return s


def find_upload_session(db: Session, project_id: str, key: str, upload_id: str):
    return (
        db.query(UploadSession)
        .filter(
            UploadSession.project_id == project_id,
            UploadSession.key == key,
            UploadSession.upload_id == upload_id,
        )
        .first()
    )


def list_stale_sessions(db: Session, cutoff: datetime, limit: int = 500):
    return (
        db.query(UploadSession)
        .filter(
            UploadSession.status == UploadSessionStatus.INITIATED.value,
            UploadSession.created_at < cutoff,
        )
        .order_by(UploadSession.created_at)
        .limit(limit)
        .all()
    )


def mark_session(db: Session, s: UploadSession, status: UploadSessionStatus, commit: bool = True):
    s.status = status.value
    if status == UploadSessionStatus.COMPLETED:
        s.completed_at = datetime.now(timezone.utc)
    if commit:
        db.commit()
    return s
