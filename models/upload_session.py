import uuid
from sqlalchemy import Column, String, BigInteger, Integer, DateTime, ForeignKey, Index
from models.base import Base, TimestampMixin
from models.enums import UploadSessionStatus

class UploadSession(Base, TimestampMixin):
    """Application-side record of a multipart upload open at the object store."""
    __tablename__ = "upload_sessions"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    upload_id = Column(String(1024), nullable=False)
    key = Column(String(512), nullable=False)
    kind = Column(String(16), nullable=False)
    project_id = Column(String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    # Target folder as of init; not a foreign key, it outlives a deleted folder
    folder_id = Column(String(64), nullable=True)
    filename = Column(String(512), nullable=False)
    content_type = Column(String(255), nullable=False)
    size_bytes = Column(BigInteger, nullable=False)
    part_size = Column(Integer, nullable=False)
    part_count = Column(Integer, nullable=False)
    status = Column(String(16), nullable=False, default=UploadSessionStatus.INITIATED.value)
    created_by_id = Column(String(64), ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

Index("idx_upload_sessions_status_created_at", UploadSession.status, UploadSession.created_at)
Index("idx_upload_sessions_key", UploadSession.key)
