import uuid
from sqlalchemy import Column, String, BigInteger, ForeignKey, Index
from models.base import Base, TimestampMixin

class Delivery(Base, TimestampMixin):
    __tablename__ = "deliveries"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    key = Column(String(512), nullable=False, unique=True)
    filename = Column(String(512), nullable=False)
    content_type = Column(String(255), nullable=False)
    size_bytes = Column(BigInteger, nullable=False)
    project_id = Column(String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    folder_id = Column(String(64), ForeignKey("folders.id", ondelete="SET NULL"), nullable=True)
    uploaded_by_id = Column(String(64), ForeignKey("user.id", ondelete="RESTRICT"), nullable=False)

Index("idx_deliveries_project_folder", Delivery.project_id, Delivery.folder_id)
