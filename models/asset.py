import uuid
from sqlalchemy import Column, String, BigInteger, ForeignKey, Index
from models.base import Base, TimestampMixin
from models.enums import AssetType

class Asset(Base, TimestampMixin):
    __tablename__ = "assets"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    key = Column(String(512), nullable=False, unique=True)
    filename = Column(String(512), nullable=False)
    content_type = Column(String(255), nullable=False)
    size_bytes = Column(BigInteger, nullable=False)
    type = Column(String(16), nullable=False, default=AssetType.OTHER.value)
    project_id = Column(String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    folder_id = Column(String(64), ForeignKey("folders.id", ondelete="SET NULL"), nullable=True)
    uploaded_by_id = Column(String(64), ForeignKey("user.id", ondelete="RESTRICT"), nullable=False)

Index("idx_assets_project_folder", Asset.project_id, Asset.folder_id)
