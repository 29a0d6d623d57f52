import uuid
from sqlalchemy import Column, String, Integer, ForeignKey, Index
from models.base import Base, TimestampMixin
from models.enums import FolderType

class Folder(Base, TimestampMixin):
    __tablename__ = "folders"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    type = Column(String(16), nullable=False, default=FolderType.PROJECT.value)
    parent_id = Column(String(64), ForeignKey("folders.id", ondelete="SET NULL"), nullable=True)
    # Optimistic concurrency token, bumped on every UPDATE
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}

Index("idx_folders_project_parent", Folder.project_id, Folder.parent_id)
