import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from models.base import Base, TimestampMixin
from models.enums import ProjectStatus

class Project(Base, TimestampMixin):
    __tablename__ = "projects"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default=ProjectStatus.PENDING.value)
    client_id = Column(String(64), ForeignKey("user.id", ondelete="RESTRICT"), nullable=False)
    created_by_id = Column(String(64), ForeignKey("user.id", ondelete="SET NULL"), nullable=True)

    staff_assignments = relationship(
        "ProjectStaffAssignment",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def staff_ids(self) -> list[str]:
        return sorted(a.staff_id for a in self.staff_assignments)


class ProjectStaffAssignment(Base):
    __tablename__ = "project_staff_assignments"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String(64), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    staff_id = Column(String(64), ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    assigned_by_id = Column(String(64), ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    assigned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (UniqueConstraint("project_id", "staff_id", name="uq_project_staff"),)

Index("idx_projects_client_id_created_at", Project.client_id, Project.created_at.desc())
