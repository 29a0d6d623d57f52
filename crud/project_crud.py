from sqlalchemy.orm import Session
from core.errors import NotFoundError
from models.enums import ProjectStatus
from models.project import Project, ProjectStaffAssignment
from crud.folder_crud import provision_system_folders


def get_project(db: Session, project_id: str):
    return db.query(Project).filter(Project.id == project_id).first()


def create_project(
    db: Session,
    client_id: str,
    created_by_id: str,
    title: str | None = None,
    description: str | None = None,
    staff_ids=(),
):
    """Create the project, its staff assignments and its system folders in one commit."""
    proj = Project(
        title=title,
        description=description,
        client_id=client_id,
        created_by_id=created_by_id,
        status=ProjectStatus.PENDING.value,
    )
    db.add(proj)
    db.flush()
    for staff_id in dict.fromkeys(staff_ids):
        proj.staff_assignments.append(
            ProjectStaffAssignment(project_id=proj.id, staff_id=staff_id, assigned_by_id=created_by_id)
        )
    provision_system_folders(db, proj.id)
    db.commit()
    db.refresh(proj)
    return proj


def set_project_status(db: Session, proj: Project, status: ProjectStatus):
    """Stage a status change; the caller commits."""
    proj.status = status.value
    return proj


def require_project(db: Session, project_id: str):
    proj = get_project(db, project_id)
    if not proj:
        raise NotFoundError("Project not found")
    return proj
