from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from core.database import get_db
from core.auth import get_current_user, require_role
from core.errors import ValidationError
from core.permissions import Operation, authorize
from crud.project_crud import create_project, require_project
from crud.user_crud import get_user, list_users_by_ids
from models.enums import Role
from schemas.project_schema import ProjectCreate, ProjectResponse


router = APIRouter(prefix="/projects", tags=["Projects"])


@router.post("/", response_model=ProjectResponse, status_code=201)
def create(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    current_user = Depends(require_role(Role.ADMIN, Role.STAFF)),
):
    """
    Create a project for a client. The ASSETS and DELIVERABLES system folders
    are provisioned together with the project.
    """
    client = get_user(db, payload.client_id)
    if not client or client.role != Role.CLIENT.value:
        raise ValidationError("clientId must reference a client user")

    staff_ids = list(dict.fromkeys(payload.staff_ids))
    found = {u.id for u in list_users_by_ids(db, staff_ids, role=Role.STAFF)} if staff_ids else set()
    missing = [sid for sid in staff_ids if sid not in found]
    if missing:
        raise ValidationError("staffIds must reference staff users", missing=missing)

    return create_project(
        db,
        client_id=client.id,
        created_by_id=current_user.id,
        title=payload.title,
        description=payload.description,
        staff_ids=staff_ids,
    )


@router.get("/{project_id}", response_model=ProjectResponse)
def read_one(project_id: str, db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    proj = require_project(db, project_id)
    authorize(current_user, proj, Operation.PROJECT_READ)
    return proj
