"""Authorization policy and folder-type compatibility rules.

``authorize`` is the one place that decides whether an actor may perform an
operation on a project, and whether the folder involved has a type that the
operation accepts. Routers never compare roles or folder types themselves.
"""
import enum

from core.errors import AuthorizationError, ValidationError
from models.enums import FolderType, Role


class Operation(str, enum.Enum):
    PROJECT_READ = "PROJECT_READ"
    FOLDER_CREATE = "FOLDER_CREATE"
    FOLDER_RENAME = "FOLDER_RENAME"
    FOLDER_MOVE = "FOLDER_MOVE"
    FOLDER_DELETE = "FOLDER_DELETE"
    ASSET_UPLOAD = "ASSET_UPLOAD"
    ASSET_MOVE = "ASSET_MOVE"
    ASSET_DELETE = "ASSET_DELETE"
    DELIVERY_UPLOAD = "DELIVERY_UPLOAD"
    DELIVERY_MOVE = "DELIVERY_MOVE"
    DELIVERY_DELETE = "DELIVERY_DELETE"


_ALL_TYPES = frozenset(FolderType)

# Operation -> folder types it accepts. For uploads and file moves the type is
# the target folder's; for folder operations it is the folder being acted on.
FOLDER_TYPE_RULES: dict[Operation, frozenset] = {
    Operation.FOLDER_CREATE: frozenset({FolderType.PROJECT}),
    Operation.FOLDER_RENAME: _ALL_TYPES,
    Operation.FOLDER_MOVE: frozenset({FolderType.PROJECT}),
    Operation.FOLDER_DELETE: frozenset({FolderType.PROJECT}),
    Operation.ASSET_UPLOAD: frozenset({FolderType.ASSETS}),
    Operation.ASSET_MOVE: frozenset({FolderType.ASSETS}),
    Operation.DELIVERY_UPLOAD: frozenset({FolderType.PROJECT, FolderType.DELIVERABLES}),
    Operation.DELIVERY_MOVE: frozenset({FolderType.PROJECT, FolderType.DELIVERABLES}),
}

_FOLDER_TYPE_MESSAGES = {
    Operation.FOLDER_CREATE: "ASSETS and DELIVERABLES folders are system folders and cannot be created manually",
    Operation.FOLDER_MOVE: "System folders cannot be moved",
    Operation.FOLDER_DELETE: "System folders cannot be deleted",
    Operation.ASSET_UPLOAD: "Assets can only be uploaded to an ASSETS folder",
    Operation.ASSET_MOVE: "Assets can only be moved to an ASSETS folder",
    Operation.DELIVERY_UPLOAD: "Deliveries can only be uploaded to a PROJECT or DELIVERABLES folder",
    Operation.DELIVERY_MOVE: "Deliveries can only be moved to a PROJECT or DELIVERABLES folder",
}

# Operations a CLIENT may never perform, even on their own project
_STAFF_ONLY = frozenset({Operation.DELIVERY_UPLOAD})

# Operations where the uploader of the file is allowed regardless of membership
_UPLOADER_ALLOWED = frozenset({
    Operation.ASSET_MOVE,
    Operation.ASSET_DELETE,
    Operation.DELIVERY_MOVE,
    Operation.DELIVERY_DELETE,
})


def folder_type_table() -> dict[str, list[str]]:
    """The rules as plain JSON-able data, for client-side pre-validation."""
    return {
        op.value: sorted(t.value for t in types)
        for op, types in FOLDER_TYPE_RULES.items()
    }


def is_folder_type_allowed(operation: Operation, folder_type) -> bool:
    allowed = FOLDER_TYPE_RULES.get(operation)
    if allowed is None:
        return True
    return FolderType(folder_type) in allowed


def is_project_member(actor, project) -> bool:
    """Staff membership: assigned through the staff set, or the project's creator."""
    if actor.id in project.staff_ids:
        return True
    return project.created_by_id is not None and project.created_by_id == actor.id


def can_access(actor, project, operation: Operation, uploaded_by_id: str | None = None) -> bool:
    role = actor.role
    if role == Role.ADMIN.value:
        return True
    if operation in _UPLOADER_ALLOWED and uploaded_by_id is not None and uploaded_by_id == actor.id:
        return True
    if role == Role.STAFF.value:
        return is_project_member(actor, project)
    if role == Role.CLIENT.value:
        if operation in _STAFF_ONLY or operation in _UPLOADER_ALLOWED:
            return False
        return project.client_id == actor.id
    return False


def check_folder_type(operation: Operation, folder_type) -> None:
    if not is_folder_type_allowed(operation, folder_type):
        raise ValidationError(
            _FOLDER_TYPE_MESSAGES.get(operation, "Folder type not allowed for this operation"),
            folderType=FolderType(folder_type).value,
        )


def authorize(actor, project, operation: Operation, folder_type=None, uploaded_by_id: str | None = None):
    """Role/ownership first (403), then the folder-type table (400)."""
    if not can_access(actor, project, operation, uploaded_by_id=uploaded_by_id):
        raise AuthorizationError("Forbidden")
    if folder_type is not None:
        check_folder_type(operation, folder_type)
