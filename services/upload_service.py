"""Multipart upload session initiation, completion and abort.

The object store holds the bytes; the ``upload_sessions`` table remembers
every multipart upload this service opened so completion can be checked
against the part plan and abandoned uploads can be swept.
"""
import logging
import os
import time
from urllib.parse import quote

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import NotFoundError, PortalError, ValidationError
from core.permissions import Operation, authorize
from crud.asset_crud import create_asset
from crud.delivery_crud import create_delivery
from crud.folder_crud import get_folder
from crud.project_crud import set_project_status
from crud.upload_session_crud import create_upload_session, find_upload_session, mark_session
from models.enums import AssetType, ProjectStatus, UploadKind, UploadSessionStatus

logger = logging.getLogger(__name__)

_UPLOAD_OPERATION = {
    UploadKind.ASSET: Operation.ASSET_UPLOAD,
    UploadKind.DELIVERY: Operation.DELIVERY_UPLOAD,
}

# Used both as the object key prefix and the route segment
_SEGMENT = {
    UploadKind.ASSET: "assets",
    UploadKind.DELIVERY: "deliveries",
}

_IMAGE_EXTS = {"jpg", "jpeg", "png", "gif", "webp", "svg", "bmp", "ico"}
_AUDIO_EXTS = {"mp3", "wav", "ogg", "aac", "flac", "m4a", "wma"}
_SCRIPT_EXTS = {
    "txt", "doc", "docx", "pdf", "md", "json", "js", "ts", "jsx", "tsx",
    "html", "css", "xml", "csv",
}
_SCRIPT_MIME_MARKERS = ("text/", "application/json", "application/javascript", "application/xml")


def part_count(size_bytes: int, part_size: int) -> int:
    return -(-size_bytes // part_size)


def build_object_key(kind: UploadKind, project_id: str, folder_id: str | None, filename: str, now_ms: int | None = None) -> str:
    """``<assets|deliveries>/<project>/[folders/<folder>/]<millis>-<quoted filename>``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    folder_prefix = f"folders/{folder_id}/" if folder_id else ""
    return f"{_SEGMENT[kind]}/{project_id}/{folder_prefix}{now_ms}-{quote(filename, safe='')}"


def detect_asset_type(content_type: str | None, filename: str | None = None) -> AssetType:
    if content_type:
        if content_type.startswith("image/"):
            return AssetType.IMAGE
        if content_type.startswith("audio/"):
            return AssetType.AUDIO
        if content_type.startswith("video/"):
            return AssetType.OTHER
        if any(marker in content_type for marker in _SCRIPT_MIME_MARKERS):
            return AssetType.SCRIPT
    if filename:
        ext = os.path.splitext(filename.lower())[1].lstrip(".")
        if ext in _IMAGE_EXTS:
            return AssetType.IMAGE
        if ext in _AUDIO_EXTS:
            return AssetType.AUDIO
        if ext in _SCRIPT_EXTS:
            return AssetType.SCRIPT
    return AssetType.OTHER


def normalize_parts(parts, expected_count: int) -> list[dict]:
    """Sort parts by PartNumber and check they are exactly 1..expected_count."""
    ordered = sorted(parts, key=lambda p: p.part_number)
    numbers = [p.part_number for p in ordered]
    if len(set(numbers)) != len(numbers):
        raise ValidationError("Duplicate part numbers in completion request")
    if numbers != list(range(1, expected_count + 1)):
        raise ValidationError(
            f"Expected parts 1..{expected_count}, got {len(numbers)} part(s)",
            expectedParts=expected_count,
        )
    return [{"ETag": p.etag, "PartNumber": p.part_number} for p in ordered]


def resolve_target_folder(db: Session, actor, project, operation: Operation, folder_id: str | None):
    """Authorize the actor, then check the optional target folder's project and type."""
    authorize(actor, project, operation)
    if not folder_id:
        return None
    folder = get_folder(db, project.id, folder_id)
    if folder is None:
        raise NotFoundError(
            "Folder not found in this project",
            details=f"Folder {folder_id} not found in project {project.id}",
        )
    authorize(actor, project, operation, folder_type=folder.type)
    return folder


def init_upload(db: Session, store, actor, project, kind: UploadKind, body, base_url: str) -> dict:
    folder = resolve_target_folder(db, actor, project, _UPLOAD_OPERATION[kind], body.folder_id)
    folder_id = folder.id if folder is not None else None

    key = build_object_key(kind, project.id, folder_id, body.filename)
    upload_id = store.create_multipart_upload(key, body.content_type)

    part_size = settings.UPLOAD_PART_SIZE
    count = part_count(body.size_bytes, part_size)
    urls = [
        store.presign_upload_part(key, upload_id, number, settings.PRESIGNED_PART_EXPIRES)
        for number in range(1, count + 1)
    ]

    create_upload_session(
        db,
        upload_id=upload_id,
        key=key,
        kind=kind.value,
        project_id=project.id,
        folder_id=folder_id,
        filename=body.filename,
        content_type=body.content_type,
        size_bytes=body.size_bytes,
        part_size=part_size,
        part_count=count,
        created_by_id=actor.id,
    )
    logger.info(
        "Initiated %s upload project=%s key=%s size=%d parts=%d",
        kind.value.lower(), project.id, key, body.size_bytes, count,
    )

    base = base_url.rstrip("/")
    segment = _SEGMENT[kind]
    response = {
        "uploadId": upload_id,
        "key": key,
        "partSize": part_size,
        "presignedPartUrls": urls,
        "completeUrl": f"{base}/projects/{project.id}/{segment}/complete",
        "abortUrl": f"{base}/projects/{project.id}/uploads/abort",
        "folderId": folder_id,
    }
    if kind == UploadKind.ASSET:
        response["type"] = detect_asset_type(body.content_type, body.filename).value
    return response


def _open_session(db: Session, project, kind: UploadKind | None, key: str, upload_id: str):
    session = find_upload_session(db, project.id, key, upload_id)
    if session is None or (kind is not None and session.kind != kind.value):
        raise NotFoundError("Upload session not found")
    if session.status != UploadSessionStatus.INITIATED.value:
        raise ValidationError(f"Upload session is {session.status.lower()}", status=session.status)
    return session


def _check_matches_session(body, session) -> None:
    """Completion must describe the upload that was initiated, not a new one."""
    if body.folder_id != session.folder_id:
        raise ValidationError(
            "Completion folder does not match the upload session",
            folderId=session.folder_id,
        )
    recorded = {
        "filename": session.filename,
        "content_type": session.content_type,
        "size_bytes": session.size_bytes,
    }
    for field, value in recorded.items():
        if field in body.model_fields_set and getattr(body, field) != value:
            alias = type(body).model_fields[field].alias or field
            raise ValidationError(f"Completion {alias} does not match the upload session", field=alias)


def complete_upload(db: Session, store, actor, project, kind: UploadKind, body) -> dict:
    operation = _UPLOAD_OPERATION[kind]
    authorize(actor, project, operation)
    session = _open_session(db, project, kind, body.key, body.upload_id)
    _check_matches_session(body, session)
    # The folder may have been deleted or retyped since init
    folder = resolve_target_folder(db, actor, project, operation, session.folder_id)
    parts = normalize_parts(body.parts, session.part_count)

    location = store.complete_multipart_upload(session.key, session.upload_id, parts)

    fields = dict(
        key=session.key,
        filename=session.filename,
        content_type=session.content_type,
        size_bytes=session.size_bytes,
        project_id=project.id,
        folder_id=folder.id if folder is not None else None,
        uploaded_by_id=actor.id,
    )
    try:
        if kind == UploadKind.ASSET:
            record = create_asset(
                db,
                commit=False,
                type=detect_asset_type(session.content_type, session.filename).value,
                **fields,
            )
        else:
            record = create_delivery(db, commit=False, **fields)
            set_project_status(db, project, ProjectStatus.COMPLETED)
        mark_session(db, session, UploadSessionStatus.COMPLETED, commit=False)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Upload finalized at the store but not recorded key=%s: %s", body.key, e)
        raise PortalError("Failed to record completed upload", details=type(e).__name__)

    logger.info(
        "Completed %s upload project=%s key=%s parts=%d",
        kind.value.lower(), project.id, body.key, len(parts),
    )
    return {"ok": True, "location": location, "id": record.id}


def abort_upload(db: Session, store, actor, project, body) -> dict:
    session = _open_session(db, project, None, body.key, body.upload_id)
    authorize(actor, project, _UPLOAD_OPERATION[UploadKind(session.kind)])
    store.abort_multipart_upload(body.key, body.upload_id)
    mark_session(db, session, UploadSessionStatus.ABORTED)
    logger.info("Aborted upload project=%s key=%s", project.id, body.key)
    return {"ok": True}
