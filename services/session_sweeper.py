"""Abort multipart uploads that were initiated but never completed.

Run periodically (cron, systemd timer) with::

    python -m services.session_sweeper
"""
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from core.config import settings
from core.errors import UpstreamError
from crud.upload_session_crud import list_stale_sessions, mark_session
from models.enums import UploadSessionStatus

logger = logging.getLogger(__name__)


def sweep_expired_sessions(db: Session, store, now: datetime | None = None, ttl_hours: int | None = None) -> dict:
    now = now or datetime.now(timezone.utc)
    ttl = timedelta(hours=ttl_hours if ttl_hours is not None else settings.UPLOAD_SESSION_TTL_HOURS)
    cutoff = now - ttl

    expired = 0
    failed = 0
    for s in list_stale_sessions(db, cutoff):
        try:
            store.abort_multipart_upload(s.key, s.upload_id)
        except UpstreamError as e:
            # Left INITIATED so the next sweep retries it
            failed += 1
            logger.warning("Could not abort stale upload key=%s: %s", s.key, e.message)
            continue
        mark_session(db, s, UploadSessionStatus.EXPIRED)
        expired += 1

    logger.info("Upload session sweep: expired=%d failed=%d cutoff=%s", expired, failed, cutoff.isoformat())
    return {"expired": expired, "failed": failed}


def main():
    from core.database import session_scope
    from core.logging_config import setup_logging
    from services.object_store import get_object_store

    setup_logging()
    with session_scope() as db:
        sweep_expired_sessions(db, get_object_store())


if __name__ == "__main__":
    main()
