"""Client-side driver for the multipart upload pipeline.

For each file: init against the API, slice the file into ``partSize`` chunks,
PUT every chunk through ``/upload-relay`` (which forwards it to its presigned
URL and hands back the ETag), then POST the collected ETags to the
completion URL. Files and parts are processed strictly one at a time.
"""
import enum
import hashlib
import logging
import mimetypes
import os
import time
from dataclasses import dataclass, field
from typing import Callable

import requests

from core.errors import ValidationError
from core.permissions import Operation, is_folder_type_allowed
from models.enums import FolderType, UploadKind

logger = logging.getLogger(__name__)

_UPLOAD_OPERATION = {
    UploadKind.ASSET: Operation.ASSET_UPLOAD,
    UploadKind.DELIVERY: Operation.DELIVERY_UPLOAD,
}
_SEGMENT = {
    UploadKind.ASSET: "assets",
    UploadKind.DELIVERY: "deliveries",
}


class PartState(str, enum.Enum):
    PENDING = "PENDING"
    UPLOADING = "UPLOADING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class UploadFailed(Exception):
    """Carries the server's error message verbatim."""

    def __init__(self, message: str, status: int | None = None, filename: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.filename = filename


class _RetryablePartError(UploadFailed):
    pass


@dataclass
class LocalFile:
    path: str
    filename: str
    content_type: str
    size: int

    @classmethod
    def from_path(cls, path: str, content_type: str | None = None) -> "LocalFile":
        filename = os.path.basename(path)
        if content_type is None:
            content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        return cls(path=path, filename=filename, content_type=content_type, size=os.path.getsize(path))

    def fingerprint(self) -> str:
        st = os.stat(self.path)
        raw = f"{os.path.abspath(self.path)}:{self.size}:{st.st_mtime_ns}"
        return hashlib.sha1(raw.encode("utf-8")).hexdigest()


@dataclass
class PartProgress:
    number: int
    state: str = PartState.PENDING
    etag: str | None = None
    attempts: int = 0


@dataclass
class FileResult:
    filename: str
    ok: bool
    id: str | None = None
    location: str | None = None
    error: str | None = None
    parts: list[PartProgress] = field(default_factory=list)


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return resp.text or f"HTTP {resp.status_code}"


class UploadOrchestrator:
    def __init__(
        self,
        base_url: str,
        token: str,
        project_id: str,
        kind: UploadKind = UploadKind.ASSET,
        session: requests.Session | None = None,
        max_part_retries: int = 2,
        backoff_base: float = 1.0,
        progress_store=None,
        on_progress: Callable[[int], None] | None = None,
        continue_on_error: bool = False,
        timeout: float = 600,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.project_id = project_id
        self.kind = UploadKind(kind)
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})
        self.max_part_retries = max_part_retries
        self.backoff_base = backoff_base
        self.progress_store = progress_store
        self.on_progress = on_progress
        self.continue_on_error = continue_on_error
        self.timeout = timeout
        self._sleep = sleep
        self._last_progress = -1

    # progress

    def _report(self, percent: int) -> None:
        if self.on_progress is None or percent == self._last_progress:
            return
        self._last_progress = percent
        self.on_progress(percent)

    def _report_parts(self, file_index: int, total_files: int, done: int, total_parts: int) -> None:
        fraction = (file_index + done / total_parts) / total_files
        self._report(min(99, int(fraction * 100)))

    # http

    def _post(self, url: str, payload: dict) -> dict:
        try:
            resp = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise UploadFailed(f"Network error: {e}")
        if not resp.ok:
            raise UploadFailed(_error_message(resp), status=resp.status_code)
        return resp.json()

    def _init(self, f: LocalFile, folder_id: str | None) -> dict:
        payload = {"filename": f.filename, "contentType": f.content_type, "sizeBytes": f.size}
        if folder_id:
            payload["folderId"] = folder_id
        url = f"{self.base_url}/projects/{self.project_id}/{_SEGMENT[self.kind]}"
        return self._post(url, payload)

    def _relay(self, presigned_url: str, data: bytes, content_type: str) -> str:
        try:
            resp = self.session.put(
                f"{self.base_url}/upload-relay",
                params={"url": presigned_url},
                data=data,
                headers={"Content-Type": content_type},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise _RetryablePartError(f"Network error: {e}")
        if resp.status_code >= 500 or resp.status_code == 429:
            raise _RetryablePartError(_error_message(resp), status=resp.status_code)
        if not resp.ok:
            raise UploadFailed(_error_message(resp), status=resp.status_code)
        etag = (resp.json() or {}).get("etag")
        if not etag:
            raise UploadFailed("Relay response had no ETag")
        return etag

    def abort(self, init: dict) -> None:
        try:
            self._post(init["abortUrl"], {"key": init["key"], "uploadId": init["uploadId"]})
        except UploadFailed as e:
            logger.warning("Could not abort upload key=%s: %s", init.get("key"), e.message)

    # parts

    def _upload_part(self, fh, f: LocalFile, part: PartProgress, url: str, part_size: int) -> None:
        fh.seek((part.number - 1) * part_size)
        data = fh.read(part_size)
        while True:
            part.state = PartState.UPLOADING
            part.attempts += 1
            try:
                part.etag = self._relay(url, data, f.content_type)
            except _RetryablePartError as e:
                if part.attempts > self.max_part_retries:
                    part.state = PartState.FAILED
                    raise UploadFailed(e.message, status=e.status)
                delay = self.backoff_base * (2 ** (part.attempts - 1))
                logger.info(
                    "Part %d of %s failed (%s), retrying in %.1fs",
                    part.number, f.filename, e.message, delay,
                )
                self._sleep(delay)
                continue
            except UploadFailed:
                part.state = PartState.FAILED
                raise
            part.state = PartState.SUCCEEDED
            return

    def _upload_one(self, f: LocalFile, folder_id: str | None, file_index: int, total_files: int) -> FileResult:
        fingerprint = f.fingerprint() if self.progress_store is not None else None
        saved = self.progress_store.load(fingerprint) if fingerprint else None
        if saved:
            init = saved["init"]
            etags = {int(k): v for k, v in saved["etags"].items()}
            logger.info("Resuming %s upload_id=%s (%d part(s) done)", f.filename, init["uploadId"], len(etags))
        else:
            init = self._init(f, folder_id)
            etags = {}

        part_size = int(init["partSize"])
        urls = init["presignedPartUrls"]
        total_parts = -(-f.size // part_size)
        if len(urls) != total_parts:
            raise UploadFailed(
                f"Invalid response from server: expected {total_parts} part URL(s), got {len(urls)}"
            )

        parts = [PartProgress(number=n) for n in range(1, total_parts + 1)]
        for part in parts:
            if part.number in etags:
                part.etag = etags[part.number]
                part.state = PartState.SUCCEEDED

        try:
            with open(f.path, "rb") as fh:
                for part in parts:
                    if part.state == PartState.SUCCEEDED:
                        continue
                    self._upload_part(fh, f, part, urls[part.number - 1], part_size)
                    etags[part.number] = part.etag
                    if fingerprint:
                        self.progress_store.save(fingerprint, init, etags)
                    done = sum(1 for p in parts if p.state == PartState.SUCCEEDED)
                    self._report_parts(file_index, total_files, done, total_parts)

            result = self._post(init["completeUrl"], {
                "key": init["key"],
                "uploadId": init["uploadId"],
                "parts": [{"ETag": p.etag, "PartNumber": p.number} for p in parts],
                "filename": f.filename,
                "contentType": f.content_type,
                "sizeBytes": f.size,
                "folderId": init.get("folderId") or folder_id,
            })
        except UploadFailed:
            # Without a progress store the session can never be resumed
            if fingerprint is None:
                self.abort(init)
            raise

        if fingerprint:
            self.progress_store.clear(fingerprint)
        logger.info("Uploaded %s (%d part(s))", f.filename, total_parts)
        return FileResult(
            filename=f.filename,
            ok=True,
            id=result.get("id"),
            location=result.get("location"),
            parts=parts,
        )

    def check_target(self, folder_type) -> None:
        """Reject a target folder the server would refuse, before any request is made."""
        operation = _UPLOAD_OPERATION[self.kind]
        if not is_folder_type_allowed(operation, folder_type):
            noun = "Assets" if self.kind == UploadKind.ASSET else "Deliveries"
            value = FolderType(folder_type).value
            raise ValidationError(f"{noun} cannot be uploaded to a {value} folder", folderType=value)

    def upload_files(self, files, folder_id: str | None = None, folder_type=None) -> list[FileResult]:
        """
        Upload ``files`` (paths or LocalFile) in order.

        The first failure is raised as ``UploadFailed`` and the rest of the
        batch is skipped, unless ``continue_on_error`` is set, in which case
        each file's outcome is reported in the returned list.
        """
        if folder_type is not None:
            self.check_target(folder_type)
        items = [f if isinstance(f, LocalFile) else LocalFile.from_path(f) for f in files]
        self._last_progress = -1
        results = []
        for index, f in enumerate(items):
            try:
                results.append(self._upload_one(f, folder_id, index, len(items)))
            except UploadFailed as e:
                e.filename = f.filename
                logger.error("Upload of %s failed: %s", f.filename, e.message)
                if not self.continue_on_error:
                    raise
                results.append(FileResult(filename=f.filename, ok=False, error=e.message))
        # 100% means something landed; an all-failed batch stops at its last value
        if any(r.ok for r in results):
            self._report(100)
        return results
