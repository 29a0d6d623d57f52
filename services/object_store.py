"""S3-compatible object store access (multipart uploads, presigning, deletes)."""
import logging
from functools import lru_cache
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError,
)

from core.config import settings
from core.errors import UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


def _translate(action: str, exc: Exception) -> UpstreamError:
    if isinstance(exc, (ConnectTimeoutError, ReadTimeoutError)):
        logger.error("Object store timeout during %s: %s", action, exc)
        return UpstreamTimeoutError(
            "Object store connection timeout. Please check the storage configuration and network connection.",
            details=str(exc),
        )
    code = None
    if isinstance(exc, ClientError):
        code = exc.response.get("Error", {}).get("Code")
    logger.error("Object store error during %s: %s", action, exc)
    return UpstreamError(f"Failed to {action}: {exc}", details=code or type(exc).__name__)


class ObjectStore:
    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket

    def create_multipart_upload(self, key: str, content_type: str) -> str:
        try:
            resp = self.client.create_multipart_upload(Bucket=self.bucket, Key=key, ContentType=content_type)
        except (ClientError, BotoCoreError) as e:
            raise _translate("initialize multipart upload", e)
        return resp["UploadId"]

    def presign_upload_part(self, key: str, upload_id: str, part_number: int, expires_in: int) -> str:
        try:
            return self.client.generate_presigned_url(
                "upload_part",
                Params={
                    "Bucket": self.bucket,
                    "Key": key,
                    "UploadId": upload_id,
                    "PartNumber": part_number,
                },
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise _translate("generate presigned URLs", e)

    def complete_multipart_upload(self, key: str, upload_id: str, parts: list[dict]) -> str | None:
        """``parts`` must already be in ascending PartNumber order."""
        try:
            resp = self.client.complete_multipart_upload(
                Bucket=self.bucket,
                Key=key,
                UploadId=upload_id,
                MultipartUpload={"Parts": parts},
            )
        except (ClientError, BotoCoreError) as e:
            raise _translate("complete upload", e)
        return resp.get("Location")

    def abort_multipart_upload(self, key: str, upload_id: str) -> None:
        try:
            self.client.abort_multipart_upload(Bucket=self.bucket, Key=key, UploadId=upload_id)
        except ClientError as e:
            # Already gone at the store; nothing left to abort
            if e.response.get("Error", {}).get("Code") == "NoSuchUpload":
                return
            raise _translate("abort upload", e)
        except BotoCoreError as e:
            raise _translate("abort upload", e)

    def delete_object(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise _translate("delete object", e)

    def presign_download(self, key: str, filename: str, expires_in: int) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": key,
                    "ResponseContentDisposition": f'attachment; filename="{quote(filename)}"',
                },
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise _translate("generate download URL", e)


def _s3_client():
    return boto3.client(
        "s3",
        endpoint_url=settings.S3_ENDPOINT_URL,
        aws_access_key_id=settings.S3_ACCESS_KEY_ID or None,
        aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY or None,
        region_name=settings.S3_REGION,
        config=Config(
            signature_version="s3v4",
            connect_timeout=30,
            read_timeout=90,
            retries={"max_attempts": 3},
        ),
    )


@lru_cache
def get_object_store() -> ObjectStore:
    """FastAPI dependency; one client per process."""
    if not settings.S3_BUCKET:
        raise UpstreamError("Object store bucket not configured", status_code=500)
    return ObjectStore(_s3_client(), settings.S3_BUCKET)
