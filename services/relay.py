"""Forward one upload part to a presigned object-store URL.

Browsers cannot PUT to the bucket directly (no CORS policy), so the client
sends each part here and the server replays it upstream over a pooled
keep-alive connection. Only one part is ever held in memory.
"""
import logging
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter

from core.config import settings
from core.errors import UpstreamError, UpstreamRejectedError, UpstreamTimeoutError, ValidationError

logger = logging.getLogger(__name__)

_session = None


def get_http_session() -> requests.Session:
    global _session
    if _session is None:
        s = requests.Session()
        adapter = HTTPAdapter(pool_connections=10, pool_maxsize=50)
        s.mount("https://", adapter)
        s.mount("http://", adapter)
        _session = s
    return _session


def compute_relay_timeout(size_bytes: int) -> float:
    """Seconds allowed for one part.

    Small payloads get a flat two minutes; larger ones twice the time a
    100 KiB/s link would need, never less than ten minutes.
    """
    if size_bytes < settings.RELAY_SMALL_PAYLOAD_BYTES:
        return settings.RELAY_SMALL_TIMEOUT
    estimated = size_bytes / settings.RELAY_MIN_BYTES_PER_SEC
    return max(settings.RELAY_MIN_TIMEOUT, estimated * 2)


def strip_etag(value: str | None) -> str:
    etag = value or ""
    if etag.startswith('"'):
        etag = etag[1:]
    if etag.endswith('"'):
        etag = etag[:-1]
    return etag


def _allowed_hosts() -> set[str]:
    """Hosts a part may be relayed to; subdomains (virtual-hosted buckets) match too."""
    if settings.S3_ENDPOINT_URL:
        host = urlparse(settings.S3_ENDPOINT_URL).hostname
        return {host} if host else set()
    # Plain AWS: the global and regional S3 endpoints
    hosts = {"s3.amazonaws.com"}
    if settings.S3_REGION and settings.S3_REGION != "auto":
        hosts.add(f"s3.{settings.S3_REGION}.amazonaws.com")
    return hosts


def validate_target(url: str | None) -> str:
    if not url:
        raise ValidationError("Missing upload URL")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ValidationError("Invalid upload URL")
    allowed = _allowed_hosts()
    if not any(parsed.hostname == h or parsed.hostname.endswith("." + h) for h in allowed):
        raise ValidationError("Upload URL does not point at the object store")
    return url


def relay_part(url: str, data: bytes, content_type: str | None = None, session: requests.Session | None = None) -> str:
    """PUT ``data`` to ``url`` and return the part's ETag without quotes."""
    url = validate_target(url)
    size = len(data)
    timeout = compute_relay_timeout(size)
    host = urlparse(url).hostname
    logger.info("Upload part: size=%d bytes, timeout=%ds, host=%s", size, round(timeout), host)

    http = session or get_http_session()
    try:
        resp = http.put(
            url,
            data=data,
            headers={"Content-Type": content_type or "application/octet-stream"},
            timeout=timeout,
        )
    except requests.exceptions.Timeout:
        logger.error("Upload part timeout after %ds for %d bytes", round(timeout), size)
        raise UpstreamTimeoutError(
            f"Upload timeout: File part too large or connection too slow. Tried for {round(timeout)}s",
            timeout=True,
            size=size,
        )
    except requests.exceptions.RequestException as e:
        logger.error("Upload part error: %s", e)
        code = getattr(e, "errno", None) or type(e).__name__
        raise UpstreamError(str(e) or "Upload failed", status_code=500, details=code)

    if not 200 <= resp.status_code < 300:
        logger.error("Upload part failed: %s %s", resp.status_code, resp.text[:500])
        raise UpstreamRejectedError(resp.status_code, resp.text)

    etag = strip_etag(resp.headers.get("ETag"))
    if not etag:
        raise UpstreamError("Upload failed: no ETag received", details="MissingETag")
    return etag
