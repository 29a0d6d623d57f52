"""Error taxonomy shared by routers and services.

Every failure leaves the API as ``{"error": message, ...extra}`` with the
status code carried by the exception class (see the handlers in main.py).
"""


class PortalError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None, **extra):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    def to_dict(self) -> dict:
        body = {"error": self.message}
        body.update({k: v for k, v in self.extra.items() if v is not None})
        return body


class AuthenticationError(PortalError):
    status_code = 401


class AuthorizationError(PortalError):
    status_code = 403


class ValidationError(PortalError):
    status_code = 400


class NotFoundError(PortalError):
    status_code = 404


class ConflictError(PortalError):
    """Folder hierarchy violations (cycles, stale concurrent moves)."""
    status_code = 400


class UpstreamError(PortalError):
    """The object store failed or rejected the request."""
    status_code = 502


class UpstreamTimeoutError(UpstreamError):
    status_code = 504


class UpstreamRejectedError(UpstreamError):
    """Non-2xx answer from a presigned URL; status and body are propagated."""

    def __init__(self, status: int, body: str):
        super().__init__(
            f"Upload failed: HTTP {status}",
            status_code=status,
            status=status,
            details=body,
        )
