"""Error taxonomy for ncbridge.

Every failure raised by the core is a BridgeError carrying a
machine-readable code and a human-readable message:

- TransportError: no HTTP response (DNS, TLS, connection, timeout)
- ProtocolError: unexpected or unparseable XML from the server
- HTTPStatusError: recognized-but-failing status (auth, not found, conflict)
- ValidationError: missing configuration or parameter
- LocalIOError: local filesystem read/write failure
- FatalPreconditionError: sync run cannot start
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


class BridgeError(Exception):
    """Base exception for all ncbridge errors."""

    category = "error"

    def __init__(
        self,
        message: str,
        code: str = "error",
        status_code: int | None = None,
        path: str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.path = path
        self.operation = operation

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code,
            "message": self.message,
            "category": self.category,
            "status_code": self.status_code,
            "path": self.path,
            "operation": self.operation,
        }


class TransportError(BridgeError):
    """Network failure before any HTTP response was received."""

    category = "transport"


class ProtocolError(BridgeError):
    """Unexpected or unparseable response body."""

    category = "protocol"


class HTTPStatusError(BridgeError):
    """Server answered with a failing status code."""

    category = "http-status"


class AuthenticationError(HTTPStatusError):
    """Credentials rejected (401/403)."""


class NotFoundError(HTTPStatusError):
    """Resource not found (404)."""


class ConflictError(HTTPStatusError):
    """Request conflicts with remote state (409), e.g. missing parent."""


class ShareError(HTTPStatusError):
    """OCS sharing API reported a failure."""


class ValidationError(BridgeError):
    """Missing configuration, invalid path or missing parameter."""

    category = "validation"


class LocalIOError(BridgeError):
    """Local filesystem read or write failure."""

    category = "io"


class FatalPreconditionError(BridgeError):
    """A sync run cannot start (missing local root, remote root unavailable)."""

    category = "fatal-precondition"


def raise_for_status(
    response: httpx.Response,
    expected: tuple[int, ...],
    code: str,
    operation: str,
    path: str | None = None,
) -> None:
    """Raise the matching HTTPStatusError unless the status is expected.

    Args:
        response: Response to check.
        expected: Status codes counted as success.
        code: Error code used for the generic failure.
        operation: Name of the WebDAV/OCS operation, for the message.
        path: Remote path the request targeted.

    Raises:
        AuthenticationError: On 401/403.
        NotFoundError: On 404.
        ConflictError: On 409.
        HTTPStatusError: On any other unexpected status.
    """
    status = response.status_code
    if status in expected:
        return

    where = f' "{path}"' if path else ""
    message = f"{operation}{where} returned HTTP {status}."
    if status in (401, 403):
        raise AuthenticationError(
            f"Authentication failed ({message})", "auth_failed", status, path, operation
        )
    if status == 404:
        raise NotFoundError(message, "not_found", status, path, operation)
    if status == 409:
        raise ConflictError(message, "conflict", status, path, operation)
    raise HTTPStatusError(message, code, status, path, operation)
