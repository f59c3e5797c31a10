"""Exception hierarchy and HTTP error mapping for filedesk."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class FileDeskError(Exception):
    """
    Base exception for filedesk.

    Attributes:
        details: Optional structured information (e.g., HTTP status, field).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class MoveRejectedError(FileDeskError):
    """Raised when a move is structurally invalid (cycle, bad target)."""


class InvalidStateError(FileDeskError):
    """Raised when a component is used in an invalid state."""


class InvalidArgumentError(FileDeskError):
    """Raised when arguments are invalid (bad update fields, HTTP 400/422)."""


class AuthError(FileDeskError):
    """Raised when the API rejects the session (HTTP 401)."""


class PermissionError(FileDeskError):
    """Raised when access to a resource is denied (HTTP 403)."""


class NotFoundError(FileDeskError):
    """Raised when a resource is not found (HTTP 404)."""


class ConflictError(FileDeskError):
    """Raised on a name collision at the destination (HTTP 409)."""

    @property
    def field(self) -> Optional[str]:
        """Field reported by the backend for the collision, usually 'name'."""
        value = self.details.get("field")
        return value if isinstance(value, str) else None


class RateLimitError(FileDeskError):
    """Raised when rate-limited (HTTP 429)."""


class NetworkError(FileDeskError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(FileDeskError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to filedesk exceptions."""

    status_code: int
    message: str | None = None
    field: str | None = None
    details: dict[str, Any] | None = None


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> FileDeskError:
    """
    Map an HTTP error to a filedesk exception.

    Policy:
        - 400/422 -> InvalidArgumentError
        - 401 -> AuthError
        - 403 -> PermissionError
        - 404 -> NotFoundError
        - 409 -> ConflictError
        - 429 -> RateLimitError
        - 5xx and anything else -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "field": info.field,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code in (400, 422):
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        return PermissionError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code == 409:
        return ConflictError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)
