"""Public error exports for filedesk."""

from __future__ import annotations

from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    FileDeskError,
    HttpErrorInfo,
    InvalidArgumentError,
    InvalidStateError,
    MoveRejectedError,
    NetworkError,
    NotFoundError,
    PermissionError,
    RateLimitError,
    map_http_error,
)

__all__ = [
    "FileDeskError",
    "MoveRejectedError",
    "InvalidStateError",
    "InvalidArgumentError",
    "AuthError",
    "PermissionError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "NetworkError",
    "ApiError",
    "HttpErrorInfo",
    "map_http_error",
]
