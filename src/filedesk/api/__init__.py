"""Public API client exports for filedesk."""

from __future__ import annotations

from .client import StorageApiClient
from .rename import RenameApi, rename_item

__all__ = [
    "StorageApiClient",
    "RenameApi",
    "rename_item",
]
