"""Public model exports for filedesk."""

from __future__ import annotations

from .items import (
    DERIVED_FIELDS,
    STRUCTURAL_FIELDS,
    Document,
    FileSystemItem,
    Folder,
    FolderColor,
    ItemKind,
    is_folder,
    parent_of,
    with_parent,
)
from .payload import document_from_payload, folder_from_payload, item_from_payload, items_from_contents
from .results import BatchStatus, MoveBatchResult, MoveOutcome, MoveStatus, summarize_outcomes

__all__ = [
    "ItemKind",
    "FolderColor",
    "Folder",
    "Document",
    "FileSystemItem",
    "STRUCTURAL_FIELDS",
    "DERIVED_FIELDS",
    "parent_of",
    "with_parent",
    "is_folder",
    "folder_from_payload",
    "document_from_payload",
    "item_from_payload",
    "items_from_contents",
    "MoveStatus",
    "BatchStatus",
    "MoveOutcome",
    "MoveBatchResult",
    "summarize_outcomes",
]
