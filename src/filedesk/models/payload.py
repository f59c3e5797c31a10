"""Conversion of storage API payloads into FileSystemItem records."""

from __future__ import annotations

from typing import Any, Optional

from filedesk.util.time import parse_optional_timestamp

from .items import Document, FileSystemItem, Folder, FolderColor, ItemKind


def folder_from_payload(data: dict[str, Any]) -> Folder:
    items = data.get("items")
    return Folder(
        id=_item_id(data),
        name=_str(data.get("name")),
        owner=_ref_id(data.get("owner")) or "",
        is_pinned=bool(data.get("isPinned", False)),
        created_at=parse_optional_timestamp(data.get("createdAt")),
        updated_at=parse_optional_timestamp(data.get("updatedAt")),
        deleted_at=parse_optional_timestamp(data.get("deletedAt")),
        parent=_ref_id(data.get("parent")),
        color=FolderColor.parse(data.get("color")),
        items=items if isinstance(items, int) else 0,
    )


def document_from_payload(data: dict[str, Any]) -> Document:
    size = data.get("size")
    if isinstance(size, str) and size.isdigit():
        size = int(size)

    return Document(
        id=_item_id(data),
        name=_str(data.get("name")),
        owner=_ref_id(data.get("owner")) or "",
        is_pinned=bool(data.get("isPinned", False)),
        created_at=parse_optional_timestamp(data.get("createdAt")),
        updated_at=parse_optional_timestamp(data.get("updatedAt")),
        deleted_at=parse_optional_timestamp(data.get("deletedAt")),
        # The API sends either the folder id or an embedded folder object.
        folder=_ref_id(data.get("folder")),
        extension=_str(data.get("extension")),
        size=size if isinstance(size, int) else 0,
        storage_key=_str(data.get("storageKey")),
        mime_type=_str(data.get("type")) or "application/octet-stream",
        has_preview=bool(data.get("hasPreview", False)),
    )


def item_from_payload(data: dict[str, Any]) -> FileSystemItem:
    """Dispatch on the payload's "type" / "cardType" discriminant."""
    kind = data.get("cardType") or data.get("kind")
    if kind is None:
        kind = ItemKind.FOLDER.value if data.get("type") == "folder" else ItemKind.DOCUMENT.value
    if kind == ItemKind.FOLDER.value:
        return folder_from_payload(data)
    return document_from_payload(data)


def items_from_contents(payload: dict[str, Any]) -> list[FileSystemItem]:
    """
    Parse a folder-contents payload.

    Accepts the raw API envelope ({"data": {"folderContents": {...}}}), the
    inner folderContents object, or a plain {"folders": [...], "files": [...]}.
    """
    contents: Any = payload
    data = payload.get("data")
    if isinstance(data, dict):
        contents = data.get("folderContents", data)
    elif isinstance(payload.get("folderContents"), dict):
        contents = payload["folderContents"]

    folders = contents.get("folders") or []
    files = contents.get("files") or []

    items: list[FileSystemItem] = [folder_from_payload(f) for f in folders if isinstance(f, dict)]
    items.extend(document_from_payload(f) for f in files if isinstance(f, dict))
    return items


def _item_id(data: dict[str, Any]) -> str:
    value = data.get("id", data.get("_id"))
    if not isinstance(value, str) or not value:
        raise ValueError("item payload is missing an id")
    return value


def _ref_id(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    if isinstance(value, dict):
        nested = value.get("id", value.get("_id"))
        return nested if isinstance(nested, str) and nested else None
    return None


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""
