"""Ordering of items for the visible-item feed."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from functools import cmp_to_key
from typing import Iterable, Literal

from filedesk.models import Document, FileSystemItem, Folder
from filedesk.util.mime import mime_category

SortBy = Literal["name", "kind", "size", "dateModified", "dateAdded"]
SortDirection = Literal["asc", "desc"]
FolderArrangement = Literal["separated", "mixed"]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class SortPreferences:
    sort_by: SortBy = "name"
    direction: SortDirection = "asc"
    folder_arrangement: FolderArrangement = "separated"


def sort_items(
    items: Iterable[FileSystemItem],
    prefs: SortPreferences = SortPreferences(),
) -> list[FileSystemItem]:
    """
    Return items ordered for display.

    Kind sorting always keeps folders first regardless of arrangement.
    """
    separated = prefs.sort_by == "kind" or prefs.folder_arrangement == "separated"

    def compare(a: FileSystemItem, b: FileSystemItem) -> int:
        if separated:
            folder_order = _folder_first(a, b)
            if folder_order:
                return folder_order
        return _compare(a, b, prefs.sort_by, prefs.direction)

    return sorted(items, key=cmp_to_key(compare))


def _compare(a: FileSystemItem, b: FileSystemItem, sort_by: str, direction: str) -> int:
    sign = 1 if direction == "asc" else -1

    if sort_by == "kind":
        folder_order = _folder_first(a, b)
        if folder_order:
            return folder_order
        if isinstance(a, Document) and isinstance(b, Document):
            by_category = _cmp(mime_category(a.mime_type), mime_category(b.mime_type))
            if by_category:
                return sign * by_category
            by_type = _cmp(a.mime_type, b.mime_type)
            if by_type:
                return sign * by_type
        return sign * _cmp_names(a, b)

    if sort_by == "size":
        return sign * _cmp(_size(a), _size(b))

    if sort_by == "dateModified":
        return sign * _cmp(a.updated_at or _EPOCH, b.updated_at or _EPOCH)

    if sort_by == "dateAdded":
        return sign * _cmp(a.created_at or _EPOCH, b.created_at or _EPOCH)

    # name
    return sign * _cmp_names(a, b)


def _folder_first(a: FileSystemItem, b: FileSystemItem) -> int:
    a_folder = isinstance(a, Folder)
    b_folder = isinstance(b, Folder)
    if a_folder and not b_folder:
        return -1
    if b_folder and not a_folder:
        return 1
    return 0


def _size(item: FileSystemItem) -> int:
    """Documents sort by bytes, folders by child count."""
    if isinstance(item, Document):
        return item.size
    return item.items


def _cmp_names(a: FileSystemItem, b: FileSystemItem) -> int:
    return _cmp(a.name.casefold(), b.name.casefold()) or _cmp(a.name, b.name)


def _cmp(a, b) -> int:
    return (a > b) - (a < b)
