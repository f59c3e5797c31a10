"""Data model for file-system items (folders and documents)."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional, Union

from filedesk.errors import InvalidArgumentError


class ItemKind(str, Enum):
    """Discriminant of the FileSystemItem union."""

    FOLDER = "folder"
    DOCUMENT = "document"


class FolderColor(str, Enum):
    DEFAULT = "default"
    BLUE = "blue"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    PURPLE = "purple"
    ORANGE = "orange"
    MINT = "mint"
    CORAL = "coral"
    LAVENDER = "lavender"
    ROSE = "rose"
    TEAL = "teal"
    CANDY = "candy"
    OCEAN = "ocean"
    GOLD = "gold"
    EMERALD = "emerald"
    INDIGO = "indigo"
    VIOLET = "violet"
    SUNSET = "sunset"
    CYAN = "cyan"
    PINK = "pink"

    @classmethod
    def parse(cls, value: object) -> FolderColor:
        """Unknown or missing colors fall back to DEFAULT."""
        try:
            return cls(value)
        except ValueError:
            return cls.DEFAULT


@dataclass(frozen=True, slots=True, kw_only=True)
class _ItemBase:
    """
    Fields shared by every item.

    Notes:
        - deleted_at is None for active items (soft delete otherwise).
        - has_deleted_ancestor is derived by the TreeStore; do not set it
          from API payloads.
    """

    id: str
    name: str
    owner: str = ""
    is_pinned: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    has_deleted_ancestor: bool = False

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass(frozen=True, slots=True, kw_only=True)
class Folder(_ItemBase):
    """A folder; `items` is the denormalized count of live children."""

    kind: ClassVar[ItemKind] = ItemKind.FOLDER

    parent: Optional[str] = None
    color: FolderColor = FolderColor.DEFAULT
    items: int = 0


@dataclass(frozen=True, slots=True, kw_only=True)
class Document(_ItemBase):
    """A stored file."""

    kind: ClassVar[ItemKind] = ItemKind.DOCUMENT

    folder: Optional[str] = None
    extension: str = ""
    size: int = 0
    storage_key: str = ""
    mime_type: str = "application/octet-stream"
    has_preview: bool = False


FileSystemItem = Union[Folder, Document]

# Fields that encode hierarchy; only TreeStore.move_item may change them.
STRUCTURAL_FIELDS: frozenset[str] = frozenset({"id", "kind", "parent", "folder"})

# Fields the TreeStore derives from the hierarchy; never set by callers.
DERIVED_FIELDS: frozenset[str] = frozenset({"items", "has_deleted_ancestor"})


def parent_of(item: FileSystemItem) -> Optional[str]:
    """Return the parent folder id of any item (None = root)."""
    if isinstance(item, Folder):
        return item.parent
    if isinstance(item, Document):
        return item.folder
    raise InvalidArgumentError("Unsupported item variant", details={"type": type(item).__name__})


def with_parent(item: FileSystemItem, parent_id: Optional[str]) -> FileSystemItem:
    """Return a copy of item re-parented under parent_id."""
    if isinstance(item, Folder):
        return replace(item, parent=parent_id)
    if isinstance(item, Document):
        return replace(item, folder=parent_id)
    raise InvalidArgumentError("Unsupported item variant", details={"type": type(item).__name__})


def is_folder(item: Optional[FileSystemItem]) -> bool:
    return isinstance(item, Folder)
