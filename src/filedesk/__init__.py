"""filedesk public API."""

from __future__ import annotations

from filedesk.api import StorageApiClient, rename_item
from filedesk.config import ActivationConstraint, ClientConfig, DragConfig, SelectionConfig
from filedesk.dnd import (
    DialogDuplicateResolver,
    DragDescriptor,
    DragOrchestrator,
    DragPhase,
    DragState,
    Droppable,
    DroppableRegistry,
    DuplicateResolution,
    MoveBatchRunner,
    Point,
    Rect,
)
from filedesk.errors import (
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
from filedesk.events import ClickEvent, EventSource, KeyEvent, PointerEvent
from filedesk.models import Document, FileSystemItem, Folder, FolderColor, MoveBatchResult, MoveOutcome
from filedesk.selection import KeyboardShortcuts, SelectionEngine, SelectionState
from filedesk.sorting import SortPreferences, sort_items
from filedesk.store import TreeSnapshot, TreeStore

__all__ = [
    # Core
    "TreeStore",
    "TreeSnapshot",
    "SelectionEngine",
    "SelectionState",
    "KeyboardShortcuts",
    "DragOrchestrator",
    "MoveBatchRunner",
    "StorageApiClient",
    "rename_item",
    # Models
    "Folder",
    "Document",
    "FileSystemItem",
    "FolderColor",
    "MoveOutcome",
    "MoveBatchResult",
    "SortPreferences",
    "sort_items",
    # Drag and drop
    "DragPhase",
    "DragState",
    "DragDescriptor",
    "Droppable",
    "DroppableRegistry",
    "DuplicateResolution",
    "DialogDuplicateResolver",
    "Point",
    "Rect",
    # Events
    "ClickEvent",
    "KeyEvent",
    "PointerEvent",
    "EventSource",
    # Config
    "SelectionConfig",
    "DragConfig",
    "ActivationConstraint",
    "ClientConfig",
    # Errors
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
