"""Public drag-and-drop exports for filedesk."""

from __future__ import annotations

from .collision import (
    DEFAULT_STRATEGIES,
    Collision,
    CollisionArgs,
    CollisionStrategy,
    breadcrumb_item_priority,
    detect_collisions,
    padded_containment,
    pointer_within,
    portal_priority,
)
from .droppables import (
    BREADCRUMB_CONTENT_ID,
    BREADCRUMB_PREFIX,
    BREADCRUMB_TRIGGER_ID,
    Droppable,
    DroppableRegistry,
    breadcrumb_dropdown_id,
    is_breadcrumb_dropdown_item,
    is_breadcrumb_id,
    strip_breadcrumb_prefix,
)
from .geometry import Point, Rect
from .interfaces import (
    DialogDuplicateResolver,
    DuplicateAction,
    DuplicateDialogService,
    DuplicateResolution,
    DuplicateResolver,
    LoggingNotifier,
    MoveApi,
    Notifier,
)
from .mover import MoveBatchRunner
from .orchestrator import DragListener, DragOrchestrator
from .sensors import ActivationSensor, PointerSensor, TouchSensor, sensor_for
from .state import DragDescriptor, DragPhase, DragState

__all__ = [
    "Point",
    "Rect",
    "Droppable",
    "DroppableRegistry",
    "BREADCRUMB_PREFIX",
    "BREADCRUMB_TRIGGER_ID",
    "BREADCRUMB_CONTENT_ID",
    "breadcrumb_dropdown_id",
    "is_breadcrumb_id",
    "is_breadcrumb_dropdown_item",
    "strip_breadcrumb_prefix",
    "Collision",
    "CollisionArgs",
    "CollisionStrategy",
    "DEFAULT_STRATEGIES",
    "pointer_within",
    "portal_priority",
    "breadcrumb_item_priority",
    "padded_containment",
    "detect_collisions",
    "ActivationSensor",
    "PointerSensor",
    "TouchSensor",
    "sensor_for",
    "DragPhase",
    "DragDescriptor",
    "DragState",
    "DuplicateAction",
    "DuplicateResolution",
    "DuplicateResolver",
    "DuplicateDialogService",
    "DialogDuplicateResolver",
    "MoveApi",
    "Notifier",
    "LoggingNotifier",
    "MoveBatchRunner",
    "DragOrchestrator",
    "DragListener",
]
