"""Drag session state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional

from filedesk.models import FileSystemItem

from .geometry import Point

DragVariant = Literal["card", "row"]


class DragPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    ENDED = "ended"


@dataclass(frozen=True, slots=True)
class DragDescriptor:
    """What the drag source advertised: item kind plus the rendering variant."""

    kind: str
    item: Optional[FileSystemItem] = None
    variant: DragVariant = "card"


@dataclass(frozen=True, slots=True)
class DragState:
    """
    Immutable view of the current drag.

    over_target_id is the resolved destination folder id (None when the
    pointer is over nothing droppable); over_droppable_id is the raw id of
    the drop target under the pointer, e.g. a breadcrumb dropdown entry.
    """

    phase: DragPhase = DragPhase.IDLE
    active_id: Optional[str] = None
    active_descriptor: Optional[DragDescriptor] = None
    dragged_items: tuple[FileSystemItem, ...] = ()
    over_target_id: Optional[str] = None
    over_droppable_id: Optional[str] = None
    is_outside_container: bool = False
    pointer_position: Optional[Point] = None

    @property
    def is_dragging(self) -> bool:
        return self.phase == DragPhase.DRAGGING

    @property
    def dragged_ids(self) -> tuple[str, ...]:
        return tuple(item.id for item in self.dragged_items)
