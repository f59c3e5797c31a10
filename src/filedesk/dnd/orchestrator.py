"""DragOrchestrator: drag lifecycle, drop-target resolution and drop handling."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Mapping, Optional, Sequence

from filedesk.config import DragConfig
from filedesk.errors import InvalidStateError
from filedesk.events import EventSource, PointerEvent
from filedesk.models import Document, FileSystemItem, Folder, MoveBatchResult, summarize_outcomes
from filedesk.selection import SelectionEngine
from filedesk.store import TreeStore

from .collision import DEFAULT_STRATEGIES, Collision, CollisionArgs, CollisionStrategy, detect_collisions
from .droppables import (
    BREADCRUMB_CONTENT_ID,
    BREADCRUMB_TRIGGER_ID,
    DroppableRegistry,
    is_breadcrumb_id,
    strip_breadcrumb_prefix,
)
from .geometry import Point, Rect
from .mover import MoveBatchRunner
from .sensors import ActivationSensor, sensor_for
from .state import DragDescriptor, DragPhase, DragState

logger = logging.getLogger(__name__)

DragListener = Callable[[DragState], None]
ContainerRectProvider = Callable[[], Optional[Rect]]


class DragOrchestrator:
    """
    Owns one drag session at a time: IDLE -> DRAGGING -> ENDED -> IDLE.

    The orchestrator does not listen to anything by itself. Call attach()
    with an event source to drive it from raw pointer events, or call
    drag_start/drag_move/drag_end directly from an existing DnD layer.
    """

    def __init__(
        self,
        store: TreeStore,
        selection: SelectionEngine,
        mover: MoveBatchRunner,
        *,
        config: Optional[DragConfig] = None,
        droppables: Optional[DroppableRegistry] = None,
        container_rect: Optional[ContainerRectProvider] = None,
        strategies: Sequence[CollisionStrategy] = DEFAULT_STRATEGIES,
    ) -> None:
        self.config = config or DragConfig()
        self.droppables = droppables or DroppableRegistry()
        self._store = store
        self._selection = selection
        self._mover = mover
        self._container_rect = container_rect
        self._strategies = tuple(strategies)
        self._state = DragState()
        self._listeners: list[DragListener] = []

        self._source: Optional[EventSource] = None
        self._sensor: Optional[ActivationSensor] = None
        self._pending_id: Optional[str] = None
        self._pending_descriptor: Optional[DragDescriptor] = None

    # ----------------------------
    # Read APIs
    # ----------------------------
    @property
    def state(self) -> DragState:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._state.is_dragging

    # ----------------------------
    # Drag lifecycle
    # ----------------------------
    def drag_start(
        self,
        active_id: str,
        pointer: Optional[Point] = None,
        descriptor: Optional[DragDescriptor] = None,
    ) -> bool:
        """
        Begin dragging active_id.

        When the item is part of a multi-item selection the whole selection
        travels with it. Returns False (and stays idle) for unknown ids.

        Raises:
            InvalidStateError: if a drag is already in progress.
        """
        if self._state.phase != DragPhase.IDLE:
            raise InvalidStateError(
                "A drag is already in progress",
                details={"active_id": self._state.active_id, "phase": self._state.phase.value},
            )

        item = self._store.get(active_id)
        if item is None:
            logger.debug("Ignoring drag start for unknown item %s", active_id)
            return False

        dragged = self._dragged_items(item)
        self._set(
            DragState(
                phase=DragPhase.DRAGGING,
                active_id=active_id,
                active_descriptor=descriptor or DragDescriptor(kind=item.kind.value, item=item),
                dragged_items=dragged,
                pointer_position=pointer,
                is_outside_container=self._is_outside(pointer),
            )
        )
        self._listen_for_moves(True)
        logger.debug("Drag started: %s (%d item(s))", active_id, len(dragged))
        return True

    def drag_move(self, pointer: Point) -> Optional[Collision]:
        """Track the pointer and update the hovered target."""
        if not self._state.is_dragging:
            return None

        self._set(
            replace(
                self._state,
                pointer_position=pointer,
                is_outside_container=self._is_outside(pointer),
            )
        )
        collision = self.detect(pointer)
        self.drag_over(collision)
        return collision

    def drag_over(self, collision: Optional[Collision]) -> Optional[str]:
        """Resolve the hovered target; returns the destination folder id or None."""
        if not self._state.is_dragging:
            return None

        target = self.resolve_target(collision)
        self._set(
            replace(
                self._state,
                over_target_id=target.id if target is not None else None,
                over_droppable_id=collision.id if collision is not None else None,
            )
        )
        return target.id if target is not None else None

    async def drag_end(self, collision: Optional[Collision] = None) -> MoveBatchResult:
        """
        Drop the dragged items on the target under the pointer.

        Without an explicit collision the last hovered target is used.
        Drag and selection state are reset on every exit path.
        """
        if not self._state.is_dragging:
            raise InvalidStateError("No drag in progress")

        state = self._state
        self._set(replace(state, phase=DragPhase.ENDED))
        try:
            if collision is None:
                target = self._hovered_target(state)
            else:
                target = self.resolve_target(collision)

            if target is None:
                logger.info("Drop on %s has no valid target; nothing moved", state.over_droppable_id)
                return _aborted_result()

            parent = None if self._store.is_root_folder_id(target.id) else target.id
            result = await self._mover.run(state.dragged_items, parent, target_id=target.id)
            logger.info(
                "Dropped %d item(s) on %s: %s", len(state.dragged_items), target.id, result.status
            )
            return result
        finally:
            self._reset()
            self._selection.clear()

    def drag_cancel(self) -> None:
        """Abandon the drag without moving anything."""
        if self._state.phase == DragPhase.IDLE:
            return
        logger.debug("Drag cancelled: %s", self._state.active_id)
        self._disarm()
        self._reset()
        self._selection.clear()

    # ----------------------------
    # Target resolution
    # ----------------------------
    def detect(self, pointer: Optional[Point]) -> Optional[Collision]:
        collisions = detect_collisions(
            CollisionArgs(
                droppables=self.droppables.snapshot(),
                pointer=pointer,
                padding=self.config.collision_padding,
            ),
            self._strategies,
        )
        return collisions[0] if collisions else None

    def resolve_target(self, collision: Optional[Collision]) -> Optional[Folder]:
        """
        Map a collision to the destination folder.

        Breadcrumb ids resolve through the item attached to the target, then
        by stripping the prefix; the trigger stands for the root folder and
        the dropdown content container is never a target. Dropping an item
        on itself or on a document yields None.
        """
        if collision is None or collision.id == BREADCRUMB_CONTENT_ID:
            return None

        if collision.id == BREADCRUMB_TRIGGER_ID:
            target: Optional[FileSystemItem] = self._store.get_root_folder()
        elif is_breadcrumb_id(collision.id):
            target = _payload_item(collision.data) or self._store.get(
                strip_breadcrumb_prefix(collision.id)
            )
        else:
            target = self._store.get(collision.id) or _payload_item(collision.data)
            if target is None and self._store.is_root_folder_id(collision.id):
                target = self._store.get_root_folder()

        if not isinstance(target, Folder):
            return None
        if target.id == self._state.active_id:
            return None
        return target

    # ----------------------------
    # Sensor-driven input
    # ----------------------------
    def pointer_down(
        self,
        item_id: str,
        event: PointerEvent,
        descriptor: Optional[DragDescriptor] = None,
    ) -> None:
        """Arm the sensor for a press on item_id; the drag starts once it activates."""
        if self._state.phase != DragPhase.IDLE:
            return
        self._sensor = sensor_for(event.pointer_type, self.config)
        self._sensor.press(Point(event.x, event.y), event.time_ms)
        self._pending_id = item_id
        self._pending_descriptor = descriptor
        self._listen_for_moves(True)

    def poll(self, time_ms: float) -> bool:
        """Fire a held press whose delay has elapsed (timer tick)."""
        sensor = self._sensor
        if sensor is None or self._pending_id is None:
            return False
        if sensor.poll(time_ms):
            return self._activate(sensor.origin)
        return False

    def pointer_move(self, event: PointerEvent) -> Optional[Collision]:
        point = Point(event.x, event.y)
        sensor = self._sensor
        if sensor is None:
            return self.drag_move(point) if self._state.is_dragging else None

        result = sensor.move(point, event.time_ms)
        if result == "aborted":
            self._disarm()
            return None
        if result == "activated":
            self._activate(point)
            return self.drag_move(point)
        if result == "moved":
            return self.drag_move(point)
        return None

    async def pointer_up(self, event: PointerEvent) -> Optional[MoveBatchResult]:
        """
        Finish a press. Returns the drop result, or None when the press was
        a click or never armed.
        """
        sensor = self._sensor
        if sensor is None:
            return None

        outcome = sensor.release()
        self._disarm()
        if outcome != "drop" or not self._state.is_dragging:
            return None

        point = Point(event.x, event.y)
        self._set(replace(self._state, pointer_position=point))
        return await self.drag_end(self.detect(point))

    def attach(self, source: EventSource) -> DragOrchestrator:
        """
        Bind to an event source. The pointermove listener is registered only
        while a press is armed or a drag is in progress; pointer_down and
        pointer_up stay with the caller, which knows the pressed item.

        Raises:
            InvalidStateError: if already attached.
        """
        if self._source is not None:
            raise InvalidStateError("DragOrchestrator is already attached")
        self._source = source
        if self._state.is_dragging or self._sensor is not None:
            self._listen_for_moves(True)
        return self

    def detach(self) -> None:
        if self._source is None:
            return
        self._source.remove_listener("pointermove", self.pointer_move)
        self._source = None

    # ----------------------------
    # Subscriptions
    # ----------------------------
    def subscribe(self, listener: DragListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ----------------------------
    # Internals
    # ----------------------------
    def _dragged_items(self, item: FileSystemItem) -> tuple[FileSystemItem, ...]:
        selected = self._selection.selected_ids
        if item.id not in selected or len(selected) <= 1:
            return (item,)

        ordered: list[FileSystemItem] = []
        seen: set[str] = set()
        for visible in self._selection.get_selected_items():
            current = self._store.get(visible.id)
            if current is not None:
                ordered.append(current)
                seen.add(current.id)
        for item_id in sorted(selected - seen):
            current = self._store.get(item_id)
            if current is not None:
                ordered.append(current)
        return tuple(ordered)

    def _hovered_target(self, state: DragState) -> Optional[Folder]:
        if state.over_target_id is None:
            return None
        if self._store.is_root_folder_id(state.over_target_id):
            return self._store.get_root_folder()
        target = self._store.get_folder(state.over_target_id)
        if target is None and state.over_droppable_id is not None:
            droppable = self.droppables.get(state.over_droppable_id)
            if droppable is not None:
                candidate = _payload_item(droppable.data)
                if isinstance(candidate, Folder) and candidate.id == state.over_target_id:
                    target = candidate
        return target

    def _is_outside(self, pointer: Optional[Point]) -> bool:
        if pointer is None:
            return False
        rect = self._container_rect() if self._container_rect is not None else None
        if rect is None:
            return True
        return not rect.contains(pointer)

    def _activate(self, pointer: Optional[Point]) -> bool:
        item_id = self._pending_id
        descriptor = self._pending_descriptor
        self._pending_id = None
        self._pending_descriptor = None
        if item_id is None:
            return False
        started = self.drag_start(item_id, pointer, descriptor)
        if not started:
            self._disarm()
        return started

    def _disarm(self) -> None:
        if self._sensor is not None:
            self._sensor.cancel()
        self._sensor = None
        self._pending_id = None
        self._pending_descriptor = None
        if not self._state.is_dragging:
            self._listen_for_moves(False)

    def _listen_for_moves(self, active: bool) -> None:
        if self._source is None:
            return
        if active:
            self._source.add_listener("pointermove", self.pointer_move)
        else:
            self._source.remove_listener("pointermove", self.pointer_move)

    def _reset(self) -> None:
        self._listen_for_moves(False)
        self._set(DragState())

    def _set(self, state: DragState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)


def _payload_item(data: Mapping[str, Any]) -> Optional[FileSystemItem]:
    item = data.get("item") if data else None
    if isinstance(item, (Folder, Document)):
        return item
    return None


def _aborted_result() -> MoveBatchResult:
    return MoveBatchResult(status="aborted", target_id=None, outcomes=[], summary=summarize_outcomes([]))
