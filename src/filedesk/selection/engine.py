"""SelectionEngine: click, range and keyboard selection over visible items."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Callable, Iterable, Optional

from filedesk.config import SelectionConfig
from filedesk.events import ClickEvent, KeyEvent
from filedesk.models import Document, FileSystemItem, Folder
from filedesk.util.time import monotonic_ms

from .state import SelectionState, build_positions

logger = logging.getLogger(__name__)

SelectionListener = Callable[[SelectionState], None]
DeleteCallback = Callable[[frozenset[str]], None]
OpenCallback = Callable[[], None]
Scheduler = Callable[[Callable[[], None]], None]

_DELETE_KEYS: frozenset[str] = frozenset({"Delete", "Backspace"})


def next_frame(callback: Callable[[], None]) -> None:
    """Run callback on the next loop iteration, or immediately without a loop."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        callback()
        return
    loop.call_soon(callback)


class SelectionEngine:
    """
    Owns the selected-id set, the range anchor and click timing.

    The caller feeds the ordered visible items (current sort/filter) through
    set_visible_items(); range selection and select_all operate on that list
    only, never on the whole store.
    """

    def __init__(
        self,
        config: Optional[SelectionConfig] = None,
        *,
        clock: Callable[[], float] = monotonic_ms,
        schedule: Scheduler = next_frame,
    ) -> None:
        self.config = config or SelectionConfig()
        self._clock = clock
        self._schedule = schedule
        self._state = SelectionState()
        self._listeners: list[SelectionListener] = []

    # ----------------------------
    # Read APIs
    # ----------------------------
    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def selected_ids(self) -> frozenset[str]:
        return self._state.selected_ids

    def is_selected(self, item_id: str) -> bool:
        return self._state.is_selected(item_id)

    def get_selected_items(self) -> list[FileSystemItem]:
        """Selected items among the visible ones, in visible order."""
        selected = self._state.selected_ids
        return [item for item in self._state.visible_items if item.id in selected]

    def describe_selection(self) -> dict[str, list[str]]:
        """Group selected visible items by kind and log the summary."""
        summary: dict[str, list[str]] = {"folders": [], "documents": []}
        for item in self.get_selected_items():
            if isinstance(item, Folder):
                summary["folders"].append(item.name)
            elif isinstance(item, Document):
                summary["documents"].append(item.name)

        if not summary["folders"] and not summary["documents"]:
            logger.info("No items selected")
        else:
            logger.info(
                "%d item(s) selected: folders=%s documents=%s",
                len(summary["folders"]) + len(summary["documents"]),
                summary["folders"],
                summary["documents"],
            )
        return summary

    # ----------------------------
    # Visible item feed
    # ----------------------------
    def set_visible_items(self, items: Iterable[FileSystemItem]) -> None:
        """Replace the ordered visible snapshot (call on every sort/filter change)."""
        visible = tuple(items)
        self._set(
            replace(self._state, visible_items=visible, item_positions=build_positions(visible))
        )
        if self._state.range_active:
            self.select_range()

    # ----------------------------
    # Selection APIs
    # ----------------------------
    def select(self, item_id: str, event: Optional[ClickEvent] = None) -> None:
        event = event or ClickEvent()
        state = self._state

        if event.toggles:
            self._set(
                replace(
                    state,
                    selected_ids=_flip(state.selected_ids, item_id),
                    anchor=item_id,
                    last_selected_id=item_id,
                    range_active=False,
                )
            )
            return

        if event.shift and state.anchor is not None:
            self._set(replace(state, last_selected_id=item_id, range_active=True))
            self.select_range()
            return

        self._set(
            replace(
                state,
                selected_ids=frozenset({item_id}),
                anchor=item_id,
                last_selected_id=item_id,
                range_active=False,
            )
        )

    def select_range(
        self,
        start_id: Optional[str] = None,
        end_id: Optional[str] = None,
    ) -> bool:
        """
        Select the closed interval between start_id and end_id.

        Defaults to anchor .. last_selected_id. Returns False (no-op) when
        either id is not among the visible items. The span is capped at
        config.max_range items, cutting the end far from the anchor.
        """
        state = self._state
        start_id = start_id if start_id is not None else state.anchor
        end_id = end_id if end_id is not None else state.last_selected_id
        if start_id is None or end_id is None:
            return False

        start_index = self._position_of(start_id)
        end_index = self._position_of(end_id)
        if start_index is None or end_index is None:
            return False

        limit = self.config.max_range - 1
        if end_index >= start_index:
            end_index = min(end_index, start_index + limit)
        else:
            end_index = max(end_index, start_index - limit)

        lo, hi = min(start_index, end_index), max(start_index, end_index)
        visible = self._state.visible_items
        selected = frozenset(item.id for item in visible[lo : hi + 1])

        self._set(
            replace(
                self._state,
                selected_ids=selected,
                anchor=start_id,
                last_selected_id=end_id,
                range_active=True,
            )
        )
        return True

    def toggle(self, item_id: str) -> None:
        state = self._state
        self._set(
            replace(
                state,
                selected_ids=_flip(state.selected_ids, item_id),
                anchor=item_id,
                last_selected_id=item_id,
                range_active=False,
            )
        )

    def clear(self) -> None:
        state = self._state
        if not state.selected_ids and state.last_selected_id is None and state.anchor is None:
            return
        self._set(
            replace(
                state,
                selected_ids=frozenset(),
                anchor=None,
                last_selected_id=None,
                range_active=False,
            )
        )
        logger.debug("Selection cleared")

    def select_all(self) -> None:
        visible = self._state.visible_items
        if not visible:
            return
        self._set(
            replace(
                self._state,
                selected_ids=frozenset(item.id for item in visible),
                anchor=visible[0].id,
                last_selected_id=visible[-1].id,
                range_active=False,
            )
        )

    def handle_item_click(
        self,
        item_id: str,
        event: Optional[ClickEvent] = None,
        on_open: Optional[OpenCallback] = None,
    ) -> bool:
        """
        Select on a single click, open on a double click.

        Returns True when the click completed a double click. on_open is
        scheduled for the next frame and the click timing is reset, so a
        third click starts over as a single click.
        """
        now = self._clock()
        state = self._state

        if (
            state.last_click_id == item_id
            and now - state.last_click_time < self.config.double_click_ms
        ):
            self._set(replace(state, last_click_time=0.0, last_click_id=None))
            if on_open is not None:
                self._schedule(on_open)
            return True

        self.select(item_id, event)
        self._set(replace(self._state, last_click_time=now, last_click_id=item_id))
        return False

    def delete_selected(self, on_delete: Optional[DeleteCallback] = None) -> bool:
        """Hand the selected ids to on_delete (or log them), then clear."""
        selected = self._state.selected_ids
        if not selected:
            return False

        if on_delete is not None:
            on_delete(selected)
        else:
            logger.info("Delete requested for %d item(s): %s", len(selected), sorted(selected))

        self.clear()
        return True

    def handle_key_down(
        self,
        event: KeyEvent,
        *,
        on_delete: Optional[DeleteCallback] = None,
        on_open: Optional[Callable[[str], None]] = None,
    ) -> bool:
        """
        Apply selection shortcuts. Returns True when the key was handled
        (the caller should prevent the default action).
        """
        if event.target_editable:
            return False

        if (event.meta or event.ctrl) and event.key.lower() == "a":
            self.select_all()
            return True

        if event.key in _DELETE_KEYS:
            return self.delete_selected(on_delete)

        if event.key == "Escape":
            self.clear()
            return True

        if event.key == "Enter" and on_open is not None:
            selected = self.get_selected_items()
            if len(selected) == 1:
                on_open(selected[0].id)
                return True

        return False

    # ----------------------------
    # Subscriptions
    # ----------------------------
    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ----------------------------
    # Internals
    # ----------------------------
    def _position_of(self, item_id: str) -> Optional[int]:
        state = self._state
        visible = state.visible_items
        index = state.item_positions.get(item_id)
        if index is not None and index < len(visible) and visible[index].id == item_id:
            return index

        # Stale or missing memo: scan, then rebuild the map.
        for i, item in enumerate(visible):
            if item.id == item_id:
                self._state = replace(state, item_positions=build_positions(visible))
                return i
        return None

    def _set(self, state: SelectionState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)


def _flip(ids: frozenset[str], item_id: str) -> frozenset[str]:
    return ids - {item_id} if item_id in ids else ids | {item_id}
