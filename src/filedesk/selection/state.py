"""Immutable selection state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from filedesk.models import FileSystemItem


@dataclass(frozen=True, slots=True)
class SelectionState:
    """
    Snapshot of the selection.

    Notes:
        - selected_ids carries membership only; use visible_items for order.
        - item_positions memoizes id -> index for visible_items and may go
          stale; SelectionEngine repairs it on lookup.
        - range_active is True while the selection is an anchor..target
          range that must follow visible_items changes.
    """

    selected_ids: frozenset[str] = frozenset()
    anchor: Optional[str] = None
    last_selected_id: Optional[str] = None
    visible_items: tuple[FileSystemItem, ...] = ()
    item_positions: Mapping[str, int] = field(default_factory=dict)
    last_click_time: float = 0.0
    last_click_id: Optional[str] = None
    range_active: bool = False

    @property
    def count(self) -> int:
        return len(self.selected_ids)

    def is_selected(self, item_id: str) -> bool:
        return item_id in self.selected_ids


def build_positions(items: tuple[FileSystemItem, ...]) -> dict[str, int]:
    return {item.id: index for index, item in enumerate(items)}
