"""Immutable snapshot of the item map and its hierarchy index."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterator, Mapping, Optional

from filedesk.models import FileSystemItem, Folder, parent_of

# Key of the root ordering inside TreeSnapshot.children.
ROOT_KEY = None


@dataclass(frozen=True, slots=True)
class TreeSnapshot:
    """
    Read-only view of the tree at one point in time.

    Indexes:
        - items: id -> record
        - children: parent id (None = root) -> ordered child ids

    The children index is keyed by parent id even when that parent is not
    loaded yet, so items may arrive in any order.

    TreeStore never mutates a published snapshot; each mutation builds a
    new one that shares every untouched record and child tuple.
    """

    items: Mapping[str, FileSystemItem] = field(default_factory=dict)
    children: Mapping[Optional[str], tuple[str, ...]] = field(default_factory=dict)

    # ----------------------------
    # Query helpers
    # ----------------------------
    def has(self, item_id: str) -> bool:
        return item_id in self.items

    def get(self, item_id: str) -> Optional[FileSystemItem]:
        return self.items.get(item_id)

    def get_folder(self, item_id: str) -> Optional[Folder]:
        item = self.items.get(item_id)
        return item if isinstance(item, Folder) else None

    @property
    def root_ids(self) -> tuple[str, ...]:
        return self.children.get(ROOT_KEY, ())

    def child_ids(self, parent_id: Optional[str]) -> tuple[str, ...]:
        return self.children.get(parent_id, ())

    def live_child_count(self, folder_id: str) -> int:
        count = 0
        for child_id in self.children.get(folder_id, ()):
            child = self.items.get(child_id)
            if child is not None and child.deleted_at is None:
                count += 1
        return count

    def iter_ancestor_ids(self, item_id: str) -> Iterator[str]:
        """Yield parent, grandparent, ... of item_id (stops at root or a gap)."""
        visited: set[str] = {item_id}
        item = self.items.get(item_id)
        parent_id = parent_of(item) if item is not None else None
        while parent_id is not None and parent_id not in visited:
            visited.add(parent_id)
            yield parent_id
            parent = self.items.get(parent_id)
            if parent is None:
                return
            parent_id = parent_of(parent)

    def descendant_ids(self, item_id: str) -> list[str]:
        """All ids below item_id (BFS order), excluding item_id itself."""
        result: list[str] = []
        visited: set[str] = {item_id}
        q: deque[str] = deque(self.children.get(item_id, ()))

        while q:
            cur = q.popleft()
            if cur in visited:
                continue
            visited.add(cur)
            result.append(cur)
            q.extend(self.children.get(cur, ()))

        return result

    def is_descendant(self, item_id: str, ancestor_id: str) -> bool:
        """True if ancestor_id appears on item_id's ancestor chain."""
        return any(a == ancestor_id for a in self.iter_ancestor_ids(item_id))
