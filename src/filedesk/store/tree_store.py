"""TreeStore: canonical in-memory map of folders and documents."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Iterable, Optional

from filedesk.config import DEFAULT_ROOT_FOLDER_ID, DEFAULT_ROOT_FOLDER_NAME
from filedesk.errors import InvalidArgumentError, MoveRejectedError
from filedesk.models import (
    DERIVED_FIELDS,
    STRUCTURAL_FIELDS,
    FileSystemItem,
    Folder,
    items_from_contents,
    parent_of,
    with_parent,
)
from filedesk.util.time import now_utc

from .snapshot import ROOT_KEY, TreeSnapshot
from .validators import validate_move, validate_move_no_cycle

logger = logging.getLogger(__name__)

TreeListener = Callable[[TreeSnapshot], None]


class _Draft:
    """Copy-on-write working set used while building the next snapshot."""

    def __init__(self, snapshot: TreeSnapshot) -> None:
        self.items: dict[str, FileSystemItem] = dict(snapshot.items)
        self.children: dict[Optional[str], tuple[str, ...]] = dict(snapshot.children)

    def view(self) -> TreeSnapshot:
        return TreeSnapshot(items=self.items, children=self.children)

    def attach(self, parent_id: Optional[str], child_id: str) -> None:
        ids = self.children.get(parent_id, ())
        if child_id not in ids:
            self.children[parent_id] = ids + (child_id,)

    def detach(self, parent_id: Optional[str], child_id: str) -> None:
        ids = self.children.get(parent_id, ())
        if child_id in ids:
            self.children[parent_id] = tuple(i for i in ids if i != child_id)

    def recount(self, folder_id: Optional[str]) -> None:
        if folder_id is None:
            return
        folder = self.items.get(folder_id)
        if not isinstance(folder, Folder):
            return
        count = self.view().live_child_count(folder_id)
        if folder.items != count:
            self.items[folder_id] = replace(folder, items=count)

    def refresh_deleted_flags(self, item_id: str) -> None:
        """Recompute has_deleted_ancestor for item_id and its whole subtree."""
        item = self.items.get(item_id)
        if item is None:
            return
        parent = self.items.get(parent_of(item) or "")
        inherited = parent is not None and (parent.is_deleted or parent.has_deleted_ancestor)
        self._set_flag(item_id, inherited)

        view = self.view()
        for desc_id in view.descendant_ids(item_id):
            desc = self.items.get(desc_id)
            if desc is None:
                continue
            desc_parent = self.items.get(parent_of(desc) or "")
            flag = desc_parent is not None and (
                desc_parent.is_deleted or desc_parent.has_deleted_ancestor
            )
            self._set_flag(desc_id, flag)

    def _set_flag(self, item_id: str, flag: bool) -> None:
        item = self.items[item_id]
        if item.has_deleted_ancestor != flag:
            self.items[item_id] = replace(item, has_deleted_ancestor=flag)


class TreeStore:
    """
    Owns the item map and root ordering.

    Operations on unknown ids are no-ops so that late or out-of-order UI
    events never raise. Structural violations (cycles, non-folder targets)
    are rejected silently by move_item; use can_move() to ask first.
    """

    def __init__(
        self,
        *,
        root_folder_id: str = DEFAULT_ROOT_FOLDER_ID,
        root_folder_name: str = DEFAULT_ROOT_FOLDER_NAME,
    ) -> None:
        self.root_folder_id = root_folder_id
        self.root_folder_name = root_folder_name
        self._snapshot = TreeSnapshot()
        self._listeners: list[TreeListener] = []

    @classmethod
    def from_items(cls, items: Iterable[FileSystemItem], **kwargs: Any) -> TreeStore:
        store = cls(**kwargs)
        store.load_items(items)
        return store

    # ----------------------------
    # Read APIs
    # ----------------------------
    @property
    def snapshot(self) -> TreeSnapshot:
        """The current immutable snapshot; safe to hold across mutations."""
        return self._snapshot

    @property
    def root_ids(self) -> tuple[str, ...]:
        return self._snapshot.root_ids

    def has(self, item_id: str) -> bool:
        return self._snapshot.has(item_id)

    def get(self, item_id: str) -> Optional[FileSystemItem]:
        return self._snapshot.get(item_id)

    def get_folder(self, folder_id: str) -> Optional[Folder]:
        return self._snapshot.get_folder(folder_id)

    def get_children(
        self,
        folder_id: Optional[str],
        *,
        include_deleted: bool = False,
    ) -> list[FileSystemItem]:
        """Children of folder_id (None = root), in insertion order."""
        snap = self._snapshot
        if folder_id is not None and folder_id == self.root_folder_id and not snap.has(folder_id):
            folder_id = ROOT_KEY

        result: list[FileSystemItem] = []
        for child_id in snap.child_ids(folder_id):
            item = snap.get(child_id)
            if item is None:
                continue
            if not include_deleted and item.is_deleted:
                continue
            result.append(item)
        return result

    def get_path(self, item_id: str) -> list[FileSystemItem]:
        """Ancestor chain from the top-most loaded ancestor down to the item."""
        snap = self._snapshot
        item = snap.get(item_id)
        if item is None:
            return []

        path: list[FileSystemItem] = [item]
        for ancestor_id in snap.iter_ancestor_ids(item_id):
            ancestor = snap.get(ancestor_id)
            if ancestor is None:
                break
            path.append(ancestor)
        path.reverse()
        return path

    def get_descendant_ids(self, item_id: str) -> list[str]:
        return self._snapshot.descendant_ids(item_id)

    def is_descendant(self, item_id: str, ancestor_id: str) -> bool:
        return self._snapshot.is_descendant(item_id, ancestor_id)

    def get_root_folder(self) -> Folder:
        """
        The designated root folder.

        Returns the loaded record when one exists under root_folder_id,
        otherwise a synthetic folder whose count is the live root items.
        """
        loaded = self._snapshot.get_folder(self.root_folder_id)
        if loaded is not None:
            return loaded

        live = sum(
            1
            for item_id in self._snapshot.root_ids
            if (item := self._snapshot.get(item_id)) is not None and not item.is_deleted
        )
        return Folder(id=self.root_folder_id, name=self.root_folder_name, parent=None, items=live)

    def is_root_folder_id(self, item_id: Optional[str]) -> bool:
        return item_id is not None and item_id == self.root_folder_id

    def list_trash(self) -> list[FileSystemItem]:
        """Soft-deleted items whose ancestors are all active (trash view roots)."""
        return [
            item
            for item in self._snapshot.items.values()
            if item.is_deleted and not item.has_deleted_ancestor
        ]

    def normalize_target(self, target_id: Optional[str]) -> Optional[str]:
        """Map the designated root folder id to the root key unless it is loaded."""
        if self.is_root_folder_id(target_id) and not self._snapshot.has(target_id or ""):
            return None
        return target_id

    def can_move(self, item_id: str, target_id: Optional[str]) -> bool:
        try:
            validate_move(self._snapshot, item_id, self.normalize_target(target_id))
        except MoveRejectedError:
            return False
        return True

    # ----------------------------
    # Mutation APIs
    # ----------------------------
    def add_item(self, item: FileSystemItem) -> None:
        """Insert or overwrite an item and index it under its parent."""
        draft = _Draft(self._snapshot)
        if self._insert(draft, item):
            self._commit(draft)

    def load_items(self, items: Iterable[FileSystemItem]) -> None:
        """Add many items in one snapshot (order independent)."""
        draft = _Draft(self._snapshot)
        added: list[str] = []
        for item in items:
            if self._insert(draft, item, refresh=False):
                added.append(item.id)
        for item_id in added:
            draft.refresh_deleted_flags(item_id)
        self._commit(draft)
        logger.debug("Loaded %d items into tree store", len(added))

    def load_contents(self, payload: dict[str, Any]) -> None:
        """Replace the store content with a folder-contents API payload."""
        items = items_from_contents(payload)
        self._snapshot = TreeSnapshot()
        self.load_items(items)

    def remove_item(self, item_id: str) -> None:
        """Delete an item and, for folders, every descendant (cascading)."""
        item = self._snapshot.get(item_id)
        if item is None:
            return

        draft = _Draft(self._snapshot)
        descendants = self._snapshot.descendant_ids(item_id)
        for desc_id in descendants:
            draft.items.pop(desc_id, None)
            draft.children.pop(desc_id, None)

        parent_id = parent_of(item)
        draft.detach(parent_id, item_id)
        draft.items.pop(item_id, None)
        draft.children.pop(item_id, None)
        draft.recount(parent_id)

        self._commit(draft)
        logger.debug("Removed %s and %d descendants", item_id, len(descendants))

    def move_item(self, item_id: str, target_id: Optional[str]) -> bool:
        """
        Re-parent item_id under target_id (None = root).

        Returns False (without raising) when the item is unknown, the target
        is not an existing folder, or the move would create a cycle.
        """
        target = self.normalize_target(target_id)
        try:
            validate_move(self._snapshot, item_id, target)
        except MoveRejectedError as exc:
            logger.debug("Rejected move of %s to %s: %s", item_id, target_id, exc)
            return False

        item = self._snapshot.items[item_id]
        old_parent = parent_of(item)
        if old_parent == target:
            return True

        draft = _Draft(self._snapshot)
        draft.detach(old_parent, item_id)
        draft.items[item_id] = with_parent(item, target)
        draft.attach(target, item_id)
        draft.recount(old_parent)
        draft.recount(target)
        draft.refresh_deleted_flags(item_id)

        self._commit(draft)
        logger.debug("Moved %s from %s to %s", item_id, old_parent, target)
        return True

    def update_item(self, item_id: str, **changes: Any) -> Optional[FileSystemItem]:
        """
        Shallow-merge non-structural fields into an item.

        Raises:
            InvalidArgumentError: if changes touch id/parent/folder (use
                move_item), a field derived by the store (items,
                has_deleted_ancestor), or a field the item does not have.
        """
        item = self._snapshot.get(item_id)
        if item is None:
            return None

        forbidden = STRUCTURAL_FIELDS.intersection(changes)
        if forbidden:
            raise InvalidArgumentError(
                "Hierarchy fields cannot be updated; use move_item",
                details={"fields": sorted(forbidden)},
            )
        derived = DERIVED_FIELDS.intersection(changes)
        if derived:
            raise InvalidArgumentError(
                "Derived fields are maintained by the store",
                details={"fields": sorted(derived)},
            )
        try:
            updated = replace(item, **changes)
        except TypeError as exc:
            raise InvalidArgumentError(
                "Unknown field in update",
                details={"fields": sorted(changes)},
                cause=exc,
            ) from exc

        draft = _Draft(self._snapshot)
        draft.items[item_id] = updated
        if "deleted_at" in changes and item.deleted_at != updated.deleted_at:
            draft.recount(parent_of(updated))
            draft.refresh_deleted_flags(item_id)

        self._commit(draft)
        return draft.items[item_id]

    def trash_item(self, item_id: str, *, at: Optional[datetime] = None) -> Optional[FileSystemItem]:
        """Soft delete: mark deleted_at; the item stays addressable."""
        return self.update_item(item_id, deleted_at=at or now_utc())

    def restore_item(self, item_id: str) -> Optional[FileSystemItem]:
        return self.update_item(item_id, deleted_at=None)

    # ----------------------------
    # Subscriptions
    # ----------------------------
    def subscribe(self, listener: TreeListener) -> Callable[[], None]:
        """Register a listener called with each new snapshot; returns unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ----------------------------
    # Internals
    # ----------------------------
    def _insert(self, draft: _Draft, item: FileSystemItem, *, refresh: bool = True) -> bool:
        """Stage item into draft; False when it would close a parent cycle."""
        previous = draft.items.get(item.id)
        new_parent = parent_of(item)
        if isinstance(item, Folder):
            try:
                validate_move_no_cycle(draft.view(), item.id, new_parent)
            except MoveRejectedError as exc:
                logger.warning("Insert of %s rejected: %s", item.id, exc)
                return False

        if previous is not None:
            old_parent = parent_of(previous)
            if old_parent != new_parent:
                draft.detach(old_parent, item.id)
                draft.recount(old_parent)

        draft.items[item.id] = item
        draft.attach(new_parent, item.id)
        draft.recount(new_parent)
        # Children that arrived before their folder.
        if draft.children.get(item.id):
            draft.recount(item.id)
        if refresh:
            draft.refresh_deleted_flags(item.id)
        return True

    def _commit(self, draft: _Draft) -> None:
        self._snapshot = TreeSnapshot(
            items=MappingProxyType(draft.items),
            children=MappingProxyType(draft.children),
        )
        for listener in list(self._listeners):
            listener(self._snapshot)
