"""Structural validation helpers for TreeStore moves."""

from __future__ import annotations

from typing import Optional

from filedesk.errors import MoveRejectedError
from filedesk.models import Folder, parent_of

from .snapshot import TreeSnapshot


def validate_exists(snapshot: TreeSnapshot, item_id: str, what: str) -> None:
    if not snapshot.has(item_id):
        raise MoveRejectedError(f"{what} does not exist: {item_id}")


def validate_is_folder(snapshot: TreeSnapshot, item_id: str, what: str) -> None:
    if not isinstance(snapshot.get(item_id), Folder):
        raise MoveRejectedError(f"{what} must be a folder: {item_id}")


def validate_move_no_cycle(
    snapshot: TreeSnapshot,
    item_id: str,
    new_parent_id: Optional[str],
) -> None:
    """
    Reject cycles: the item may not land on itself or below itself.

    Walks from new_parent towards the root; hitting item_id means the move
    would make the item its own ancestor.
    """
    if new_parent_id is None:
        return
    if item_id == new_parent_id:
        raise MoveRejectedError(
            "Move would create a cycle (target == item)",
            details={"item_id": item_id},
        )
    if snapshot.is_descendant(new_parent_id, item_id):
        raise MoveRejectedError(
            "Move would create a cycle",
            details={"item_id": item_id, "target_id": new_parent_id},
        )


def validate_move(
    snapshot: TreeSnapshot,
    item_id: str,
    new_parent_id: Optional[str],
) -> None:
    """Run every structural check for moving item_id under new_parent_id."""
    validate_exists(snapshot, item_id, "Item")
    if new_parent_id is not None:
        validate_exists(snapshot, new_parent_id, "Target")
        validate_is_folder(snapshot, new_parent_id, "Target")
    validate_move_no_cycle(snapshot, item_id, new_parent_id)


def validate_parent_changes(
    snapshot: TreeSnapshot,
    item_id: str,
    new_parent_id: Optional[str],
) -> None:
    """Reject a move that would leave the item where it already is."""
    item = snapshot.get(item_id)
    if item is not None and parent_of(item) == new_parent_id:
        raise MoveRejectedError(
            "Item is already in the target folder",
            details={"item_id": item_id, "target_id": new_parent_id},
        )
