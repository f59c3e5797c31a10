"""Public store exports for filedesk."""

from __future__ import annotations

from .snapshot import ROOT_KEY, TreeSnapshot
from .tree_store import TreeListener, TreeStore
from .validators import validate_move, validate_move_no_cycle, validate_parent_changes

__all__ = [
    "TreeStore",
    "TreeSnapshot",
    "TreeListener",
    "ROOT_KEY",
    "validate_move",
    "validate_move_no_cycle",
    "validate_parent_changes",
]
