"""Public selection exports for filedesk."""

from __future__ import annotations

from .engine import SelectionEngine, SelectionListener, next_frame
from .shortcuts import KeyboardShortcuts
from .state import SelectionState

__all__ = [
    "SelectionEngine",
    "SelectionState",
    "SelectionListener",
    "KeyboardShortcuts",
    "next_frame",
]
