"""Drop target registry and breadcrumb id conventions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Optional

from .geometry import Rect

BREADCRUMB_PREFIX: str = "breadcrumb-dropdown-"
BREADCRUMB_TRIGGER_ID: str = BREADCRUMB_PREFIX + "trigger"
BREADCRUMB_CONTENT_ID: str = BREADCRUMB_PREFIX + "content"

# Measures a target on demand; None while the element is not mounted.
RectProvider = Callable[[], Optional[Rect]]


def breadcrumb_dropdown_id(folder_id: str) -> str:
    return BREADCRUMB_PREFIX + folder_id


def is_breadcrumb_id(droppable_id: str) -> bool:
    return droppable_id.startswith(BREADCRUMB_PREFIX)


def is_breadcrumb_dropdown_item(droppable_id: str) -> bool:
    """A portal-rendered dropdown entry (not the trigger or content container)."""
    return is_breadcrumb_id(droppable_id) and droppable_id not in (
        BREADCRUMB_TRIGGER_ID,
        BREADCRUMB_CONTENT_ID,
    )


def strip_breadcrumb_prefix(droppable_id: str) -> str:
    if is_breadcrumb_id(droppable_id):
        return droppable_id[len(BREADCRUMB_PREFIX) :]
    return droppable_id


@dataclass(frozen=True, slots=True)
class Droppable:
    """
    A registered drop target.

    in_breadcrumb marks targets rendered inside the breadcrumb navigation;
    collision detection holds those to a strict (unpadded) hit test.
    data carries the payload attached at registration, e.g.
    {"type": "folder", "item": Folder(...)} for breadcrumb entries.
    """

    id: str
    measure: RectProvider
    data: Mapping[str, Any] = field(default_factory=dict)
    in_breadcrumb: bool = False

    @classmethod
    def fixed(
        cls,
        droppable_id: str,
        rect: Optional[Rect],
        *,
        data: Optional[Mapping[str, Any]] = None,
        in_breadcrumb: bool = False,
    ) -> Droppable:
        """Target with a constant rect (tests, static layouts)."""
        return cls(
            id=droppable_id,
            measure=lambda: rect,
            data=dict(data or {}),
            in_breadcrumb=in_breadcrumb,
        )

    def rect(self) -> Optional[Rect]:
        return self.measure()


class DroppableRegistry:
    """Registered drop targets in registration order."""

    def __init__(self) -> None:
        self._targets: dict[str, Droppable] = {}

    def register(self, droppable: Droppable) -> Callable[[], None]:
        """Add or replace a target; returns a callable that unregisters it."""
        self._targets[droppable.id] = droppable

        def unregister() -> None:
            if self._targets.get(droppable.id) is droppable:
                del self._targets[droppable.id]

        return unregister

    def unregister(self, droppable_id: str) -> None:
        self._targets.pop(droppable_id, None)

    def get(self, droppable_id: str) -> Optional[Droppable]:
        return self._targets.get(droppable_id)

    def snapshot(self) -> tuple[Droppable, ...]:
        return tuple(self._targets.values())

    def __iter__(self) -> Iterator[Droppable]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._targets)
