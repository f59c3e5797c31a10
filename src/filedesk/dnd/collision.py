"""
Collision detection: which drop target is the pointer over?

Detection runs an ordered list of strategies and returns the first
non-empty result, truncated to a single collision:

    1. portal_priority           - breadcrumb dropdown items (portal-rendered)
    2. breadcrumb_item_priority  - dropdown items over trigger/content
    3. padded_containment        - everything else, padded for generic targets

Breadcrumb dropdown entries are rendered in a portal outside the directory
view, so plain containment ordering cannot be trusted for them; that is why
they are probed first and directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Sequence

from .droppables import (
    BREADCRUMB_CONTENT_ID,
    Droppable,
    is_breadcrumb_dropdown_item,
    is_breadcrumb_id,
)
from .geometry import Point

DEFAULT_PADDING: float = 8.0


@dataclass(frozen=True, slots=True)
class Collision:
    id: str
    data: Mapping[str, Any] = field(default_factory=dict)
    distance: float = 0.0


@dataclass(frozen=True, slots=True)
class CollisionArgs:
    droppables: Sequence[Droppable]
    pointer: Optional[Point]
    padding: float = DEFAULT_PADDING


CollisionStrategy = Callable[[CollisionArgs], list[Collision]]


def pointer_within(args: CollisionArgs) -> list[Collision]:
    """
    Default detection: targets whose rect strictly contains the pointer,
    closest fit first (mean corner distance).
    """
    pointer = args.pointer
    if pointer is None:
        return []

    hits: list[Collision] = []
    for droppable in args.droppables:
        rect = droppable.rect()
        if rect is None or not rect.contains(pointer):
            continue
        hits.append(
            Collision(id=droppable.id, data=droppable.data, distance=rect.corner_distance(pointer))
        )
    hits.sort(key=lambda c: c.distance)
    return hits


def portal_priority(args: CollisionArgs) -> list[Collision]:
    """First breadcrumb dropdown item whose rect contains the pointer."""
    hit = _first_dropdown_item_at_pointer(args)
    return [hit] if hit is not None else []


def breadcrumb_item_priority(args: CollisionArgs) -> list[Collision]:
    """
    Among default collisions, dropdown items beat the trigger and content
    containers. When only the content container matched, probe the dropdown
    items directly for one under the pointer.
    """
    collisions = pointer_within(args)
    if not collisions:
        return []

    items = [c for c in collisions if is_breadcrumb_dropdown_item(c.id)]
    if items:
        return [items[0]]

    if any(c.id == BREADCRUMB_CONTENT_ID for c in collisions):
        hit = _first_dropdown_item_at_pointer(args)
        if hit is not None:
            return [hit]

    return []


def padded_containment(args: CollisionArgs) -> list[Collision]:
    """
    Containment with padding for generic targets.

    Breadcrumb navigation targets (trigger, path entries) must contain the
    pointer without padding. The dropdown content container is never a
    candidate.
    """
    pointer = args.pointer
    if pointer is None:
        return []

    hits: list[Collision] = []
    for droppable in args.droppables:
        if droppable.id == BREADCRUMB_CONTENT_ID:
            continue
        rect = droppable.rect()
        if rect is None:
            continue

        strict = droppable.in_breadcrumb or is_breadcrumb_id(droppable.id)
        box = rect if strict else rect.inflate(args.padding)
        if not box.contains(pointer):
            continue
        hits.append(
            Collision(id=droppable.id, data=droppable.data, distance=rect.corner_distance(pointer))
        )

    hits.sort(key=lambda c: c.distance)
    return hits


DEFAULT_STRATEGIES: tuple[CollisionStrategy, ...] = (
    portal_priority,
    breadcrumb_item_priority,
    padded_containment,
)


def detect_collisions(
    args: CollisionArgs,
    strategies: Sequence[CollisionStrategy] = DEFAULT_STRATEGIES,
) -> list[Collision]:
    """Run strategies in order; return the first non-empty result (at most one item)."""
    if args.pointer is None:
        return []
    for strategy in strategies:
        result = strategy(args)
        if result:
            return result[:1]
    return []


def _first_dropdown_item_at_pointer(args: CollisionArgs) -> Optional[Collision]:
    pointer = args.pointer
    if pointer is None:
        return None
    for droppable in args.droppables:
        if not is_breadcrumb_dropdown_item(droppable.id):
            continue
        rect = droppable.rect()
        if rect is not None and rect.contains(pointer):
            return Collision(
                id=droppable.id, data=droppable.data, distance=rect.corner_distance(pointer)
            )
    return None

