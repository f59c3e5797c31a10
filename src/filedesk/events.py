"""Input events and the listener registry they are dispatched through."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Literal

EventType = Literal["keydown", "pointermove", "pointerdown", "pointerup"]
PointerType = Literal["mouse", "pen", "touch"]
Handler = Callable[[Any], None]


@dataclass(frozen=True, slots=True)
class ClickEvent:
    """Modifier state of a click on an item."""

    meta: bool = False
    ctrl: bool = False
    shift: bool = False

    @property
    def toggles(self) -> bool:
        """Cmd (macOS) or Ctrl (elsewhere) toggles membership."""
        return self.meta or self.ctrl


@dataclass(frozen=True, slots=True)
class KeyEvent:
    """
    A key press.

    target_editable is True when focus sits in an input, textarea or
    contenteditable element; shortcuts are ignored there.
    """

    key: str
    meta: bool = False
    ctrl: bool = False
    shift: bool = False
    target_editable: bool = False


@dataclass(frozen=True, slots=True)
class PointerEvent:
    x: float
    y: float
    time_ms: float = 0.0
    pointer_type: PointerType = "mouse"


class EventSource:
    """
    Minimal listener registry standing in for a window/document target.

    Components attach and detach their own handlers; nothing registers
    itself globally.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def add_listener(self, event_type: EventType, handler: Handler) -> None:
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def remove_listener(self, event_type: EventType, handler: Handler) -> None:
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event_type: EventType) -> int:
        return len(self._handlers.get(event_type, ()))

    def dispatch(self, event_type: EventType, event: Any) -> None:
        for handler in list(self._handlers.get(event_type, ())):
            handler(event)
