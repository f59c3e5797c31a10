"""Keyboard shortcut binding for a SelectionEngine."""

from __future__ import annotations

from typing import Callable, Optional

from filedesk.errors import InvalidStateError
from filedesk.events import EventSource, KeyEvent

from .engine import DeleteCallback, SelectionEngine


class KeyboardShortcuts:
    """
    Owns one keydown subscription on an EventSource.

    attach()/detach() bracket the subscription's lifetime; the object is
    also a context manager. Attaching twice without detaching is an error.
    """

    def __init__(
        self,
        engine: SelectionEngine,
        *,
        on_delete: Optional[DeleteCallback] = None,
        on_open: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._engine = engine
        self._on_delete = on_delete
        self._on_open = on_open
        self._source: Optional[EventSource] = None

    @property
    def attached(self) -> bool:
        return self._source is not None

    def attach(self, source: EventSource) -> KeyboardShortcuts:
        if self._source is not None:
            raise InvalidStateError("KeyboardShortcuts is already attached")
        source.add_listener("keydown", self._handle)
        self._source = source
        return self

    def detach(self) -> None:
        if self._source is None:
            return
        self._source.remove_listener("keydown", self._handle)
        self._source = None

    def __enter__(self) -> KeyboardShortcuts:
        if self._source is None:
            raise InvalidStateError("Call attach(source) before entering the context")
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.detach()

    def _handle(self, event: KeyEvent) -> None:
        self._engine.handle_key_down(event, on_delete=self._on_delete, on_open=self._on_open)
