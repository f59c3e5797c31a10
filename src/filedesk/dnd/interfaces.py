"""
Collaborators consumed by the drop flow.

The move API, the duplicate dialog and the toast notifier live outside this
package; they are described here as Protocols so that any object with the
right shape (the HTTP client, a UI bridge, a test fake) can be plugged in.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional, Protocol

logger = logging.getLogger(__name__)

DuplicateAction = Literal["replace", "keepBoth"]
DUPLICATE_ACTIONS: frozenset[str] = frozenset({"replace", "keepBoth"})


class MoveApi(Protocol):
    async def move_folder(
        self,
        folder_id: str,
        *,
        parent: Optional[str],
        name: str,
        duplicate_action: Optional[DuplicateAction] = None,
    ) -> Any: ...

    async def move_file(
        self,
        file_id: str,
        *,
        folder: Optional[str],
        name: str,
        duplicate_action: Optional[DuplicateAction] = None,
    ) -> Any: ...


class DuplicateDialogService(Protocol):
    def open_duplicate_dialog(
        self,
        name: str,
        kind: str,
        on_resolve: Callable[[DuplicateAction], None],
        on_cancel: Optional[Callable[[], None]] = None,
    ) -> None: ...

    def close_duplicate_dialog(self) -> None: ...


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


@dataclass(frozen=True, slots=True)
class DuplicateResolution:
    """The user's answer to a name collision; action is None when cancelled."""

    action: Optional[DuplicateAction] = None

    @property
    def cancelled(self) -> bool:
        return self.action is None

    @classmethod
    def accept(cls, action: DuplicateAction) -> DuplicateResolution:
        if action not in DUPLICATE_ACTIONS:
            raise ValueError(f"Unknown duplicate action: {action!r}")
        return cls(action=action)

    @classmethod
    def cancel(cls) -> DuplicateResolution:
        return cls(action=None)


class DuplicateResolver(Protocol):
    async def resolve_duplicate(self, name: str, kind: str) -> DuplicateResolution: ...


class DialogDuplicateResolver:
    """
    Bridges a callback-style duplicate dialog into an awaitable decision.

    The dialog's on_resolve/on_cancel callbacks complete a Future that the
    drop flow awaits. There is no timeout: the flow waits until the user
    answers. If the awaiting task is cancelled the dialog is closed and the
    cancellation propagates.
    """

    def __init__(self, dialogs: DuplicateDialogService) -> None:
        self._dialogs = dialogs

    async def resolve_duplicate(self, name: str, kind: str) -> DuplicateResolution:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[DuplicateResolution] = loop.create_future()

        def on_resolve(action: DuplicateAction) -> None:
            if future.done():
                return
            try:
                resolution = DuplicateResolution.accept(action)
            except ValueError as exc:
                # An unusable answer skips the item instead of stalling the drop.
                logger.warning("Duplicate dialog for %r answered badly: %s", name, exc)
                resolution = DuplicateResolution.cancel()
            future.set_result(resolution)

        def on_cancel() -> None:
            if not future.done():
                future.set_result(DuplicateResolution.cancel())

        self._dialogs.open_duplicate_dialog(name, kind, on_resolve, on_cancel)
        try:
            return await future
        finally:
            self._dialogs.close_duplicate_dialog()


class LoggingNotifier:
    """Notifier that only writes to the log; used when no UI is attached."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.error(message)
