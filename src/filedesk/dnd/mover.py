"""Serialized move of a dragged batch, with duplicate-name resolution."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from filedesk.errors import ApiError, ConflictError, FileDeskError, MoveRejectedError
from filedesk.models import (
    FileSystemItem,
    Folder,
    MoveBatchResult,
    MoveOutcome,
    summarize_outcomes,
)
from filedesk.store import TreeStore, validate_move_no_cycle, validate_parent_changes

from .interfaces import DuplicateAction, DuplicateResolver, MoveApi, Notifier

logger = logging.getLogger(__name__)


class MoveBatchRunner:
    """
    Moves items one at a time, in order.

    Policy:
        - Structurally invalid moves (cycle, already in place) are skipped
          without a network call.
        - A name conflict suspends the loop until the resolver answers, then
          the same item is retried with the chosen duplicate action. A
          cancelled answer skips only that item.
        - Any other error stops the batch. Items already moved stay moved
          and exactly one error is reported.
        - The store is updated after each server-confirmed move.
    """

    def __init__(
        self,
        api: MoveApi,
        store: TreeStore,
        *,
        resolver: DuplicateResolver,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self._api = api
        self._store = store
        self._resolver = resolver
        self._notifier = notifier

    async def run(
        self,
        items: Iterable[FileSystemItem],
        parent: Optional[str],
        *,
        target_id: Optional[str] = None,
    ) -> MoveBatchResult:
        """
        Move items under parent (None = root).

        target_id is the destination as the store knows it; it defaults to
        parent and only differs when the root folder is addressed by id.
        """
        batch = list(items)
        destination = target_id if target_id is not None else parent
        store_target = self._store.normalize_target(destination)

        outcomes: list[MoveOutcome] = []
        stopped_item_id: Optional[str] = None

        for index, dragged in enumerate(batch):
            item = self._store.get(dragged.id) or dragged
            try:
                self._precheck(item, store_target)
            except MoveRejectedError as exc:
                logger.debug("Skipping %s: %s", item.id, exc)
                outcomes.append(_skipped_outcome(item, exc))
                continue

            outcome = await self._move_one(item, parent, store_target)
            outcomes.append(outcome)
            if outcome.status == "failed":
                stopped_item_id = item.id
                outcomes.extend(_not_attempted(rest) for rest in batch[index + 1 :])
                break

        summary = summarize_outcomes(outcomes)
        if stopped_item_id is not None:
            status = "partial" if summary["moved"] else "failed"
        else:
            status = "success"

        if summary["moved"]:
            self._notify_success(summary["moved"], destination)

        logger.info(
            "Move batch to %s finished: status=%s summary=%s",
            destination,
            status,
            summary,
        )
        return MoveBatchResult(
            status=status,
            target_id=destination,
            outcomes=outcomes,
            stopped_item_id=stopped_item_id,
            summary=summary,
        )

    # ----------------------------
    # Internals
    # ----------------------------
    def _precheck(self, item: FileSystemItem, store_target: Optional[str]) -> None:
        snapshot = self._store.snapshot
        validate_move_no_cycle(snapshot, item.id, store_target)
        if snapshot.has(item.id):
            validate_parent_changes(snapshot, item.id, store_target)

    async def _move_one(
        self,
        item: FileSystemItem,
        parent: Optional[str],
        store_target: Optional[str],
    ) -> MoveOutcome:
        attempts = 0
        action: Optional[DuplicateAction] = None

        while True:
            attempts += 1
            try:
                await self._call(item, parent, action)
                break
            except ConflictError as exc:
                if action is not None:
                    # The retry itself collided; treat like any other failure.
                    return self._failed(item, exc, attempts, action)

                logger.warning("Name conflict moving %r (%s)", item.name, item.id)
                resolution = await self._resolver.resolve_duplicate(item.name, _dialog_kind(item))
                if resolution.cancelled:
                    logger.warning("Duplicate resolution cancelled; skipping %s", item.id)
                    return MoveOutcome(
                        item_id=item.id,
                        name=item.name,
                        status="skipped",
                        attempts=attempts,
                        error_type=exc.__class__.__name__,
                        error_message=str(exc),
                        error_details=exc.details or None,
                    )
                action = resolution.action
            except FileDeskError as exc:
                return self._failed(item, exc, attempts, action)
            except Exception as exc:
                # asyncio.CancelledError is a BaseException and propagates.
                wrapped = ApiError(
                    str(exc) or exc.__class__.__name__,
                    details={"error_type": exc.__class__.__name__},
                    cause=exc,
                )
                return self._failed(item, wrapped, attempts, action)

        self._apply(item, store_target)
        return MoveOutcome(
            item_id=item.id,
            name=item.name,
            status="moved",
            attempts=attempts,
            duplicate_action=action,
        )

    async def _call(
        self,
        item: FileSystemItem,
        parent: Optional[str],
        action: Optional[DuplicateAction],
    ) -> None:
        if isinstance(item, Folder):
            await self._api.move_folder(item.id, parent=parent, name=item.name, duplicate_action=action)
        else:
            await self._api.move_file(item.id, folder=parent, name=item.name, duplicate_action=action)

    def _apply(self, item: FileSystemItem, store_target: Optional[str]) -> None:
        if not self._store.has(item.id):
            return
        if not self._store.move_item(item.id, store_target):
            # Destination is outside the loaded tree; drop the stale entry.
            self._store.remove_item(item.id)

    def _failed(
        self,
        item: FileSystemItem,
        exc: FileDeskError,
        attempts: int,
        action: Optional[DuplicateAction],
    ) -> MoveOutcome:
        logger.exception("Move of %s aborted the batch", item.id, exc_info=exc)
        if self._notifier is not None:
            self._notifier.error(f'Failed to move "{item.name}": {exc}')
        return MoveOutcome(
            item_id=item.id,
            name=item.name,
            status="failed",
            attempts=attempts,
            duplicate_action=action,
            error_type=exc.__class__.__name__,
            error_message=str(exc),
            error_details=exc.details or None,
        )

    def _notify_success(self, moved: int, target_id: Optional[str]) -> None:
        if self._notifier is None:
            return
        if target_id is None or self._store.is_root_folder_id(target_id):
            destination = self._store.root_folder_name
        else:
            folder = self._store.get_folder(target_id)
            destination = folder.name if folder is not None else target_id
        noun = "item" if moved == 1 else "items"
        self._notifier.success(f'Moved {moved} {noun} to "{destination}"')


def _dialog_kind(item: FileSystemItem) -> str:
    return "folder" if isinstance(item, Folder) else "file"


def _skipped_outcome(item: FileSystemItem, exc: MoveRejectedError) -> MoveOutcome:
    return MoveOutcome(
        item_id=item.id,
        name=item.name,
        status="skipped",
        error_type=exc.__class__.__name__,
        error_message=str(exc),
        error_details=exc.details or None,
    )


def _not_attempted(item: FileSystemItem) -> MoveOutcome:
    return MoveOutcome(item_id=item.id, name=item.name, status="not_attempted")
