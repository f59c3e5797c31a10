"""Rename flow with the same duplicate-name handling as drag moves."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from filedesk.dnd.interfaces import DuplicateAction, DuplicateResolver, Notifier
from filedesk.errors import ConflictError, FileDeskError, InvalidArgumentError
from filedesk.models import FileSystemItem, Folder
from filedesk.store import TreeStore

logger = logging.getLogger(__name__)


class RenameApi(Protocol):
    async def rename_folder(
        self, folder_id: str, *, name: str, duplicate_action: Optional[DuplicateAction] = None
    ) -> Any: ...

    async def rename_file(
        self, file_id: str, *, name: str, duplicate_action: Optional[DuplicateAction] = None
    ) -> Any: ...


async def rename_item(
    api: RenameApi,
    store: TreeStore,
    item: FileSystemItem,
    name: str,
    *,
    resolver: DuplicateResolver,
    notifier: Optional[Notifier] = None,
) -> Optional[FileSystemItem]:
    """
    Rename item on the server, then in the store.

    A name collision asks the resolver and retries once with its answer.
    Returns the updated item, or None when the user cancelled the
    duplicate dialog.

    Raises:
        InvalidArgumentError: if name is blank.
        FileDeskError: any other API failure (already reported through
            notifier when one is given).
    """
    new_name = name.strip()
    if not new_name:
        raise InvalidArgumentError("Name must not be empty", details={"item_id": item.id})

    try:
        response = await _call(api, item, new_name, None)
    except ConflictError as exc:
        logger.warning("Name conflict renaming %s to %r (field=%s)", item.id, new_name, exc.field)
        kind = "folder" if isinstance(item, Folder) else "file"
        resolution = await resolver.resolve_duplicate(new_name, kind)
        if resolution.cancelled:
            logger.info("Rename of %s cancelled at duplicate prompt", item.id)
            return None
        try:
            response = await _call(api, item, new_name, resolution.action)
        except FileDeskError as retry_exc:
            _report(notifier, retry_exc)
            raise
    except FileDeskError as exc:
        _report(notifier, exc)
        raise

    final_name = _name_from_response(response) or new_name
    updated = store.update_item(item.id, name=final_name)
    if notifier is not None:
        notifier.success("Item renamed successfully!")
    return updated or item


async def _call(
    api: RenameApi,
    item: FileSystemItem,
    name: str,
    action: Optional[DuplicateAction],
) -> Any:
    if isinstance(item, Folder):
        return await api.rename_folder(item.id, name=name, duplicate_action=action)
    return await api.rename_file(item.id, name=name, duplicate_action=action)


def _name_from_response(response: Any) -> Optional[str]:
    """The server may pick a different name (keep both); prefer what it returned."""
    if not isinstance(response, dict):
        return None
    data = response.get("data", response)
    if isinstance(data, dict):
        for key in ("folder", "file"):
            if isinstance(data.get(key), dict):
                data = data[key]
                break
        value = data.get("name")
        if isinstance(value, str) and value:
            return value
    return None


def _report(notifier: Optional[Notifier], exc: FileDeskError) -> None:
    logger.error("Rename failed: %s", exc)
    if notifier is not None:
        notifier.error(str(exc))
