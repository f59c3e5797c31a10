"""Async client for the storage backend's folder/file endpoints."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx

from filedesk.config import ClientConfig
from filedesk.errors import (
    ApiError,
    FileDeskError,
    HttpErrorInfo,
    NetworkError,
    RateLimitError,
    map_http_error,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


class StorageApiClient:
    """
    Storage API client.

    Notes:
        - Every call returns the decoded JSON body.
        - Non-2xx responses raise filedesk exceptions (see map_http_error).
        - Rate limits, 5xx and transport failures are retried with
          exponential backoff; 409 and other 4xx are raised at once.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self._retry_policy = _RetryPolicy(
            max_retries=config.max_retries,
            initial_delay_sec=config.initial_delay_sec,
        )
        self._sleep = sleep
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_sec,
            headers=dict(config.headers),
            transport=transport,
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> StorageApiClient:
        return cls(ClientConfig.from_env(), **kwargs)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> StorageApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ----------------------------
    # Folders
    # ----------------------------
    async def move_folder(
        self,
        folder_id: str,
        *,
        parent: Optional[str],
        name: str,
        duplicate_action: Optional[str] = None,
    ) -> dict[str, Any]:
        body = _with_action({"parent": parent, "name": name}, duplicate_action)
        return await self._request("POST", f"/folders/{folder_id}/move", json_body=body)

    async def rename_folder(
        self,
        folder_id: str,
        *,
        name: str,
        duplicate_action: Optional[str] = None,
    ) -> dict[str, Any]:
        body = _with_action({"name": name}, duplicate_action)
        return await self._request("POST", f"/folders/{folder_id}/rename", json_body=body)

    async def get_folder_contents(self, folder_id: Optional[str] = None) -> dict[str, Any]:
        """Contents of folder_id, or of the root when folder_id is None."""
        path = "/folders/contents" if folder_id is None else f"/folders/contents/{folder_id}"
        return await self._request("GET", path)

    # ----------------------------
    # Files
    # ----------------------------
    async def move_file(
        self,
        file_id: str,
        *,
        folder: Optional[str],
        name: str,
        duplicate_action: Optional[str] = None,
    ) -> dict[str, Any]:
        body = _with_action({"folder": folder, "name": name}, duplicate_action)
        return await self._request("POST", f"/files/{file_id}/move", json_body=body)

    async def rename_file(
        self,
        file_id: str,
        *,
        name: str,
        duplicate_action: Optional[str] = None,
    ) -> dict[str, Any]:
        body = _with_action({"name": name}, duplicate_action)
        return await self._request("POST", f"/files/{file_id}/rename", json_body=body)

    # ----------------------------
    # Internals
    # ----------------------------
    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        async def send() -> dict[str, Any]:
            response = await self._client.request(method, path, json=json_body)
            if response.is_error:
                raise map_http_error(_response_to_info(response))
            return _decode(response)

        return await self._execute(send, label=f"{method} {path}")

    async def _execute(self, func: Callable[[], Awaitable[T]], *, label: str) -> T:
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(self._retry_policy.max_retries + 1):
            try:
                return await func()
            except Exception as exc:
                mapped = self._map_exception(exc)
                if self._should_retry(mapped) and attempt < self._retry_policy.max_retries:
                    logger.warning(
                        "%s failed (%s); retrying in %.2fs (attempt %d/%d)",
                        label,
                        mapped,
                        delay,
                        attempt + 1,
                        self._retry_policy.max_retries,
                    )
                    await self._sleep(delay)
                    delay *= 2
                    continue
                if mapped is exc:
                    raise
                raise mapped from exc

        raise ApiError("Unexpected retry loop termination")

    def _should_retry(self, exc: Exception) -> bool:
        if isinstance(exc, RateLimitError):
            return True
        if isinstance(exc, NetworkError):
            return True
        if isinstance(exc, ApiError):
            status_code = getattr(exc, "details", {}).get("status_code")
            return isinstance(status_code, int) and 500 <= status_code <= 599
        return False

    def _map_exception(self, exc: Exception) -> Exception:
        if isinstance(exc, FileDeskError):
            return exc
        if isinstance(exc, (httpx.TransportError, OSError, TimeoutError)):
            return NetworkError("Network error", cause=exc)
        return ApiError("Storage API error", cause=exc)


def _with_action(body: dict[str, Any], duplicate_action: Optional[str]) -> dict[str, Any]:
    if duplicate_action is not None:
        body["duplicateAction"] = duplicate_action
    return body


def _decode(response: httpx.Response) -> dict[str, Any]:
    if not response.content:
        return {}
    try:
        payload = response.json()
    except json.JSONDecodeError as exc:
        raise ApiError(
            "Invalid JSON in response",
            details={"status_code": response.status_code},
            cause=exc,
        ) from exc
    return payload if isinstance(payload, dict) else {"data": payload}


def _response_to_info(response: httpx.Response) -> HttpErrorInfo:
    """
    Read the backend error body:
        {"success": false, "statusCode": 409, "message": "...",
         "errors": [{"name": "An item with this name already exists"}]}
    """
    message: Optional[str] = None
    field: Optional[str] = None
    details: dict[str, Any] = {}

    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        payload = None

    if isinstance(payload, dict):
        if isinstance(payload.get("message"), str):
            message = payload["message"] or None
        errors = payload.get("errors") or []
        if isinstance(errors, list) and errors and isinstance(errors[0], dict) and errors[0]:
            field, field_message = next(iter(errors[0].items()))
            details["field_message"] = field_message
            details["errors"] = errors

    return HttpErrorInfo(
        status_code=response.status_code,
        message=message or response.reason_phrase or None,
        field=field if isinstance(field, str) else None,
        details=details or None,
    )
