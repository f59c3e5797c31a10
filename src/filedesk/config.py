"""Configuration objects for filedesk."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

DEFAULT_ROOT_FOLDER_ID: str = "root"
DEFAULT_ROOT_FOLDER_NAME: str = "Files"
DIRECTORY_CONTAINER_ID: str = "directory-view-container"


@dataclass(slots=True, frozen=True)
class SelectionConfig:
    """
    Selection timing and limits.

    double_click_ms: two clicks on the same item within this window open it.
    max_range: upper bound on the number of items a shift-range selects.
    """

    double_click_ms: float = 350.0
    max_range: int = 1000

    def __post_init__(self) -> None:
        if self.double_click_ms <= 0:
            raise ValueError("SelectionConfig.double_click_ms must be positive")
        if self.max_range < 1:
            raise ValueError("SelectionConfig.max_range must be >= 1")


@dataclass(slots=True, frozen=True)
class ActivationConstraint:
    """Hold delay (ms) and movement tolerance (px) before a press becomes a drag."""

    delay_ms: float
    tolerance_px: float

    def __post_init__(self) -> None:
        if self.delay_ms < 0 or self.tolerance_px < 0:
            raise ValueError("ActivationConstraint values must be non-negative")


@dataclass(slots=True, frozen=True)
class DragConfig:
    pointer: ActivationConstraint = field(default_factory=lambda: ActivationConstraint(150.0, 5.0))
    touch: ActivationConstraint = field(default_factory=lambda: ActivationConstraint(250.0, 8.0))
    collision_padding: float = 8.0
    root_folder_id: str = DEFAULT_ROOT_FOLDER_ID
    directory_container_id: str = DIRECTORY_CONTAINER_ID

    def __post_init__(self) -> None:
        if self.collision_padding < 0:
            raise ValueError("DragConfig.collision_padding must be non-negative")
        if not self.root_folder_id.strip():
            raise ValueError("DragConfig.root_folder_id must be a non-empty string")


@dataclass(slots=True, frozen=True)
class ClientConfig:
    """
    Storage API connection settings.

    base_url must include the API prefix, e.g. "https://files.example.com/api".
    """

    base_url: str
    timeout_sec: float = 30.0
    max_retries: int = 3
    initial_delay_sec: float = 1.0
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.base_url, str) or not self.base_url.strip():
            raise ValueError("ClientConfig.base_url must be a non-empty string")
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError("ClientConfig.base_url must be an http(s) URL")
        if self.timeout_sec <= 0:
            raise ValueError("ClientConfig.timeout_sec must be positive")
        if self.max_retries < 0:
            raise ValueError("ClientConfig.max_retries must be >= 0")
        if self.initial_delay_sec < 0:
            raise ValueError("ClientConfig.initial_delay_sec must be >= 0")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ClientConfig:
        if not isinstance(data, Mapping):
            raise TypeError("ClientConfig data must be a mapping")

        headers = dict(data.get("headers") or {})
        token = data.get("token")
        if isinstance(token, str) and token.strip():
            headers.setdefault("Authorization", f"Bearer {token.strip()}")

        kwargs: dict[str, Any] = {"base_url": data.get("base_url", ""), "headers": headers}
        for key in ("timeout_sec", "max_retries", "initial_delay_sec"):
            if data.get(key) is not None:
                kwargs[key] = data[key]
        return cls(**kwargs)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> ClientConfig:
        """
        Build from environment variables.

        Required:
            - FILEDESK_API_URL
        Optional:
            - FILEDESK_API_TIMEOUT (seconds)
            - FILEDESK_API_TOKEN (sent as a bearer token)
        """
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {"base_url": env.get("FILEDESK_API_URL", "").strip()}

        timeout_raw = env.get("FILEDESK_API_TIMEOUT", "").strip()
        if timeout_raw:
            try:
                data["timeout_sec"] = float(timeout_raw)
            except ValueError as exc:
                raise ValueError("FILEDESK_API_TIMEOUT must be a number") from exc

        data["token"] = env.get("FILEDESK_API_TOKEN")
        return cls.from_dict(data)
