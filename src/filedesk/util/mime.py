from __future__ import annotations

# Order matters: the first matching category wins.
MIME_CATEGORIES: dict[str, tuple[str, ...]] = {
    "image": ("image/",),
    "video": ("video/",),
    "audio": ("audio/",),
    "document": (
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ),
    "spreadsheet": (
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ),
    "presentation": (
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ),
    "archive": (
        "application/zip",
        "application/x-rar-compressed",
        "application/x-7z-compressed",
    ),
    "code": (
        "text/plain",
        "text/html",
        "text/css",
        "text/javascript",
        "application/json",
    ),
}

OTHER_CATEGORY: str = "other"


def mime_category(mime_type: str) -> str:
    """Return the coarse category used by kind sorting ('image', 'code', ...)."""
    for category, prefixes in MIME_CATEGORIES.items():
        if any(mime_type.startswith(prefix) for prefix in prefixes):
            return category
    return OTHER_CATEGORY
