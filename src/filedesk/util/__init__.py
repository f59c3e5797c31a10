from .mime import MIME_CATEGORIES, OTHER_CATEGORY, mime_category
from .time import (
    monotonic_ms,
    normalize_dt,
    now_utc,
    parse_optional_timestamp,
    parse_timestamp,
)

__all__ = [
    "MIME_CATEGORIES",
    "OTHER_CATEGORY",
    "mime_category",
    "now_utc",
    "monotonic_ms",
    "parse_timestamp",
    "parse_optional_timestamp",
    "normalize_dt",
]
