from __future__ import annotations

from collections.abc import Iterable

MAX_TAGS = 10
TAG_MAX_LENGTH = 50


def normalize_tag(value: str) -> str:
    """
    Canonical tag form: lowercased, surrounding whitespace stripped.
    Internal spacing is kept ("MCP Server" -> "mcp server").
    """
    return value.lower().strip()


def is_valid_tag(value: str) -> bool:
    return normalize_tag(value) != ""


def normalize_tags(values: Iterable[str], *, limit: int = MAX_TAGS) -> list[str]:
    """
    Bulk transform used by the listing schema.

    Tags that normalize to "" are dropped silently, duplicates collapse onto the
    first occurrence, and the result is cut to `limit` AFTER deduplication.
    """
    seen: dict[str, None] = {}
    for value in values:
        tag = normalize_tag(value)
        if tag:
            seen.setdefault(tag, None)
    return list(seen)[:limit]
