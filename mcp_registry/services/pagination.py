"""
Keyset pagination helpers for the public server list.

A cursor is the sort key of the last row on a page, encoded as unpadded
base64url JSON. Each sort mode carries only the columns it orders by:

    verified: {"s": "verified", "v": bool, "c": created_at, "i": id}
    newest:   {"s": "newest", "c": created_at, "i": id}
    name:     {"s": "name", "n": name, "i": id}

Cursors are opaque to clients; anything that fails to decode (or was issued
for a different sort mode) is treated as "no cursor".
"""
from __future__ import annotations

import base64
import binascii
import json
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from mcp_registry.core.ids import is_uuid_like

SortMode = Literal["verified", "newest", "name"]
SORT_MODES: tuple[str, ...] = ("verified", "newest", "name")
DEFAULT_SORT: SortMode = "verified"

DEFAULT_LIMIT = 20
MAX_LIMIT = 50
MIN_LIMIT = 1

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class CursorData:
    s: str
    i: str
    v: bool | None = None
    c: datetime | None = None
    n: str | None = None


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(value: str) -> bytes:
    padded = value + "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def encode_cursor(data: CursorData) -> str:
    body: dict[str, Any] = {"s": data.s, "i": data.i}
    if data.v is not None:
        body["v"] = data.v
    if data.c is not None:
        body["c"] = data.c.isoformat()
    if data.n is not None:
        body["n"] = data.n
    return _b64url_encode(json.dumps(body, separators=(",", ":")).encode("utf-8"))


def _parse_datetime(value: Any) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def decode_cursor(cursor: str | None, sort: str) -> CursorData | None:
    """
    Decode a cursor issued for `sort`. Returns None when it is malformed.
    """
    if not cursor:
        return None
    try:
        data = json.loads(_b64url_decode(cursor).decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        return None

    if not isinstance(data, dict):
        return None

    s = data.get("s")
    i = data.get("i")
    if s != sort or s not in SORT_MODES:
        return None
    if not isinstance(i, str) or not is_uuid_like(i):
        return None

    if s == "name":
        n = data.get("n")
        if not isinstance(n, str):
            return None
        return CursorData(s=s, i=i, n=n)

    c = _parse_datetime(data.get("c"))
    if c is None:
        return None
    if s == "newest":
        return CursorData(s=s, i=i, c=c)

    v = data.get("v")
    if not isinstance(v, bool):
        return None
    return CursorData(s=s, i=i, v=v, c=c)


def cursor_from_row(row: Any, sort: str) -> str:
    """Build the cursor pointing just past `row` (a mapping or ORM-like object)."""
    get = row.get if isinstance(row, dict) else lambda k: getattr(row, k)
    if sort == "name":
        return encode_cursor(CursorData(s=sort, i=get("id"), n=get("name")))
    if sort == "newest":
        return encode_cursor(CursorData(s=sort, i=get("id"), c=get("created_at")))
    return encode_cursor(CursorData(s=sort, i=get("id"), v=bool(get("verified")), c=get("created_at")))


def normalize_limit(limit: Any) -> int:
    if isinstance(limit, bool):
        return DEFAULT_LIMIT
    if isinstance(limit, str):
        # leading integer wins: "10.5" -> 10, "5abc" -> 5
        m = _LEADING_INT.match(limit)
        if m is None:
            return DEFAULT_LIMIT
        limit = int(m.group(1))
    if isinstance(limit, int):
        return min(max(limit, MIN_LIMIT), MAX_LIMIT)
    return DEFAULT_LIMIT


def normalize_sort(sort: str | None) -> SortMode:
    if sort in SORT_MODES:
        return sort  # type: ignore[return-value]
    return DEFAULT_SORT
