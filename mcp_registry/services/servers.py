from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mcp_registry.canonical.tags import normalize_tags
from mcp_registry.canonical.v1.listing import AUTH_TYPES, TRANSPORTS
from mcp_registry.models.server import McpServer, McpServerTag
from mcp_registry.services.pagination import CursorData, cursor_from_row

# Public projection. Listed explicitly so columns added to mcp_servers later
# (owner, moderation notes, ...) never reach anonymous callers.
PUBLIC_SERVER_COLUMNS = (
    McpServer.id,
    McpServer.slug,
    McpServer.name,
    McpServer.description,
    McpServer.homepage_url,
    McpServer.repo_url,
    McpServer.docs_url,
    McpServer.tags,
    McpServer.transport,
    McpServer.auth,
    McpServer.capabilities,
    McpServer.verified,
    McpServer.verified_at,
    McpServer.created_at,
    McpServer.updated_at,
)

PUBLIC_SERVER_FIELDS: tuple[str, ...] = tuple(c.key for c in PUBLIC_SERVER_COLUMNS)


@dataclass(frozen=True)
class ServerFilters:
    q: str | None = None
    transport: str | None = None
    auth: str | None = None
    verified: bool | None = None
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class ServerPage:
    rows: list[dict[str, Any]]
    next_cursor: str | None
    total: int | None


async def fetch_public_server(db: AsyncSession, slug: str) -> dict[str, Any]:
    """
    Single public row by slug.

    Raises sqlalchemy.exc.NoResultFound when nothing matches; any other store
    failure propagates as the SQLAlchemyError the driver raised.
    """
    stmt = select(*PUBLIC_SERVER_COLUMNS).where(McpServer.slug == slug)
    row = (await db.execute(stmt)).one()
    return dict(row._mapping)


def parse_verified(value: str | None) -> bool | None:
    if value == "true":
        return True
    if value == "false":
        return False
    return None


def build_filters(
    *,
    q: str | None,
    transport: str | None,
    auth: str | None,
    verified: str | None,
    tags: Sequence[str],
) -> ServerFilters:
    """Drop unknown enum values and empty inputs instead of failing the request."""
    q = (q or "").strip() or None
    return ServerFilters(
        q=q,
        transport=transport if transport in TRANSPORTS else None,
        auth=auth if auth in AUTH_TYPES else None,
        verified=parse_verified(verified),
        tags=tuple(normalize_tags([t for t in tags if t], limit=len(tags))),
    )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _filter_clauses(filters: ServerFilters) -> list:
    clauses = []
    if filters.q:
        pattern = f"%{_escape_like(filters.q)}%"
        clauses.append(
            or_(McpServer.name.ilike(pattern, escape="\\"), McpServer.description.ilike(pattern, escape="\\"))
        )
    if filters.transport:
        clauses.append(McpServer.transport == filters.transport)
    if filters.auth:
        clauses.append(McpServer.auth == filters.auth)
    if filters.verified is not None:
        clauses.append(McpServer.verified.is_(filters.verified))
    for tag in filters.tags:
        # every requested tag must be present
        clauses.append(McpServer.id.in_(select(McpServerTag.server_id).where(McpServerTag.tag == tag)))
    return clauses


def _order_by(sort: str) -> list:
    if sort == "newest":
        return [McpServer.created_at.desc(), McpServer.id.desc()]
    if sort == "name":
        return [McpServer.name.asc(), McpServer.id.asc()]
    return [McpServer.verified.desc(), McpServer.created_at.desc(), McpServer.id.desc()]


def _after_cursor(cursor: CursorData, sort: str):
    # Rows strictly after the cursor in the sort order
    if sort == "newest":
        return or_(
            McpServer.created_at < cursor.c,
            and_(McpServer.created_at == cursor.c, McpServer.id < cursor.i),
        )
    if sort == "name":
        return or_(
            McpServer.name > cursor.n,
            and_(McpServer.name == cursor.n, McpServer.id > cursor.i),
        )
    # Boolean columns only take is_() against True/False
    same_group = and_(
        McpServer.verified.is_(cursor.v),
        or_(
            McpServer.created_at < cursor.c,
            and_(McpServer.created_at == cursor.c, McpServer.id < cursor.i),
        ),
    )
    if cursor.v:
        # unverified rows all sort after the verified group
        return or_(McpServer.verified.is_(False), same_group)
    return same_group


async def list_public_servers(
    db: AsyncSession,
    *,
    filters: ServerFilters,
    sort: str,
    limit: int,
    cursor: CursorData | None = None,
) -> ServerPage:
    clauses = _filter_clauses(filters)

    stmt = select(*PUBLIC_SERVER_COLUMNS).where(*clauses).order_by(*_order_by(sort))
    if cursor is not None:
        stmt = stmt.where(_after_cursor(cursor, sort))
    # One extra row tells us whether there is a next page
    stmt = stmt.limit(limit + 1)

    rows = (await db.execute(stmt)).all()
    has_more = len(rows) > limit
    rows = rows[:limit]

    next_cursor = cursor_from_row(rows[-1], sort) if has_more and rows else None

    total = None
    if cursor is None:
        count_stmt = select(func.count()).select_from(McpServer).where(*clauses)
        total = (await db.execute(count_stmt)).scalar_one()

    return ServerPage(rows=[dict(r._mapping) for r in rows], next_cursor=next_cursor, total=total)
