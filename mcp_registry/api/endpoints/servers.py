import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import NoResultFound, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mcp_registry.canonical.formats import is_valid_slug
from mcp_registry.core.caching import PublicCachePolicy, get_cache_policy
from mcp_registry.core.db import get_db
from mcp_registry.schemas.common import ErrorResponse
from mcp_registry.schemas.server import ServerListResponse, ServerPublic
from mcp_registry.services.pagination import decode_cursor, normalize_limit, normalize_sort
from mcp_registry.services.servers import build_filters, fetch_public_server, list_public_servers

log = logging.getLogger(__name__)
router = APIRouter()

_ERRORS = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _error(message: str, status_code: int) -> JSONResponse:
    # Error bodies never carry the public cache directive
    return JSONResponse({"error": message}, status_code=status_code)


@router.get("/servers", response_model=ServerListResponse, responses=_ERRORS)
async def list_servers(
    q: str | None = Query(None, description="Search in name and description"),
    transport: str | None = Query(None, description="stdio | http | both"),
    auth: str | None = Query(None, description="none | oauth | api_key | other"),
    verified: str | None = Query(None, description="true | false"),
    tag: list[str] = Query(default=[], description="Repeatable; all tags must match"),
    sort: str | None = Query(None, description="verified | newest | name"),
    limit: str | None = Query(None, description="1-50, default 20"),
    cursor: str | None = Query(None, description="nextCursor from the previous page"),
    db: AsyncSession = Depends(get_db),
    cache: PublicCachePolicy = Depends(get_cache_policy),
):
    try:
        sort_mode = normalize_sort(sort)
        page_cursor = decode_cursor(cursor, sort_mode)
        filters = build_filters(q=q, transport=transport, auth=auth, verified=verified, tags=tag)

        try:
            page = await list_public_servers(
                db,
                filters=filters,
                sort=sort_mode,
                limit=normalize_limit(limit),
                cursor=page_cursor,
            )
        except SQLAlchemyError:
            log.exception("list servers failed")
            return _error("Failed to fetch servers", 500)

        body = {
            "data": [ServerPublic.model_validate(r).model_dump(mode="json") for r in page.rows],
            "nextCursor": page.next_cursor,
        }
        # total only on the first page
        if page.total is not None:
            body["total"] = page.total
        return JSONResponse(body, headers=cache.headers())
    except Exception:
        log.exception("unexpected error listing servers")
        return _error("Internal server error", 500)


@router.get("/servers/{slug}", response_model=ServerPublic, responses=_ERRORS)
async def get_server(
    slug: str,
    db: AsyncSession = Depends(get_db),
    cache: PublicCachePolicy = Depends(get_cache_policy),
):
    """
    Public fetch of a single MCP server by slug.

    Malformed slugs are rejected before the store is queried.
    """
    try:
        if not is_valid_slug(slug):
            return _error("Invalid slug format", 400)

        try:
            row = await fetch_public_server(db, slug)
        except NoResultFound:
            return _error("Server not found", 404)
        except SQLAlchemyError:
            log.exception("fetch server failed: slug=%s", slug)
            return _error("Failed to fetch server", 500)

        if not row:
            return _error("Server not found", 404)

        body = ServerPublic.model_validate(row).model_dump(mode="json")
        return JSONResponse(body, headers=cache.headers())
    except Exception:
        log.exception("unexpected error fetching server: slug=%s", slug)
        return _error("Internal server error", 500)
