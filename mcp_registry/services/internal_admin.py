from fastapi import Header, HTTPException

from mcp_registry.core.config import settings
from mcp_registry.core.security import safe_equal


async def require_internal_admin(x_internal_admin_key: str | None = Header(default=None)) -> None:
    if not x_internal_admin_key or not safe_equal(x_internal_admin_key, settings.internal_admin_key):
        raise HTTPException(status_code=403, detail="Internal admin key required")
