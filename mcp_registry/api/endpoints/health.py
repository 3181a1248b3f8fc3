import time
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from mcp_registry.core.caching import NO_STORE
from mcp_registry.core.config import settings

router = APIRouter()

_STARTED_AT = time.monotonic()


@router.get("/health")
async def health() -> JSONResponse:
    """Liveness for monitors and load balancers. Never cached."""
    body = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "version": settings.app_version,
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
    }
    return JSONResponse(body, status_code=200, headers={"Cache-Control": NO_STORE})
