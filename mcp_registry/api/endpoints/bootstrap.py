import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mcp_registry.core.config import settings
from mcp_registry.core.db import get_db
from mcp_registry.core.security import safe_equal
from mcp_registry.models.account import Account
from mcp_registry.models.bootstrap_state import ADMIN_BOOTSTRAP_DONE, BootstrapState
from mcp_registry.schemas.account import BootstrapOut
from mcp_registry.services.accounts import normalize_email
from mcp_registry.services.audit import audit
from mcp_registry.services.rate_limit import TokenRateLimiter, client_ip, get_rate_limiter

log = logging.getLogger(__name__)
router = APIRouter()

BOOTSTRAP_RATE_LIMIT = 5
BOOTSTRAP_WINDOW_SECONDS = 60


def _error(message: str, status_code: int, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code, headers=headers)


@router.post("/admin/bootstrap", response_model=BootstrapOut)
async def bootstrap_admin(
    request: Request,
    x_bootstrap_token: str | None = Header(default=None),
    limiter: TokenRateLimiter = Depends(get_rate_limiter),
    db: AsyncSession = Depends(get_db),
):
    """
    One-time promotion of the configured account to admin.

    Requires the x-bootstrap-token header and a body {"email": ...} that both
    match configuration. Disables itself after the first success.
    """
    try:
        rl = await limiter.allow(
            key=f"admin_bootstrap:{client_ip(request)}",
            limit=BOOTSTRAP_RATE_LIMIT,
            window_seconds=BOOTSTRAP_WINDOW_SECONDS,
        )
        if not rl.allowed:
            return _error("Too many requests", 429, headers={"Retry-After": str(rl.reset_seconds)})

        token = settings.admin_bootstrap_token
        email = settings.admin_bootstrap_email
        if not token or not email:
            # generic on purpose: do not reveal which setting is missing
            return _error("Not configured", 503)

        if not x_bootstrap_token or not safe_equal(x_bootstrap_token, token):
            return _error("Unauthorized", 401)

        try:
            body = await request.json()
        except ValueError:
            return _error("Invalid request", 400)

        provided = body.get("email") if isinstance(body, dict) else None
        if not isinstance(provided, str) or not safe_equal(normalize_email(provided), normalize_email(email)):
            return _error("Unauthorized", 401)

        state = (
            await db.execute(select(BootstrapState).where(BootstrapState.key == ADMIN_BOOTSTRAP_DONE))
        ).scalar_one_or_none()
        if state is not None and state.value == "true":
            return _error("Bootstrap already completed", 409)

        account = (
            await db.execute(select(Account).where(Account.email == normalize_email(email)))
        ).scalar_one_or_none()
        if account is None:
            return _error("User not found. Please sign up first.", 404)

        account.role = "admin"
        if state is None:
            db.add(BootstrapState(key=ADMIN_BOOTSTRAP_DONE, value="true"))
        else:
            state.value = "true"

        await audit(
            db,
            action="admin_bootstrap",
            actor=account.id,
            details={"email": account.email, "timestamp": datetime.now(timezone.utc).isoformat()},
        )
        await db.commit()
        log.info("admin bootstrap completed: account=%s", account.id)

        return BootstrapOut(success=True, message="Admin bootstrap completed", userId=account.id)
    except Exception:
        log.exception("admin bootstrap failed")
        return _error("Internal error", 500)


@router.get("/admin/bootstrap", include_in_schema=False)
async def bootstrap_admin_get() -> JSONResponse:
    return _error("Method not allowed", 405)
