from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession
from mcp_registry.models.audit_log import AuditLog

async def audit(
    db: AsyncSession,
    *,
    action: str,
    actor: str | None,
    details: dict | None = None,
) -> None:
    db.add(AuditLog(
        action=action,
        actor=actor,
        details=details or {},
    ))
