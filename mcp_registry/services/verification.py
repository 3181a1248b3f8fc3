from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mcp_registry.models.server import McpServer
from mcp_registry.models.verification_request import VerificationRequest
from mcp_registry.schemas.verification import VerificationResult
from mcp_registry.services.audit import audit
from mcp_registry.services.auth import Actor


async def request_verification(
    db: AsyncSession,
    *,
    actor: Actor,
    server_id: str,
    notes: str | None = None,
) -> VerificationResult:
    """Owner asks for the verified badge. At most one pending request per server."""
    stmt = select(McpServer.id, McpServer.owner_id, McpServer.verified).where(McpServer.id == server_id)
    server = (await db.execute(stmt)).one_or_none()
    if server is None:
        return VerificationResult(success=False, error_message="Server not found")
    if server.owner_id != actor.account_id:
        return VerificationResult(success=False, error_message="Only the server owner can request verification")
    if server.verified:
        return VerificationResult(success=False, error_message="Server is already verified")

    pending = (
        await db.execute(
            select(VerificationRequest.id).where(
                VerificationRequest.server_id == server_id,
                VerificationRequest.status == "pending",
            )
        )
    ).first()
    if pending is not None:
        return VerificationResult(success=False, error_message="A verification request is already pending")

    req = VerificationRequest(
        server_id=server_id,
        requested_by=actor.account_id,
        status="pending",
        request_notes=(notes or "").strip() or None,
    )
    db.add(req)
    await db.flush()

    await audit(
        db,
        action="verification_requested",
        actor=actor.account_id,
        details={"request_id": req.id, "server_id": server_id},
    )
    await db.commit()
    return VerificationResult(success=True, request_id=req.id)


async def _load_pending(db: AsyncSession, request_id: str) -> tuple[VerificationRequest | None, VerificationResult | None]:
    stmt = select(VerificationRequest).where(VerificationRequest.id == request_id).with_for_update()
    req = (await db.execute(stmt)).scalar_one_or_none()
    if req is None:
        return None, VerificationResult(success=False, error_message="Verification request not found")
    if req.status != "pending":
        return None, VerificationResult(
            success=False, error_message="Verification request has already been reviewed", request_id=req.id
        )
    return req, None


async def approve_verification(
    db: AsyncSession,
    *,
    actor: Actor,
    request_id: str,
    notes: str | None = None,
) -> VerificationResult:
    req, failure = await _load_pending(db, request_id)
    if failure:
        return failure

    server = (
        await db.execute(select(McpServer).where(McpServer.id == req.server_id).with_for_update())
    ).scalar_one_or_none()
    if server is None:
        return VerificationResult(success=False, error_message="Server not found", request_id=req.id)

    now = datetime.now(timezone.utc)
    server.verified = True
    server.verified_at = now

    req.status = "approved"
    req.review_notes = notes
    req.reviewed_by = actor.account_id
    req.reviewed_at = now

    await audit(
        db,
        action="verification_approved",
        actor=actor.account_id,
        details={"request_id": req.id, "server_id": server.id},
    )
    await db.commit()
    return VerificationResult(success=True, request_id=req.id)


async def reject_verification(
    db: AsyncSession,
    *,
    actor: Actor,
    request_id: str,
    notes: str,
) -> VerificationResult:
    req, failure = await _load_pending(db, request_id)
    if failure:
        return failure

    req.status = "rejected"
    req.review_notes = notes
    req.reviewed_by = actor.account_id
    req.reviewed_at = datetime.now(timezone.utc)

    await audit(
        db,
        action="verification_rejected",
        actor=actor.account_id,
        details={"request_id": req.id, "server_id": req.server_id},
    )
    await db.commit()
    return VerificationResult(success=True, request_id=req.id)


async def list_verification_requests(db: AsyncSession, status: str | None) -> list[VerificationRequest]:
    stmt = select(VerificationRequest)
    if status:
        stmt = stmt.where(VerificationRequest.status == status)
    stmt = stmt.order_by(VerificationRequest.created_at.asc(), VerificationRequest.id.asc())
    return list((await db.execute(stmt)).scalars().all())
