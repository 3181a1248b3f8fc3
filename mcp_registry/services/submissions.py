from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mcp_registry.models.submission import ServerSubmission
from mcp_registry.services.audit import audit
from mcp_registry.services.auth import Actor
from mcp_registry.services.listing_validate import ListingValidationResult

SUBMISSION_STATUSES = ("pending", "approved", "rejected")


async def create_submission(
    db: AsyncSession,
    *,
    actor: Actor,
    result: ListingValidationResult,
) -> ServerSubmission:
    """
    Queue a validated listing for moderation.

    Slug uniqueness is not checked here; it is enforced when the submission is
    approved and the server row is written.
    """
    payload: dict[str, Any] | None = result.normalized()
    if payload is None:
        raise ValueError("create_submission needs a successful validation result")

    submission = ServerSubmission(
        submitted_by=actor.account_id,
        submitted_payload=payload,
        schema_version=result.schema_version,
        status="pending",
    )
    db.add(submission)
    await db.flush()

    await audit(
        db,
        action="submission_created",
        actor=actor.account_id,
        details={"submission_id": submission.id, "slug": payload["slug"]},
    )
    await db.commit()
    return submission


async def list_submissions_for_account(db: AsyncSession, account_id: str) -> list[ServerSubmission]:
    stmt = (
        select(ServerSubmission)
        .where(ServerSubmission.submitted_by == account_id)
        .order_by(ServerSubmission.created_at.desc(), ServerSubmission.id.desc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def list_submissions_by_status(db: AsyncSession, status: str | None) -> list[ServerSubmission]:
    stmt = select(ServerSubmission)
    if status:
        stmt = stmt.where(ServerSubmission.status == status)
    # oldest first: review queue order
    stmt = stmt.order_by(ServerSubmission.created_at.asc(), ServerSubmission.id.asc())
    return list((await db.execute(stmt)).scalars().all())
