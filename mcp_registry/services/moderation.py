"""
Approve/reject workflow for listing submissions.

Each operation runs in a single transaction: on approval the server row, its
tag index rows, the submission status and the audit entry are committed
together. Business-rule failures come back as ModerationResult(success=False);
store failures propagate to the endpoint.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mcp_registry.canonical.registry import CURRENT_SCHEMA_VERSION
from mcp_registry.models.server import McpServer, McpServerTag
from mcp_registry.models.submission import ServerSubmission
from mcp_registry.schemas.submission import ModerationResult
from mcp_registry.services.audit import audit
from mcp_registry.services.auth import Actor
from mcp_registry.services.listing_validate import format_validation_errors, validate_listing

log = logging.getLogger(__name__)


async def _load_pending(db: AsyncSession, submission_id: str) -> tuple[ServerSubmission | None, ModerationResult | None]:
    stmt = select(ServerSubmission).where(ServerSubmission.id == submission_id).with_for_update()
    submission = (await db.execute(stmt)).scalar_one_or_none()
    if submission is None:
        return None, ModerationResult(success=False, error_message="Submission not found")
    if submission.status != "pending":
        return None, ModerationResult(success=False, error_message="Submission has already been reviewed")
    return submission, None


async def _slug_taken(db: AsyncSession, slug: str) -> bool:
    stmt = select(McpServer.id).where(McpServer.slug == slug)
    return (await db.execute(stmt)).scalar_one_or_none() is not None


async def approve_submission(
    db: AsyncSession,
    *,
    actor: Actor,
    submission_id: str,
    notes: str | None = None,
) -> ModerationResult:
    submission, failure = await _load_pending(db, submission_id)
    if failure:
        return failure

    # Stored payloads are re-checked: the schema may have tightened since submission
    try:
        res = validate_listing(
            submission.submitted_payload,
            schema_version=submission.schema_version or CURRENT_SCHEMA_VERSION,
        )
    except KeyError:
        return ModerationResult(success=False, error_message="Unsupported schema version")

    if not res.success:
        messages = format_validation_errors(res.errors)
        submission.validation_errors = messages
        await db.commit()
        return ModerationResult(success=False, error_message="Submission is invalid: " + "; ".join(messages))

    listing = res.data
    if await _slug_taken(db, listing.slug):
        return ModerationResult(success=False, error_message="Slug is already taken")

    now = datetime.now(timezone.utc)
    server = McpServer(
        slug=listing.slug,
        name=listing.name,
        description=listing.description,
        homepage_url=listing.homepage_url,
        repo_url=listing.repo_url,
        docs_url=listing.docs_url,
        tags=list(listing.tags),
        transport=listing.transport,
        auth=listing.auth,
        capabilities=listing.capabilities.model_dump(),
        verified=False,
        owner_id=submission.submitted_by,
        moderation_notes=notes,
    )

    try:
        db.add(server)
        await db.flush()
        db.add_all([McpServerTag(server_id=server.id, tag=tag) for tag in listing.tags])

        submission.status = "approved"
        submission.review_notes = notes
        submission.reviewed_by = actor.account_id
        submission.reviewed_at = now
        submission.server_id = server.id
        submission.validation_errors = None

        await audit(
            db,
            action="submission_approved",
            actor=actor.account_id,
            details={"submission_id": submission_id, "server_id": server.id, "slug": listing.slug},
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        # Lost a race for the slug against a concurrent approval; any other
        # constraint failure is a store error
        if not await _slug_taken(db, listing.slug):
            raise
        log.warning("approve submission %s: slug %s already taken", submission_id, listing.slug)
        return ModerationResult(success=False, error_message="Slug is already taken")

    return ModerationResult(success=True, server_id=server.id)


async def reject_submission(
    db: AsyncSession,
    *,
    actor: Actor,
    submission_id: str,
    notes: str,
) -> ModerationResult:
    submission, failure = await _load_pending(db, submission_id)
    if failure:
        return failure

    submission.status = "rejected"
    submission.review_notes = notes
    submission.reviewed_by = actor.account_id
    submission.reviewed_at = datetime.now(timezone.utc)

    await audit(
        db,
        action="submission_rejected",
        actor=actor.account_id,
        details={"submission_id": submission_id},
    )
    await db.commit()
    return ModerationResult(success=True)
