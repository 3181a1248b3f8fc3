import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mcp_registry.core.db import get_db
from mcp_registry.core.ids import is_uuid_like
from mcp_registry.schemas.common import ErrorResponse, ReviewNotes
from mcp_registry.schemas.submission import ModerationResult, SubmissionOut
from mcp_registry.schemas.verification import VerificationRequestOut, VerificationResult
from mcp_registry.services import moderation, verification
from mcp_registry.services.auth import Actor, require_admin
from mcp_registry.services.submissions import SUBMISSION_STATUSES, list_submissions_by_status

log = logging.getLogger(__name__)
router = APIRouter(prefix="/admin")

_ERRORS = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _notes(payload: ReviewNotes | None) -> str | None:
    if payload is None or payload.notes is None:
        return None
    return payload.notes.strip() or None


def _status_filter(status: str | None) -> str | None:
    return status if status in SUBMISSION_STATUSES else None


@router.get("/submissions", response_model=list[SubmissionOut])
async def list_submissions(
    status: str | None = Query("pending", description="pending | approved | rejected; anything else lists all"),
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[SubmissionOut]:
    rows = await list_submissions_by_status(db, _status_filter(status))
    return [SubmissionOut.model_validate(r) for r in rows]


@router.post("/submissions/{submission_id}/approve", response_model=ModerationResult, responses=_ERRORS)
async def approve_submission(
    submission_id: str,
    payload: ReviewNotes | None = None,
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if not is_uuid_like(submission_id):
        return JSONResponse({"error": "Invalid submission ID"}, status_code=400)

    try:
        result = await moderation.approve_submission(
            db, actor=actor, submission_id=submission_id, notes=_notes(payload)
        )
    except SQLAlchemyError:
        await db.rollback()
        log.exception("approve submission failed: id=%s", submission_id)
        return JSONResponse({"error": "Failed to approve submission. Please try again."}, status_code=500)

    if result.success:
        log.info("submission approved: id=%s server=%s by=%s", submission_id, result.server_id, actor.account_id)
    return result


@router.post("/submissions/{submission_id}/reject", response_model=ModerationResult, responses=_ERRORS)
async def reject_submission(
    submission_id: str,
    payload: ReviewNotes | None = None,
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if not is_uuid_like(submission_id):
        return JSONResponse({"error": "Invalid submission ID"}, status_code=400)

    notes = _notes(payload)
    if not notes:
        return JSONResponse({"error": "Notes are required when rejecting a submission"}, status_code=400)

    try:
        return await moderation.reject_submission(db, actor=actor, submission_id=submission_id, notes=notes)
    except SQLAlchemyError:
        await db.rollback()
        log.exception("reject submission failed: id=%s", submission_id)
        return JSONResponse({"error": "Failed to reject submission. Please try again."}, status_code=500)


@router.get("/verification-requests", response_model=list[VerificationRequestOut])
async def list_verification_requests(
    status: str | None = Query("pending", description="pending | approved | rejected; anything else lists all"),
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[VerificationRequestOut]:
    rows = await verification.list_verification_requests(db, _status_filter(status))
    return [VerificationRequestOut.model_validate(r) for r in rows]


@router.post("/verification-requests/{request_id}/approve", response_model=VerificationResult, responses=_ERRORS)
async def approve_verification(
    request_id: str,
    payload: ReviewNotes | None = None,
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if not is_uuid_like(request_id):
        return JSONResponse({"error": "Invalid request ID"}, status_code=400)

    try:
        return await verification.approve_verification(
            db, actor=actor, request_id=request_id, notes=_notes(payload)
        )
    except SQLAlchemyError:
        await db.rollback()
        log.exception("approve verification failed: id=%s", request_id)
        return JSONResponse({"error": "Failed to approve verification. Please try again."}, status_code=500)


@router.post("/verification-requests/{request_id}/reject", response_model=VerificationResult, responses=_ERRORS)
async def reject_verification(
    request_id: str,
    payload: ReviewNotes | None = None,
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if not is_uuid_like(request_id):
        return JSONResponse({"error": "Invalid request ID"}, status_code=400)

    notes = _notes(payload)
    if not notes:
        return JSONResponse(
            {"error": "Notes are required when rejecting a verification request"},
            status_code=400,
        )

    try:
        return await verification.reject_verification(db, actor=actor, request_id=request_id, notes=notes)
    except SQLAlchemyError:
        await db.rollback()
        log.exception("reject verification failed: id=%s", request_id)
        return JSONResponse({"error": "Failed to reject verification. Please try again."}, status_code=500)
