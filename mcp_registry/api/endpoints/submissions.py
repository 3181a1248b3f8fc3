import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mcp_registry.core.db import get_db
from mcp_registry.schemas.common import ErrorResponse
from mcp_registry.schemas.submission import SubmissionCreated, SubmissionOut
from mcp_registry.services.auth import Actor, get_actor
from mcp_registry.services.listing_validate import format_validation_errors, validate_listing
from mcp_registry.services.submissions import create_submission, list_submissions_for_account

log = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/submissions",
    status_code=201,
    response_model=SubmissionCreated,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def submit_server(
    request: Request,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    """
    Submit a listing for review. The body is a raw listing payload; it is
    validated and normalized here and stored as a pending submission.
    """
    try:
        raw = await request.json()
    except ValueError:
        return JSONResponse({"error": "Invalid request"}, status_code=400)

    res = validate_listing(raw)
    if not res.success:
        return JSONResponse(
            {"error": "Validation failed", "details": format_validation_errors(res.errors)},
            status_code=422,
        )

    try:
        submission = await create_submission(db, actor=actor, result=res)
    except SQLAlchemyError:
        await db.rollback()
        log.exception("submission insert failed: account=%s", actor.account_id)
        return JSONResponse({"error": "Failed to submit. Please try again."}, status_code=500)

    return SubmissionCreated(id=submission.id, status=submission.status, schema_version=res.schema_version)


@router.get("/my/submissions", response_model=list[SubmissionOut])
async def my_submissions(
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> list[SubmissionOut]:
    rows = await list_submissions_for_account(db, actor.account_id)
    return [SubmissionOut.model_validate(r) for r in rows]
