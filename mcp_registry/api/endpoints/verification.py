import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mcp_registry.core.db import get_db
from mcp_registry.core.ids import is_uuid_like
from mcp_registry.schemas.common import ErrorResponse
from mcp_registry.schemas.verification import VerificationRequestCreate, VerificationResult
from mcp_registry.services.auth import Actor, get_actor
from mcp_registry.services.verification import request_verification

log = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/servers/{server_id}/verification-requests",
    response_model=VerificationResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_verification_request(
    server_id: str,
    payload: VerificationRequestCreate | None = None,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    if not is_uuid_like(server_id):
        return JSONResponse({"error": "Invalid server ID"}, status_code=400)

    try:
        return await request_verification(
            db,
            actor=actor,
            server_id=server_id,
            notes=payload.notes if payload else None,
        )
    except SQLAlchemyError:
        await db.rollback()
        log.exception("verification request failed: server=%s", server_id)
        return JSONResponse(
            {"error": "Failed to submit verification request. Please try again."},
            status_code=500,
        )
