from datetime import datetime

from pydantic import BaseModel, ConfigDict


class VerificationRequestCreate(BaseModel):
    notes: str | None = None


class VerificationRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    server_id: str
    requested_by: str
    status: str
    request_notes: str | None
    review_notes: str | None
    reviewed_by: str | None
    reviewed_at: datetime | None
    created_at: datetime


class VerificationResult(BaseModel):
    success: bool
    error_message: str | None = None
    request_id: str | None = None
