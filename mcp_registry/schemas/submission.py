from datetime import datetime

from pydantic import BaseModel, ConfigDict


class SubmissionCreated(BaseModel):
    id: str
    status: str
    schema_version: str


class SubmissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    submitted_by: str
    submitted_payload: dict
    schema_version: str | None
    status: str
    validation_errors: list | None
    review_notes: str | None
    reviewed_by: str | None
    reviewed_at: datetime | None
    server_id: str | None
    created_at: datetime


class ModerationResult(BaseModel):
    success: bool
    error_message: str | None = None
    server_id: str | None = None
