from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str
    details: list[str] | None = None


class ReviewNotes(BaseModel):
    notes: str | None = None
