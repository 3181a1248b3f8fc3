from datetime import datetime

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from mcp_registry.core.ids import gen_id
from mcp_registry.models.base import Base, JSONType


class ServerSubmission(Base):
    __tablename__ = "mcp_server_submissions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=gen_id)
    submitted_by: Mapped[str] = mapped_column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)

    # Normalized listing payload as accepted at submission time
    submitted_payload: Mapped[dict] = mapped_column(JSONType, nullable=False)
    schema_version: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # "pending" | "approved" | "rejected"
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", index=True)
    validation_errors: Mapped[list | None] = mapped_column(JSONType, nullable=True)

    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(36), ForeignKey("accounts.id"), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Set on approval
    server_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("mcp_servers.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
