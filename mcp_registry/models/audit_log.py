from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from mcp_registry.core.ids import gen_id
from mcp_registry.models.base import Base, JSONType

class AuditLog(Base):
    __tablename__ = "audit_log"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=gen_id)
    action: Mapped[str] = mapped_column(String(120), nullable=False)

    # Account id that performed the action (None for system actions)
    actor: Mapped[str | None] = mapped_column(String(36), nullable=True)

    details: Mapped[dict | None] = mapped_column(JSONType, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
