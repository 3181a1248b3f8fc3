from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import DateTime

from mcp_registry.core.ids import gen_id
from mcp_registry.models.base import Base, JSONType, TimestampMixin


class McpServer(TimestampMixin, Base):
    __tablename__ = "mcp_servers"
    __table_args__ = (
        Index("ix_mcp_servers_verified_created", "verified", "created_at", "id"),
        Index("ix_mcp_servers_name", "name", "id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=gen_id)
    slug: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)

    homepage_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    repo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    docs_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Normalized tags in submission order; mirrored into mcp_server_tags for filtering
    tags: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)

    # "stdio" | "http" | "both"
    transport: Mapped[str] = mapped_column(String(20), nullable=False)
    # "none" | "oauth" | "api_key" | "other"
    auth: Mapped[str] = mapped_column(String(20), nullable=False)

    capabilities: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Internal columns: never part of the public projection
    owner_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("accounts.id"), nullable=True)
    moderation_notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class McpServerTag(Base):
    __tablename__ = "mcp_server_tags"

    server_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("mcp_servers.id", ondelete="CASCADE"), primary_key=True
    )
    tag: Mapped[str] = mapped_column(String(50), primary_key=True, index=True)
