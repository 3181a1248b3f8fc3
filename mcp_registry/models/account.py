from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from mcp_registry.core.ids import gen_id
from mcp_registry.models.base import Base, TimestampMixin


class Account(TimestampMixin, Base):
    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=gen_id)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    display_name: Mapped[str | None] = mapped_column(String(120), nullable=True)

    # "user" | "admin"
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
