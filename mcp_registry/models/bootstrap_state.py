from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from mcp_registry.models.base import Base, TimestampMixin


ADMIN_BOOTSTRAP_DONE = "admin_bootstrap_done"


class BootstrapState(TimestampMixin, Base):
    __tablename__ = "bootstrap_state"

    key: Mapped[str] = mapped_column(String(80), primary_key=True)
    value: Mapped[str] = mapped_column(String(200), nullable=False)
