from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ServerPublic(BaseModel):
    """Public projection of an MCP server row."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str
    name: str
    description: str
    homepage_url: str | None
    repo_url: str | None
    docs_url: str | None
    tags: list[str]
    transport: str
    auth: str
    capabilities: dict[str, bool]
    verified: bool
    verified_at: datetime | None
    created_at: datetime
    updated_at: datetime


class ServerListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: list[ServerPublic]
    next_cursor: str | None = Field(default=None, alias="nextCursor")
    total: int | None = None
