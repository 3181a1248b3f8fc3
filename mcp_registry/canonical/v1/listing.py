from __future__ import annotations

from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator
from pydantic_core import PydanticCustomError

from mcp_registry.canonical.formats import SLUG_MAX_LENGTH, is_valid_slug, is_valid_url
from mcp_registry.canonical.tags import TAG_MAX_LENGTH, normalize_tags


Transport = Literal["stdio", "http", "both"]
Auth = Literal["none", "oauth", "api_key", "other"]

TRANSPORTS: tuple[str, ...] = ("stdio", "http", "both")
AUTH_TYPES: tuple[str, ...] = ("none", "oauth", "api_key", "other")

NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


def _check_length(value: str, *, label: str, max_length: int, empty_message: str) -> str:
    if len(value) < 1:
        raise PydanticCustomError("string_too_short", empty_message)
    if len(value) > max_length:
        raise PydanticCustomError(
            "string_too_long",
            "{label} must be {max_length} characters or less",
            {"label": label, "max_length": max_length},
        )
    return value


def _check_tag(value: str) -> str:
    return _check_length(value, label="Tag", max_length=TAG_MAX_LENGTH, empty_message="Tag must not be empty")


TagIn = Annotated[StrictStr, AfterValidator(_check_tag)]


class CapabilitiesV1(BaseModel):
    model_config = ConfigDict(extra="ignore")

    tools: StrictBool = False
    resources: StrictBool = False
    prompts: StrictBool = False


DEFAULT_CAPABILITIES = CapabilitiesV1()


class ListingV1(BaseModel):
    """
    MCP server listing, schema v1.

    Canonical form of a submission: what users send in and what the store
    persists after moderation. Field declaration order is also the order in
    which validation errors are reported.
    """
    model_config = ConfigDict(extra="ignore")

    # Required fields
    slug: StrictStr
    name: StrictStr
    description: StrictStr

    transport: Transport
    auth: Auth

    # Empty string is the same as "not provided"
    homepage_url: StrictStr | None = None
    repo_url: StrictStr | None = None
    docs_url: StrictStr | None = None

    tags: list[TagIn] = Field(default_factory=list)

    capabilities: CapabilitiesV1 = Field(default_factory=lambda: DEFAULT_CAPABILITIES.model_copy())

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("string_too_short", "Slug is required")
        if len(v) > SLUG_MAX_LENGTH:
            raise PydanticCustomError(
                "string_too_long",
                "Slug must be {max_length} characters or less",
                {"max_length": SLUG_MAX_LENGTH},
            )
        if not is_valid_slug(v):
            raise PydanticCustomError("slug_format", "Slug must be lowercase letters, numbers, and hyphens")
        return v

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _check_length(v, label="Name", max_length=NAME_MAX_LENGTH, empty_message="Name is required")

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str) -> str:
        return _check_length(
            v, label="Description", max_length=DESCRIPTION_MAX_LENGTH, empty_message="Description is required"
        )

    @field_validator("homepage_url", "repo_url", "docs_url", mode="before")
    @classmethod
    def empty_url_is_absent(cls, v):
        # absent means a missing key or "", never an explicit null
        if v is None:
            raise PydanticCustomError("string_type", "Input should be a valid string")
        if v == "":
            return None
        return v

    @field_validator("homepage_url", "repo_url", "docs_url")
    @classmethod
    def check_url(cls, v: str | None) -> str | None:
        if v is not None and not is_valid_url(v):
            raise PydanticCustomError("url_format", "Must be a valid URL")
        return v

    @field_validator("tags")
    @classmethod
    def normalize(cls, v: list[str]) -> list[str]:
        return normalize_tags(v)
