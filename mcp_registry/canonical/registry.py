from typing import Type
from pydantic import BaseModel

from mcp_registry.canonical.v1.listing import ListingV1

# Version markers are stable identifiers stored next to every submission.
# A breaking change to the listing shape gets a new marker ("v2") and a new
# model; old markers stay resolvable so stored payloads can still be read.
CURRENT_SCHEMA_VERSION = "v1"

_LISTING_SCHEMAS: dict[str, Type[BaseModel]] = {
    "v1": ListingV1,
}

def resolve_schema(version: str = CURRENT_SCHEMA_VERSION) -> Type[BaseModel]:
    """
    Resolve a schema version marker to its Pydantic model.
    """
    if version not in _LISTING_SCHEMAS:
        raise KeyError(f"Unknown listing schema version: {version}")
    return _LISTING_SCHEMAS[version]

def supported_schemas() -> list[str]:
    return sorted(_LISTING_SCHEMAS)
