from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from pydantic import ValidationError

from mcp_registry.canonical.registry import CURRENT_SCHEMA_VERSION, resolve_schema
from mcp_registry.canonical.v1.listing import ListingV1


@dataclass(frozen=True)
class ListingValidationResult:
    success: bool
    data: ListingV1 | None
    errors: list[dict[str, Any]] = field(default_factory=list)
    schema_version: str = CURRENT_SCHEMA_VERSION

    def normalized(self) -> dict[str, Any] | None:
        """JSON-ready payload with absent optional fields omitted."""
        if self.data is None:
            return None
        return self.data.model_dump(mode="json", exclude_none=True)


def validate_listing(raw: Any, *, schema_version: str = CURRENT_SCHEMA_VERSION) -> ListingValidationResult:
    """
    Validate and normalize a raw listing payload.

    Never raises for bad input: every failing field is collected into `errors`
    (Pydantic's structured error dicts, in field declaration order).
    """
    Model = resolve_schema(schema_version)
    try:
        obj = Model.model_validate(raw)
    except ValidationError as e:
        return ListingValidationResult(success=False, data=None, errors=e.errors(), schema_version=schema_version)

    return ListingValidationResult(success=True, data=obj, errors=[], schema_version=schema_version)


def format_validation_errors(errors: ValidationError | Sequence[dict[str, Any]]) -> list[str]:
    """
    "<dotted.path>: <reason>" per error, or just "<reason>" for root-level errors.
    """
    if isinstance(errors, ValidationError):
        errors = errors.errors()

    messages: list[str] = []
    for err in errors:
        path = ".".join(str(p) for p in err.get("loc", ()))
        reason = err.get("msg", "Invalid value")
        messages.append(f"{path}: {reason}" if path else reason)
    return messages
