"""Pydantic tool schemas and their library-neutral field shapes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, ValidationError


class ToolSchema(BaseModel):
    """Base class for tool input/output schemas with strict validation."""

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
    }

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


@dataclass(frozen=True, slots=True)
class FieldShape:
    """What the compatibility checker needs to know about one top-level field."""

    optional: bool


SchemaShape = Dict[str, FieldShape]


def _is_model(schema: object) -> bool:
    return isinstance(schema, type) and issubclass(schema, BaseModel)


def describe_schema(schema: object) -> Optional[SchemaShape]:
    """Return the top-level field shape of a pydantic model class, or ``None`` for anything else."""

    if not _is_model(schema):
        return None
    return {
        name: FieldShape(optional=not field.is_required())
        for name, field in schema.model_fields.items()  # type: ignore[attr-defined]
    }


def schema_to_json(schema: Type[BaseModel]) -> Dict[str, Any]:
    """JSON-schema rendering used for manifests and model tool definitions."""

    return schema.model_json_schema()


def format_validation_error(exc: ValidationError) -> str:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "input"
        messages.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(messages)


def validate_payload(schema: Type[BaseModel], payload: Any) -> BaseModel:
    """Validate *payload* against *schema*, raising ``ValueError`` with a flattened message."""

    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


__all__ = [
    "FieldShape",
    "SchemaShape",
    "ToolSchema",
    "describe_schema",
    "format_validation_error",
    "schema_to_json",
    "validate_payload",
]
