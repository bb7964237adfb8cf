"""Tool registry and dispatch for the bookkeeping agent."""

from .compat import detect_breaking_changes
from .manifest import ManifestTool, ToolManifest, generate_tool_manifest
from .registry import RegistryStats, ToolRegistry
from .runtime import ToolDispatcher
from .schemas import (
    FieldShape,
    SchemaShape,
    ToolSchema,
    describe_schema,
    format_validation_error,
    schema_to_json,
    validate_payload,
)
from .spec import RiskLevel, ToolCategory, ToolRegistryEntry, ToolStatus, ToolVersion
from errors import ToolError, ToolNotFoundError, ToolValidationError

__all__ = [
    "FieldShape",
    "ManifestTool",
    "RegistryStats",
    "RiskLevel",
    "SchemaShape",
    "ToolCategory",
    "ToolDispatcher",
    "ToolError",
    "ToolManifest",
    "ToolNotFoundError",
    "ToolRegistry",
    "ToolRegistryEntry",
    "ToolSchema",
    "ToolStatus",
    "ToolValidationError",
    "ToolVersion",
    "describe_schema",
    "detect_breaking_changes",
    "format_validation_error",
    "generate_tool_manifest",
    "schema_to_json",
    "validate_payload",
]
