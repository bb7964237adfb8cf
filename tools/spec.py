"""Tool metadata models: versions, lifecycle status and registry entries."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import total_ordering
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type, Union

from pydantic import BaseModel

from .schemas import SchemaShape, describe_schema, schema_to_json

ToolBody = Callable[[Any], Union[Awaitable[Any], Any]]

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ToolCategory(str, Enum):
    READ = "read"
    WRITE = "write"
    ANALYSIS = "analysis"
    MEMORY = "memory"
    REASONING = "reasoning"


class ToolStatus(str, Enum):
    """Lifecycle state. ``retired`` is terminal."""

    ACTIVE = "active"
    BETA = "beta"
    DEPRECATED = "deprecated"
    RETIRED = "retired"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@total_ordering
@dataclass(frozen=True, slots=True)
class ToolVersion:
    """Semantic version of a tool definition."""

    major: int
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, text: str) -> "ToolVersion":
        match = _VERSION_RE.match(text.strip())
        if match is None:
            raise ValueError(f"invalid tool version: {text!r}")
        major, minor, patch = (int(part) for part in match.groups())
        return cls(major, minor, patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ToolVersion):
            return NotImplemented
        return (self.major, self.minor, self.patch) < (other.major, other.minor, other.patch)


def _require_model(tool_name: str, label: str, schema: object) -> None:
    if not (isinstance(schema, type) and issubclass(schema, BaseModel)):
        raise TypeError(f"{label} for tool {tool_name!r} must be a pydantic model class, got {schema!r}")


@dataclass
class ToolRegistryEntry:
    """A registered tool: metadata, schemas, counters and its executable body."""

    name: str
    version: ToolVersion
    category: ToolCategory
    description: str
    input_schema: Type[BaseModel]
    execute: ToolBody
    status: ToolStatus = ToolStatus.ACTIVE
    output_schema: Optional[Type[BaseModel]] = None
    examples: List[str] = field(default_factory=list)
    deprecation_notice: Optional[str] = None
    replaced_by: Optional[str] = None
    requires_approval: bool = False
    risk_level: RiskLevel = RiskLevel.LOW
    financial_impact: bool = False
    added_at: datetime = field(default_factory=utcnow)
    last_modified_at: datetime = field(default_factory=utcnow)
    usage_count: int = 0
    error_count: int = 0
    input_shape: Optional[SchemaShape] = None

    def __post_init__(self) -> None:
        _require_model(self.name, "input_schema", self.input_schema)
        if self.output_schema is not None:
            _require_model(self.name, "output_schema", self.output_schema)
        if isinstance(self.version, str):
            self.version = ToolVersion.parse(self.version)
        self.category = ToolCategory(self.category)
        self.status = ToolStatus(self.status)
        self.risk_level = RiskLevel(self.risk_level)
        if self.input_shape is None:
            self.input_shape = describe_schema(self.input_schema)

    @property
    def version_string(self) -> str:
        return str(self.version)

    def to_anthropic_definition(self) -> Dict[str, Any]:
        """Return a dict compatible with Anthropic tool definitions."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": schema_to_json(self.input_schema),
        }


__all__ = [
    "RiskLevel",
    "ToolBody",
    "ToolCategory",
    "ToolRegistryEntry",
    "ToolStatus",
    "ToolVersion",
    "utcnow",
]
