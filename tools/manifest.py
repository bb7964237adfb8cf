"""Tool manifest generation for documentation and discovery."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .registry import ToolRegistry
from .schemas import schema_to_json
from .spec import ToolRegistryEntry, ToolStatus, utcnow

MANIFEST_VERSION = "1.0.0"


@dataclass
class ManifestTool:
    name: str
    version: str
    category: str
    status: str
    description: str
    input_schema: str
    requires_approval: bool
    risk_level: str
    deprecated: Optional[Dict[str, Optional[str]]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "category": self.category,
            "status": self.status,
            "description": self.description,
            "input_schema": self.input_schema,
            "requires_approval": self.requires_approval,
            "risk_level": self.risk_level,
        }
        if self.deprecated is not None:
            data["deprecated"] = dict(self.deprecated)
        return data


@dataclass
class ToolManifest:
    version: str
    generated_at: datetime
    tools: List[ManifestTool] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "generated_at": self.generated_at.isoformat(),
            "tools": [tool.to_dict() for tool in self.tools],
        }


def _manifest_tool(entry: ToolRegistryEntry) -> ManifestTool:
    deprecated = None
    if entry.status is ToolStatus.DEPRECATED:
        deprecated = {
            "notice": entry.deprecation_notice or "This tool is deprecated",
            "replaced_by": entry.replaced_by,
        }
    return ManifestTool(
        name=entry.name,
        version=entry.version_string,
        category=entry.category.value,
        status=entry.status.value,
        description=entry.description,
        input_schema=json.dumps(schema_to_json(entry.input_schema), indent=2),
        requires_approval=entry.requires_approval,
        risk_level=entry.risk_level.value,
        deprecated=deprecated,
    )


def generate_tool_manifest(registry: ToolRegistry) -> ToolManifest:
    """Describe every registered tool, retired ones included."""
    return ToolManifest(
        version=MANIFEST_VERSION,
        generated_at=utcnow(),
        tools=[_manifest_tool(entry) for entry in registry.get_all()],
    )


__all__ = ["MANIFEST_VERSION", "ManifestTool", "ToolManifest", "generate_tool_manifest"]
