"""Versioned tool registry with lifecycle management and usage statistics."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Type

from pydantic import BaseModel

from .compat import detect_breaking_changes
from .spec import (
    RiskLevel,
    ToolBody,
    ToolCategory,
    ToolRegistryEntry,
    ToolStatus,
    ToolVersion,
    utcnow,
)

logger = logging.getLogger(__name__)


@dataclass
class RegistryStats:
    """Aggregate counters across every registered tool, retired ones included."""

    total_tools: int
    by_category: Dict[ToolCategory, int] = field(default_factory=dict)
    by_status: Dict[ToolStatus, int] = field(default_factory=dict)
    total_usage: int = 0
    total_errors: int = 0
    error_rate: float = 0.0

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_tools": self.total_tools,
            "by_category": {key.value: value for key, value in self.by_category.items()},
            "by_status": {key.value: value for key, value in self.by_status.items()},
            "total_usage": self.total_usage,
            "total_errors": self.total_errors,
            "error_rate": self.error_rate,
        }


def _deprecation_hint(replaced_by: Optional[str]) -> str:
    return f'. Use "{replaced_by}" instead.' if replaced_by else ""


class ToolRegistry:
    """Central registry mapping tool names to their current entry.

    Entries are never removed: retiring a tool hides it from ``get`` but keeps
    it in statistics and version history.
    """

    def __init__(self, entries: Iterable[ToolRegistryEntry] = ()) -> None:
        self._tools: Dict[str, ToolRegistryEntry] = {}
        self._version_history: Dict[str, List[ToolVersion]] = {}
        for entry in entries:
            self.register(entry)

    def register(self, entry: ToolRegistryEntry) -> List[str]:
        """Register *entry*, replacing any entry with the same name.

        Returns the breaking changes that were registered without a major
        version bump. They are logged but never block registration.
        """
        existing = self._tools.get(entry.name)
        warnings: List[str] = []

        if existing is not None:
            changes = detect_breaking_changes(existing.input_shape, entry.input_shape)
            if changes and entry.version.major <= existing.version.major:
                logger.warning(
                    "Breaking changes detected without major version bump: tool=%s %s -> %s changes=%s",
                    entry.name,
                    existing.version_string,
                    entry.version_string,
                    changes,
                )
                warnings = changes
            self._version_history.setdefault(entry.name, []).append(existing.version)

        self._tools[entry.name] = replace(
            entry,
            last_modified_at=utcnow(),
            usage_count=existing.usage_count if existing else 0,
            error_count=existing.error_count if existing else 0,
        )

        logger.info(
            "Tool registered: tool=%s version=%s status=%s",
            entry.name,
            entry.version_string,
            entry.status.value,
        )
        return warnings

    def create_tool(
        self,
        *,
        name: str,
        version: ToolVersion | str,
        category: ToolCategory | str,
        description: str,
        input_schema: Type[BaseModel],
        execute: ToolBody,
        output_schema: Optional[Type[BaseModel]] = None,
        status: ToolStatus | str = ToolStatus.ACTIVE,
        examples: Optional[List[str]] = None,
        requires_approval: bool = False,
        risk_level: RiskLevel | str = RiskLevel.LOW,
        financial_impact: bool = False,
    ) -> ToolRegistryEntry:
        """Build an entry with the usual defaults, register it, and return the stored entry."""
        entry = ToolRegistryEntry(
            name=name,
            version=version,  # type: ignore[arg-type]
            category=category,  # type: ignore[arg-type]
            description=description,
            input_schema=input_schema,
            execute=execute,
            output_schema=output_schema,
            status=status,  # type: ignore[arg-type]
            examples=list(examples or []),
            requires_approval=requires_approval,
            risk_level=risk_level,  # type: ignore[arg-type]
            financial_impact=financial_impact,
        )
        self.register(entry)
        return self._tools[name]

    def get(self, name: str) -> Optional[ToolRegistryEntry]:
        """Return the entry for *name*, or ``None`` if unknown or retired."""
        entry = self._tools.get(name)
        if entry is None:
            return None

        if entry.status is ToolStatus.DEPRECATED:
            logger.warning(
                'Tool "%s" is deprecated%s',
                name,
                _deprecation_hint(entry.replaced_by),
            )

        if entry.status is ToolStatus.RETIRED:
            logger.error('Tool "%s" is retired and should not be used', name)
            return None

        return entry

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get_all(self) -> List[ToolRegistryEntry]:
        return list(self._tools.values())

    def get_by_category(self, category: ToolCategory | str) -> List[ToolRegistryEntry]:
        wanted = ToolCategory(category)
        return [entry for entry in self._tools.values() if entry.category is wanted]

    def get_active(self) -> List[ToolRegistryEntry]:
        """Tools offered to the model: active and beta."""
        return [
            entry
            for entry in self._tools.values()
            if entry.status in (ToolStatus.ACTIVE, ToolStatus.BETA)
        ]

    def get_deprecated(self) -> List[ToolRegistryEntry]:
        return [entry for entry in self._tools.values() if entry.status is ToolStatus.DEPRECATED]

    def get_version_history(self, name: str) -> List[ToolVersion]:
        return list(self._version_history.get(name, []))

    def record_usage(self, entry: ToolRegistryEntry) -> None:
        entry.usage_count += 1

    def record_error(self, entry: ToolRegistryEntry) -> None:
        entry.error_count += 1

    def get_stats(self) -> RegistryStats:
        entries = list(self._tools.values())
        by_category = {category: 0 for category in ToolCategory}
        by_status = {status: 0 for status in ToolStatus}
        total_usage = 0
        total_errors = 0

        for entry in entries:
            by_category[entry.category] += 1
            by_status[entry.status] += 1
            total_usage += entry.usage_count
            total_errors += entry.error_count

        return RegistryStats(
            total_tools=len(entries),
            by_category=by_category,
            by_status=by_status,
            total_usage=total_usage,
            total_errors=total_errors,
            error_rate=(total_errors / total_usage) * 100 if total_usage > 0 else 0.0,
        )

    def deprecate(
        self,
        name: str,
        replaced_by: Optional[str] = None,
        notice: Optional[str] = None,
    ) -> None:
        entry = self._tools.get(name)
        if entry is None:
            return
        entry.status = ToolStatus.DEPRECATED
        entry.replaced_by = replaced_by
        entry.deprecation_notice = notice or f"This tool is deprecated{_deprecation_hint(replaced_by)}"
        entry.last_modified_at = utcnow()
        logger.info("Tool deprecated: tool=%s replaced_by=%s", name, replaced_by)

    def retire(self, name: str) -> None:
        entry = self._tools.get(name)
        if entry is None:
            return
        entry.status = ToolStatus.RETIRED
        entry.last_modified_at = utcnow()
        logger.info("Tool retired: tool=%s", name)


__all__ = ["RegistryStats", "ToolRegistry"]
