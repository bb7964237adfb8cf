"""Tool dispatch: lookup, input validation, execution and usage tracking."""
from __future__ import annotations

import inspect
import json
import logging
import time
from typing import TYPE_CHECKING, Any, Optional

from pydantic import ValidationError

from errors import ToolNotFoundError, ToolValidationError

from .registry import ToolRegistry
from .schemas import format_validation_error, validate_payload
from .spec import ToolRegistryEntry

if TYPE_CHECKING:  # pragma: no cover
    from telemetry import RuntimeTelemetry

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """Entry point for executing registered tools on behalf of the agent."""

    def __init__(self, registry: ToolRegistry, telemetry: Optional["RuntimeTelemetry"] = None) -> None:
        self._registry = registry
        self._telemetry = telemetry

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def execute(self, name: str, args: Any) -> Any:
        """Run tool *name* with *args* and return its result.

        Raises ``ToolNotFoundError`` for unknown or retired tools and
        ``ToolValidationError`` for arguments the input schema rejects; neither
        touches the usage counters. Exceptions from the tool body are counted
        and re-raised unchanged.
        """
        entry = self._registry.get(name)
        if entry is None:
            raise ToolNotFoundError(name)

        try:
            arguments = validate_payload(entry.input_schema, args)
        except ValueError as exc:
            raise ToolValidationError(name, str(exc)) from exc

        start = time.perf_counter()
        try:
            result = entry.execute(arguments)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            self._registry.record_error(entry)
            self._record(entry, args, start, exc)
            raise

        self._registry.record_usage(entry)

        if entry.output_schema is not None:
            try:
                entry.output_schema.model_validate(result)
            except ValidationError as exc:
                logger.warning(
                    "Tool output failed schema validation: tool=%s error=%s",
                    name,
                    format_validation_error(exc),
                )

        self._record(entry, args, start)
        return result

    def _record(
        self,
        entry: ToolRegistryEntry,
        args: Any,
        start: float,
        error: Optional[BaseException] = None,
    ) -> None:
        if self._telemetry is None:
            return
        try:
            self._telemetry.record_tool_execution(
                entry,
                time.perf_counter() - start,
                error=error,
                input_bytes=_estimate_payload_size(args),
            )
        except Exception as exc:  # pragma: no cover - telemetry should not break tools
            logger.debug("Telemetry recording failed: %s", exc)


def _estimate_payload_size(payload: Any) -> int:
    try:
        serialized = json.dumps(payload, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return 0
    return len(serialized.encode("utf-8"))


__all__ = ["ToolDispatcher"]
