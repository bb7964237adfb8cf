"""In-memory telemetry for tool executions and retry attempts."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Optional

from errors import ErrorCategory, StructuredError
from recovery.classifier import classify_error
from recovery.sanitize import sanitize_error_message

if TYPE_CHECKING:  # pragma: no cover
    from tools.spec import ToolRegistryEntry

    from .otel import OtelExporter


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ToolExecutionEvent:
    """One dispatched tool call. Failures carry the classified code and a sanitized message."""

    tool_name: str
    tool_version: str
    timestamp: datetime
    duration_ms: float
    success: bool
    error_code: Optional[str] = None
    error_category: Optional[str] = None
    message: Optional[str] = None
    input_bytes: int = 0

    def to_otel(self) -> Dict[str, object]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "name": "tool.call",
            "attributes": {
                "tool.name": self.tool_name,
                "tool.version": self.tool_version,
                "tool.duration_ms": self.duration_ms,
                "tool.success": self.success,
                "tool.input_bytes": self.input_bytes,
                "error.code": self.error_code,
                "error.category": self.error_category,
                "error.message": self.message,
            },
        }


@dataclass
class RetryEvent:
    """A failed attempt that the retry coordinator decided to retry."""

    attempt: int
    timestamp: datetime
    code: str
    category: str
    message: str
    tool_name: Optional[str] = None

    def to_otel(self) -> Dict[str, object]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "name": "tool.retry",
            "attributes": {
                "retry.attempt": self.attempt,
                "tool.name": self.tool_name,
                "error.code": self.code,
                "error.category": self.category,
                "error.message": self.message,
            },
        }


@dataclass
class ToolUsage:
    """Per-tool aggregate; ``successes``/``failures`` move with the registry's usage and error counters."""

    calls: int = 0
    failures: int = 0
    total_duration_ms: float = 0.0
    failures_by_category: Dict[ErrorCategory, int] = field(default_factory=dict)

    @property
    def successes(self) -> int:
        return self.calls - self.failures

    @property
    def mean_duration_ms(self) -> float:
        return self.total_duration_ms / self.calls if self.calls else 0.0


@dataclass
class RuntimeTelemetry:
    tool_calls: List[ToolExecutionEvent] = field(default_factory=list)
    retries: List[RetryEvent] = field(default_factory=list)
    usage: Dict[str, ToolUsage] = field(default_factory=dict)
    _exported_calls: int = 0
    _exported_retries: int = 0

    def record_tool_execution(
        self,
        entry: "ToolRegistryEntry",
        duration: float,
        *,
        error: Optional[BaseException] = None,
        input_bytes: int = 0,
    ) -> ToolExecutionEvent:
        """Record one call of *entry* that took *duration* seconds and failed with *error*, if given."""
        event = ToolExecutionEvent(
            tool_name=entry.name,
            tool_version=entry.version_string,
            timestamp=_now(),
            duration_ms=duration * 1000,
            success=error is None,
            input_bytes=input_bytes,
        )
        usage = self.usage.setdefault(entry.name, ToolUsage())
        usage.calls += 1
        usage.total_duration_ms += event.duration_ms

        if error is not None:
            classification = classify_error(error)
            event.error_code = classification.code.value
            event.error_category = classification.category.value
            event.message = sanitize_error_message(str(error)).split("\n", 1)[0]
            usage.failures += 1
            usage.failures_by_category[classification.category] = (
                usage.failures_by_category.get(classification.category, 0) + 1
            )

        self.tool_calls.append(event)
        return event

    def record_retry(self, attempt: int, error: StructuredError) -> None:
        self.retries.append(
            RetryEvent(
                attempt=attempt,
                timestamp=_now(),
                code=error.code.value,
                category=error.category.value,
                message=error.message,
                tool_name=error.context.tool_name if error.context else None,
            )
        )

    def retry_callback(self) -> Callable[[int, StructuredError], None]:
        """Return an ``on_retry`` hook for ``RetryOptions`` that records into this collector."""
        return self.record_retry

    def usage_for(self, tool_name: str) -> ToolUsage:
        return self.usage.get(tool_name) or ToolUsage()

    def _pending(self) -> Iterator[Dict[str, object]]:
        for event in self.tool_calls[self._exported_calls:]:
            yield event.to_otel()
        for retry in self.retries[self._exported_retries:]:
            yield retry.to_otel()

    def flush_to_otel(self, exporter: "OtelExporter") -> int:
        """Export events recorded since the previous flush; return how many were written."""
        written = exporter.export(self._pending())
        self._exported_calls = len(self.tool_calls)
        self._exported_retries = len(self.retries)
        return written


__all__ = ["RetryEvent", "RuntimeTelemetry", "ToolExecutionEvent", "ToolUsage"]
