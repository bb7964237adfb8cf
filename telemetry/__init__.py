"""Telemetry collection and export for the tool runtime."""
from .collector import RetryEvent, RuntimeTelemetry, ToolExecutionEvent, ToolUsage
from .otel import OtelExporter

__all__ = ["OtelExporter", "RetryEvent", "RuntimeTelemetry", "ToolExecutionEvent", "ToolUsage"]
