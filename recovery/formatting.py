"""Stateless projections of a ``StructuredError`` for chat and API consumers."""
from __future__ import annotations

import math
from typing import Any, Dict, List

from errors import ErrorSeverity, StructuredError

MAX_INLINE_SUGGESTIONS = 3

SEVERITY_ICONS: Dict[ErrorSeverity, str] = {
    ErrorSeverity.LOW: "⚠️",
    ErrorSeverity.MEDIUM: "❌",
    ErrorSeverity.HIGH: "\U0001f6a8",
    ErrorSeverity.CRITICAL: "\U0001f4a5",
}
AUTOMATIC_ICON = "\U0001f504"
MANUAL_ICON = "\U0001f464"


def format_error_for_chat(error: StructuredError) -> str:
    """Render *error* as markdown for the assistant chat panel."""
    parts: List[str] = [f"{SEVERITY_ICONS[error.severity]} **{error.title}**", "", error.message]

    if error.suggestions:
        parts.extend(["", "**Suggestions:**"])
        for suggestion in error.suggestions[:MAX_INLINE_SUGGESTIONS]:
            icon = AUTOMATIC_ICON if suggestion.automatic else MANUAL_ICON
            parts.append(f"{icon} {suggestion.description}")

    if error.retryable and error.retry_delay_ms:
        seconds = math.ceil(error.retry_delay_ms / 1000)
        parts.extend(["", f"_Retrying automatically in {seconds} seconds..._"])

    return "\n".join(parts)


def format_error_for_api(error: StructuredError) -> Dict[str, Any]:
    """Return the JSON-ready error envelope used by the HTTP layer."""
    return {
        "error": {
            "code": error.code.value,
            "category": error.category.value,
            "title": error.title,
            "message": error.message,
            "recoverable": error.recoverable,
            "suggestions": [
                {"action": suggestion.action, "description": suggestion.description}
                for suggestion in error.suggestions
            ],
            "retryable": error.retryable,
            "retry_after_ms": error.retry_delay_ms,
        }
    }


__all__ = ["format_error_for_api", "format_error_for_chat"]
