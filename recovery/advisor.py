"""Recovery suggestions per error category."""
from __future__ import annotations

from typing import List, Optional

from errors import ErrorCategory, ErrorCode, ErrorContext, RecoverySuggestion


def _suggest(action: str, description: str, *, automatic: bool, priority: int) -> RecoverySuggestion:
    return RecoverySuggestion(action=action, description=description, automatic=automatic, priority=priority)


CONTACT_SUPPORT = _suggest(
    "contact_support",
    "If the issue persists, contact support",
    automatic=False,
    priority=3,
)


def get_recovery_suggestions(
    category: ErrorCategory,
    code: ErrorCode,
    context: Optional[ErrorContext] = None,
) -> List[RecoverySuggestion]:
    """Return recovery suggestions for a classification, sorted by ascending priority.

    ``context`` refines the advice: a known tool name adds a schema hint to
    validation failures, and a missing customer or vendor adds an offer to
    create one.
    """

    category = ErrorCategory(category)
    suggestions: List[RecoverySuggestion] = []
    tool_name = context.tool_name if context else None
    resource_type = context.resource_type if context else None

    if category is ErrorCategory.VALIDATION:
        suggestions.append(_suggest("review_input", "Review and correct the input data", automatic=False, priority=1))
        if tool_name:
            suggestions.append(
                _suggest(
                    "show_tool_schema",
                    f"Check the required format for {tool_name}",
                    automatic=True,
                    priority=2,
                )
            )

    elif category is ErrorCategory.NOT_FOUND:
        suggestions.append(_suggest("search_alternatives", "Search for similar resources", automatic=True, priority=1))
        if resource_type == "customer":
            suggestions.append(
                _suggest(
                    "create_customer",
                    "Create a new customer with this information",
                    automatic=False,
                    priority=2,
                )
            )
        elif resource_type == "vendor":
            suggestions.append(
                _suggest(
                    "create_vendor",
                    "Create a new vendor with this information",
                    automatic=False,
                    priority=2,
                )
            )

    elif category is ErrorCategory.RATE_LIMIT:
        suggestions.append(_suggest("wait_and_retry", "Wait a moment and try again", automatic=True, priority=1))
        if code == ErrorCode.DAILY_LIMIT_EXCEEDED:
            suggestions.append(
                _suggest(
                    "increase_quota",
                    "Contact support to increase daily limits",
                    automatic=False,
                    priority=2,
                )
            )

    elif category is ErrorCategory.LLM:
        if code == ErrorCode.LLM_RATE_LIMITED:
            suggestions.append(
                _suggest(
                    "wait_and_retry",
                    "Wait for rate limit to reset (usually 60 seconds)",
                    automatic=True,
                    priority=1,
                )
            )
        elif code == ErrorCode.LLM_CONTEXT_LENGTH:
            suggestions.append(
                _suggest(
                    "reduce_context",
                    "Try with a shorter conversation or fewer details",
                    automatic=True,
                    priority=1,
                )
            )
        elif code == ErrorCode.LLM_CONTENT_FILTER:
            suggestions.append(
                _suggest("rephrase_request", "Rephrase your request in different words", automatic=False, priority=1)
            )
        else:
            suggestions.append(
                _suggest("retry_later", "The AI service had a problem; try again shortly", automatic=True, priority=1)
            )

    elif category is ErrorCategory.TOOL:
        suggestions.append(_suggest("retry_tool", "Retry the operation", automatic=True, priority=1))
        if code == ErrorCode.TOOL_PERMISSION_DENIED:
            suggestions.append(
                _suggest(
                    "check_permissions",
                    "Verify you have permission for this action",
                    automatic=False,
                    priority=2,
                )
            )

    elif category is ErrorCategory.TIMEOUT:
        suggestions.append(_suggest("retry_with_timeout", "Retry with a longer timeout", automatic=True, priority=1))
        suggestions.append(_suggest("simplify_request", "Try a simpler or smaller request", automatic=False, priority=2))

    elif category is ErrorCategory.DEPENDENCY:
        suggestions.append(_suggest("check_status", "Check service status and retry shortly", automatic=True, priority=1))

    elif category is ErrorCategory.PERMISSION:
        suggestions.append(_suggest("request_approval", "Submit action for approval", automatic=False, priority=1))
        if code == ErrorCode.EMERGENCY_STOP_ACTIVE:
            suggestions.append(
                _suggest(
                    "disable_emergency_stop",
                    "Disable emergency stop in settings",
                    automatic=False,
                    priority=2,
                )
            )

    elif category is ErrorCategory.CONFLICT:
        suggestions.append(_suggest("refresh_and_retry", "Refresh the data and try again", automatic=True, priority=1))

    else:
        suggestions.append(CONTACT_SUPPORT)

    return sorted(suggestions, key=lambda suggestion: suggestion.priority)


__all__ = ["CONTACT_SUPPORT", "get_recovery_suggestions"]
