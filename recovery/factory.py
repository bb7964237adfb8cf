"""Build complete ``StructuredError`` records from arbitrary failures."""
from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple

from config import DEFAULT_RETRY_POLICIES, RetryPolicy
from errors import (
    RETRYABLE_CATEGORIES,
    ErrorCategory,
    ErrorCode,
    ErrorContext,
    StructuredError,
)

from .advisor import get_recovery_suggestions
from .classifier import classify_error
from .sanitize import sanitize_error_message

ERROR_TITLES: Dict[ErrorCategory, str] = {
    ErrorCategory.VALIDATION: "Invalid Input",
    ErrorCategory.PERMISSION: "Access Denied",
    ErrorCategory.NOT_FOUND: "Not Found",
    ErrorCategory.RATE_LIMIT: "Limit Exceeded",
    ErrorCategory.DEPENDENCY: "Service Unavailable",
    ErrorCategory.LLM: "AI Processing Error",
    ErrorCategory.TOOL: "Operation Failed",
    ErrorCategory.TIMEOUT: "Request Timed Out",
    ErrorCategory.CONFLICT: "Conflict Detected",
    ErrorCategory.SYSTEM: "System Error",
    ErrorCategory.UNKNOWN: "Unexpected Error",
}

# Provider rate limits reset on the same clock as our own quotas.
_CODE_POLICY_CATEGORY: Dict[ErrorCode, ErrorCategory] = {
    ErrorCode.LLM_RATE_LIMITED: ErrorCategory.RATE_LIMIT,
}


def retry_defaults(
    category: ErrorCategory,
    code: ErrorCode,
    policies: Optional[Mapping[ErrorCategory, RetryPolicy]] = None,
) -> Tuple[Optional[int], Optional[int]]:
    """Return ``(retry_delay_ms, max_retries)`` for a classification, or ``(None, None)``."""

    if category not in RETRYABLE_CATEGORIES:
        return None, None
    table = DEFAULT_RETRY_POLICIES if policies is None else policies
    policy = table.get(_CODE_POLICY_CATEGORY.get(code, category)) or table.get(category)
    if policy is None:
        policy = DEFAULT_RETRY_POLICIES[category]
    return policy.delay_ms, policy.max_retries


def create_structured_error(
    error: object,
    context: Optional[ErrorContext] = None,
    *,
    retry_policies: Optional[Mapping[ErrorCategory, RetryPolicy]] = None,
) -> StructuredError:
    """Classify *error*, attach recovery advice and retry defaults, and sanitize its message."""

    classification = classify_error(error)
    suggestions = get_recovery_suggestions(classification.category, classification.code, context)

    original_error: BaseException
    if isinstance(error, StructuredError):
        original_error = error.original_error or error
        raw_message = error.message
    elif isinstance(error, BaseException):
        original_error = error
        raw_message = str(error)
    else:
        original_error = Exception(str(error))
        raw_message = str(original_error)

    retryable = classification.category in RETRYABLE_CATEGORIES
    retry_delay_ms, max_retries = retry_defaults(
        classification.category, classification.code, retry_policies
    )

    return StructuredError(
        code=classification.code,
        category=classification.category,
        severity=classification.severity,
        title=ERROR_TITLES[classification.category],
        message=sanitize_error_message(raw_message),
        suggestions=suggestions,
        retryable=retryable,
        retry_delay_ms=retry_delay_ms,
        max_retries=max_retries,
        context=context,
        original_error=original_error,
    )


__all__ = ["ERROR_TITLES", "create_structured_error", "retry_defaults"]
