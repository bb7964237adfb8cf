"""Map arbitrary failures onto the error taxonomy using ordered keyword rules."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import anthropic

from errors import ErrorCategory, ErrorCode, ErrorSeverity, StructuredError, ToolError


@dataclass(frozen=True, slots=True)
class Classification:
    category: ErrorCategory
    code: ErrorCode
    severity: ErrorSeverity


@dataclass(frozen=True, slots=True)
class _Rule:
    keywords: Tuple[str, ...]
    classification: Classification
    type_names: Tuple[str, ...] = ()

    def matches(self, message: str, name: str) -> bool:
        if name in self.type_names:
            return True
        return any(keyword in message for keyword in self.keywords)


UNEXPECTED = Classification(ErrorCategory.UNKNOWN, ErrorCode.UNEXPECTED_ERROR, ErrorSeverity.MEDIUM)
INTERNAL = Classification(ErrorCategory.SYSTEM, ErrorCode.INTERNAL_ERROR, ErrorSeverity.HIGH)

_PROVIDER_KEYWORDS = ("openai", "anthropic", "rate limit", "api key")

# Evaluated in order after the provider check; first match wins.
_RULES: Tuple[_Rule, ...] = (
    _Rule(
        ("validation", "invalid"),
        Classification(ErrorCategory.VALIDATION, ErrorCode.INVALID_INPUT, ErrorSeverity.LOW),
        type_names=("validationerror",),
    ),
    _Rule(
        ("unauthorized", "forbidden", "permission", "401", "403"),
        Classification(ErrorCategory.PERMISSION, ErrorCode.FORBIDDEN, ErrorSeverity.MEDIUM),
        type_names=("permissionerror",),
    ),
    _Rule(
        ("not found", "does not exist", "404"),
        Classification(ErrorCategory.NOT_FOUND, ErrorCode.RESOURCE_NOT_FOUND, ErrorSeverity.LOW),
        type_names=("filenotfounderror",),
    ),
    _Rule(
        ("quota", "limit exceeded", "too many requests"),
        Classification(ErrorCategory.RATE_LIMIT, ErrorCode.RATE_LIMITED, ErrorSeverity.MEDIUM),
    ),
    _Rule(
        ("timeout", "timed out"),
        Classification(ErrorCategory.TIMEOUT, ErrorCode.OPERATION_TIMEOUT, ErrorSeverity.MEDIUM),
        type_names=("timeouterror",),
    ),
    _Rule(
        ("database", "postgres", "sql", "connection"),
        Classification(ErrorCategory.DEPENDENCY, ErrorCode.DATABASE_ERROR, ErrorSeverity.HIGH),
    ),
    _Rule(
        ("network", "fetch", "econnrefused"),
        Classification(ErrorCategory.DEPENDENCY, ErrorCode.NETWORK_ERROR, ErrorSeverity.HIGH),
        type_names=("connectionerror", "connectionrefusederror", "connectionreseterror"),
    ),
    _Rule(
        ("tool",),
        Classification(ErrorCategory.TOOL, ErrorCode.TOOL_EXECUTION_FAILED, ErrorSeverity.MEDIUM),
    ),
)


def _llm(code: ErrorCode, severity: ErrorSeverity) -> Classification:
    return Classification(ErrorCategory.LLM, code, severity)


def _classify_provider_message(message: str) -> Classification:
    if "rate limit" in message or "429" in message:
        return _llm(ErrorCode.LLM_RATE_LIMITED, ErrorSeverity.MEDIUM)
    if "timeout" in message:
        return _llm(ErrorCode.LLM_TIMEOUT, ErrorSeverity.MEDIUM)
    if "content" in message and "filter" in message:
        return _llm(ErrorCode.LLM_CONTENT_FILTER, ErrorSeverity.LOW)
    if "context" in message or "token" in message:
        return _llm(ErrorCode.LLM_CONTEXT_LENGTH, ErrorSeverity.MEDIUM)
    return _llm(ErrorCode.LLM_PROVIDER_ERROR, ErrorSeverity.HIGH)


def _classify_sdk_error(error: anthropic.APIError, message: str) -> Classification:
    if isinstance(error, anthropic.RateLimitError):
        return _llm(ErrorCode.LLM_RATE_LIMITED, ErrorSeverity.MEDIUM)
    if isinstance(error, anthropic.APITimeoutError):
        return _llm(ErrorCode.LLM_TIMEOUT, ErrorSeverity.MEDIUM)
    return _classify_provider_message(message)


def _text(error: BaseException) -> Optional[Tuple[str, str]]:
    try:
        return str(error).lower(), type(error).__name__.lower()
    except Exception:  # pragma: no cover - hostile __str__
        return None


def classify_error(error: object) -> Classification:
    """Classify *error* into a category, code and severity.

    Never raises: values that are not exceptions, or whose text cannot be
    read, fall back to ``unknown``.
    """

    if isinstance(error, StructuredError):
        return Classification(error.category, error.code, error.severity)
    if isinstance(error, ToolError):
        return Classification(error.category, error.code, error.severity)
    if not isinstance(error, BaseException):
        return UNEXPECTED

    text = _text(error)
    if text is None:
        return UNEXPECTED
    message, name = text

    if isinstance(error, anthropic.APIError):
        return _classify_sdk_error(error, message)
    if any(keyword in message for keyword in _PROVIDER_KEYWORDS):
        return _classify_provider_message(message)

    for rule in _RULES:
        if rule.matches(message, name):
            return rule.classification

    return INTERNAL


__all__ = ["Classification", "classify_error"]
