"""Structured error model shared by the recovery engine and the tool runtime."""
from __future__ import annotations

import traceback
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class ErrorCategory(str, Enum):
    """Closed taxonomy of failure causes."""

    VALIDATION = "validation"
    PERMISSION = "permission"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    DEPENDENCY = "dependency"
    LLM = "llm"
    TOOL = "tool"
    TIMEOUT = "timeout"
    CONFLICT = "conflict"
    SYSTEM = "system"
    UNKNOWN = "unknown"


class ErrorSeverity(str, Enum):
    """Presentation severity, ordered ``low < medium < high < critical``."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self.value]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ErrorSeverity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, ErrorSeverity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, ErrorSeverity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, ErrorSeverity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANK = {"low": 0, "medium": 1, "high": 2, "critical": 3}


class ErrorCode(str, Enum):
    """Stable error identifiers. Append only; never renumber."""

    # Validation (1xxx)
    INVALID_INPUT = "ERR_1001"
    MISSING_REQUIRED_FIELD = "ERR_1002"
    INVALID_FORMAT = "ERR_1003"
    VALUE_OUT_OF_RANGE = "ERR_1004"
    DUPLICATE_ENTRY = "ERR_1005"

    # Permission (2xxx)
    UNAUTHORIZED = "ERR_2001"
    FORBIDDEN = "ERR_2002"
    QUOTA_EXCEEDED = "ERR_2003"
    APPROVAL_REQUIRED = "ERR_2004"
    EMERGENCY_STOP_ACTIVE = "ERR_2005"

    # Not found (3xxx)
    RESOURCE_NOT_FOUND = "ERR_3001"
    CUSTOMER_NOT_FOUND = "ERR_3002"
    VENDOR_NOT_FOUND = "ERR_3003"
    INVOICE_NOT_FOUND = "ERR_3004"
    ACCOUNT_NOT_FOUND = "ERR_3005"

    # Rate limit (4xxx)
    RATE_LIMITED = "ERR_4001"
    DAILY_LIMIT_EXCEEDED = "ERR_4002"
    TOKEN_LIMIT_EXCEEDED = "ERR_4003"
    AMOUNT_LIMIT_EXCEEDED = "ERR_4004"

    # Dependency (5xxx)
    DATABASE_ERROR = "ERR_5001"
    EXTERNAL_SERVICE_ERROR = "ERR_5002"
    NETWORK_ERROR = "ERR_5003"
    STORAGE_ERROR = "ERR_5004"

    # LLM provider (6xxx)
    LLM_PROVIDER_ERROR = "ERR_6001"
    LLM_TIMEOUT = "ERR_6002"
    LLM_CONTENT_FILTER = "ERR_6003"
    LLM_CONTEXT_LENGTH = "ERR_6004"
    LLM_RATE_LIMITED = "ERR_6005"

    # Tool (7xxx)
    TOOL_EXECUTION_FAILED = "ERR_7001"
    TOOL_NOT_FOUND = "ERR_7002"
    TOOL_TIMEOUT = "ERR_7003"
    TOOL_INVALID_ARGS = "ERR_7004"
    TOOL_PERMISSION_DENIED = "ERR_7005"

    # Timeout (8xxx)
    OPERATION_TIMEOUT = "ERR_8001"
    REQUEST_TIMEOUT = "ERR_8002"
    STREAM_TIMEOUT = "ERR_8003"

    # Conflict (9xxx)
    STATE_CONFLICT = "ERR_9001"
    CONCURRENT_MODIFICATION = "ERR_9002"
    RESOURCE_LOCKED = "ERR_9003"

    # System (10xxx)
    INTERNAL_ERROR = "ERR_10001"
    CONFIGURATION_ERROR = "ERR_10002"
    UNEXPECTED_ERROR = "ERR_10003"

    @property
    def number(self) -> int:
        return int(self.value.split("_", 1)[1])

    @property
    def range_category(self) -> ErrorCategory:
        """Category owning this code's numeric range."""
        number = self.number
        if number >= 10000:
            return ErrorCategory.SYSTEM
        return _RANGE_CATEGORIES[number // 1000]


_RANGE_CATEGORIES = {
    1: ErrorCategory.VALIDATION,
    2: ErrorCategory.PERMISSION,
    3: ErrorCategory.NOT_FOUND,
    4: ErrorCategory.RATE_LIMIT,
    5: ErrorCategory.DEPENDENCY,
    6: ErrorCategory.LLM,
    7: ErrorCategory.TOOL,
    8: ErrorCategory.TIMEOUT,
    9: ErrorCategory.CONFLICT,
}

RETRYABLE_CATEGORIES = frozenset(
    {
        ErrorCategory.RATE_LIMIT,
        ErrorCategory.TIMEOUT,
        ErrorCategory.DEPENDENCY,
        ErrorCategory.LLM,
    }
)


@dataclass(frozen=True)
class RecoverySuggestion:
    """A single actionable recovery step. Lower priority is shown first."""

    action: str
    description: str
    automatic: bool
    priority: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ErrorContext:
    """Optional caller context attached to a structured error."""

    tool_name: Optional[str] = None
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    user_id: Optional[str] = None
    session_id: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        return {key: value for key, value in asdict(self).items() if value is not None}


class StructuredError(Exception):
    """Canonical failure record produced for every handled failure.

    ``recoverable`` is derived from the suggestions so it can never disagree
    with them. The original exception is kept on ``original_error`` for
    diagnostics and is never rendered into ``message``.
    """

    def __init__(
        self,
        *,
        code: ErrorCode,
        category: ErrorCategory,
        severity: ErrorSeverity,
        title: str,
        message: str,
        details: Optional[str] = None,
        suggestions: Sequence[RecoverySuggestion] = (),
        retryable: bool = False,
        retry_delay_ms: Optional[int] = None,
        max_retries: Optional[int] = None,
        context: Optional[ErrorContext] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.category = category
        self.severity = severity
        self.title = title
        self.message = message
        self.details = details
        self.suggestions: List[RecoverySuggestion] = list(suggestions)
        self.retryable = retryable
        self.retry_delay_ms = retry_delay_ms
        self.max_retries = max_retries
        self.context = context
        self.original_error = original_error

    @property
    def recoverable(self) -> bool:
        return len(self.suggestions) > 0

    @property
    def stack(self) -> Optional[str]:
        error = self.original_error
        if error is None or error.__traceback__ is None:
            return None
        return "".join(traceback.format_exception(type(error), error, error.__traceback__))

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.title}: {self.message}"

    def __repr__(self) -> str:
        return (
            f"StructuredError(code={self.code.value!r}, category={self.category.value!r}, "
            f"severity={self.severity.value!r}, retryable={self.retryable!r})"
        )


class ToolError(Exception):
    """Base class for errors raised by the tool runtime itself.

    Subclasses pin a code, category and severity so the classifier does not
    have to guess from the message.
    """

    code: ErrorCode = ErrorCode.TOOL_EXECUTION_FAILED
    category: ErrorCategory = ErrorCategory.TOOL
    severity: ErrorSeverity = ErrorSeverity.MEDIUM

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:  # pragma: no cover - convenience
        return self.message


class ToolNotFoundError(ToolError):
    """Requested tool is not registered, or has been retired."""

    code = ErrorCode.TOOL_NOT_FOUND
    category = ErrorCategory.TOOL
    severity = ErrorSeverity.MEDIUM

    def __init__(self, tool_name: str) -> None:
        super().__init__(f'tool "{tool_name}" not found in registry')
        self.tool_name = tool_name


class ToolValidationError(ToolError):
    """Caller-supplied arguments failed the tool's input schema."""

    code = ErrorCode.TOOL_INVALID_ARGS
    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.LOW

    def __init__(self, tool_name: str, detail: str) -> None:
        super().__init__(f'invalid input for tool "{tool_name}": {detail}')
        self.tool_name = tool_name
        self.detail = detail


__all__ = [
    "ErrorCategory",
    "ErrorCode",
    "ErrorContext",
    "ErrorSeverity",
    "RETRYABLE_CATEGORIES",
    "RecoverySuggestion",
    "StructuredError",
    "ToolError",
    "ToolNotFoundError",
    "ToolValidationError",
]
