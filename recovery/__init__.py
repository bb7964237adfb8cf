"""Error classification, recovery advice and retry handling for agent operations."""

from .advisor import get_recovery_suggestions
from .classifier import Classification, classify_error
from .factory import ERROR_TITLES, create_structured_error, retry_defaults
from .formatting import format_error_for_api, format_error_for_chat
from .retry import RetryOptions, with_retry
from .sanitize import sanitize_error_message

__all__ = [
    "Classification",
    "ERROR_TITLES",
    "RetryOptions",
    "classify_error",
    "create_structured_error",
    "format_error_for_api",
    "format_error_for_chat",
    "get_recovery_suggestions",
    "retry_defaults",
    "sanitize_error_message",
    "with_retry",
]
