import pytest

from config import RetryPolicy
from errors import ErrorCategory, ErrorCode, ErrorContext, StructuredError, ToolNotFoundError
from recovery.factory import create_structured_error, retry_defaults


def test_provider_rate_limit_scenario():
    error = create_structured_error(RuntimeError("OpenAI rate limit exceeded (429)"))
    assert error.category is ErrorCategory.LLM
    assert error.code is ErrorCode.LLM_RATE_LIMITED
    assert error.title == "AI Processing Error"
    assert error.retryable is True
    assert error.retry_delay_ms == 60_000
    assert error.max_retries == 3


@pytest.mark.parametrize(
    "message, category, delay, retries",
    [
        ("Daily quota reached", ErrorCategory.RATE_LIMIT, 60_000, 3),
        ("operation timed out", ErrorCategory.TIMEOUT, 5_000, 2),
        ("database unavailable", ErrorCategory.DEPENDENCY, 10_000, 3),
        ("anthropic overloaded", ErrorCategory.LLM, 30_000, 2),
    ],
)
def test_retry_defaults_per_category(message, category, delay, retries):
    error = create_structured_error(RuntimeError(message))
    assert error.category is category
    assert error.retryable is True
    assert (error.retry_delay_ms, error.max_retries) == (delay, retries)


@pytest.mark.parametrize(
    "failure",
    [
        ValueError("invalid amount"),
        PermissionError("forbidden"),
        LookupError("customer not found"),
        RuntimeError("tool crashed"),
        RuntimeError("boom"),
        "not an exception",
    ],
)
def test_non_retryable_categories(failure):
    error = create_structured_error(failure)
    assert error.retryable is False
    assert error.retry_delay_ms is None
    assert error.max_retries is None
    assert error.recoverable == (len(error.suggestions) > 0)


def test_context_flows_into_suggestions():
    context = ErrorContext(tool_name="create_invoice", session_id="s-1")
    error = create_structured_error(ValueError("invalid due date"), context)
    assert error.context is context
    assert error.title == "Invalid Input"
    assert [s.action for s in error.suggestions] == ["review_input", "show_tool_schema"]


def test_message_is_sanitized_but_original_is_preserved():
    key = "sk-" + "a1B2" * 10
    original = RuntimeError(f"database rejected postgres://admin:pw@db:5432/books using {key}")
    error = create_structured_error(original)

    assert key not in error.message
    assert "[API_KEY_REDACTED]" in error.message
    assert "[DATABASE_URL_REDACTED]" in error.message
    assert "admin:pw" not in error.message
    assert error.original_error is original
    assert key in str(error.original_error)


def test_non_exception_failure_is_wrapped():
    error = create_structured_error("disk full")
    assert error.category is ErrorCategory.UNKNOWN
    assert error.code is ErrorCode.UNEXPECTED_ERROR
    assert error.title == "Unexpected Error"
    assert isinstance(error.original_error, Exception)
    assert str(error.original_error) == "disk full"
    assert error.message == "disk full"


def test_tool_not_found_is_not_retryable():
    error = create_structured_error(ToolNotFoundError("void_invoice"))
    assert error.code is ErrorCode.TOOL_NOT_FOUND
    assert error.category is ErrorCategory.TOOL
    assert error.retryable is False
    assert "void_invoice" in error.message


def test_rebuilding_a_structured_error_keeps_cause():
    cause = TimeoutError("request timed out")
    first = create_structured_error(cause)
    second = create_structured_error(first)
    assert isinstance(second, StructuredError)
    assert second is not first
    assert second.code is first.code
    assert second.original_error is cause


def test_retry_policy_overrides():
    policies = {ErrorCategory.TIMEOUT: RetryPolicy(delay_ms=250, max_retries=6)}
    error = create_structured_error(TimeoutError("timed out"), retry_policies=policies)
    assert (error.retry_delay_ms, error.max_retries) == (250, 6)


def test_retry_defaults_helper():
    assert retry_defaults(ErrorCategory.VALIDATION, ErrorCode.INVALID_INPUT) == (None, None)
    assert retry_defaults(ErrorCategory.LLM, ErrorCode.LLM_TIMEOUT) == (30_000, 2)
    assert retry_defaults(ErrorCategory.LLM, ErrorCode.LLM_RATE_LIMITED) == (60_000, 3)
