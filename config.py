"""Retry defaults and runtime configuration loading."""
from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from errors import ErrorCategory

DEFAULT_BACKOFF_MULTIPLIER = 2.0


@dataclass(frozen=True)
class RetryPolicy:
    """Advisory retry defaults attached to a retryable structured error."""

    delay_ms: int
    max_retries: int


DEFAULT_RETRY_POLICIES: Dict[ErrorCategory, RetryPolicy] = {
    ErrorCategory.RATE_LIMIT: RetryPolicy(delay_ms=60_000, max_retries=3),
    ErrorCategory.TIMEOUT: RetryPolicy(delay_ms=5_000, max_retries=2),
    ErrorCategory.DEPENDENCY: RetryPolicy(delay_ms=10_000, max_retries=3),
    ErrorCategory.LLM: RetryPolicy(delay_ms=30_000, max_retries=2),
}


@dataclass(frozen=True)
class RuntimeConfig:
    """Settings for the recovery engine and telemetry export."""

    retry_policies: Mapping[ErrorCategory, RetryPolicy] = field(
        default_factory=lambda: dict(DEFAULT_RETRY_POLICIES)
    )
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    telemetry_log_path: Optional[Path] = None


def _parse_int(raw: Optional[str], fallback: int, *, minimum: int) -> int:
    """Return an integer parsed from *raw* if it is at least *minimum*, else *fallback*."""

    if raw is None:
        return fallback
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return fallback
    return value if value >= minimum else fallback


def _parse_multiplier(raw: Optional[str], fallback: float) -> float:
    if raw is None:
        return fallback
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return fallback
    return value if value >= 1 else fallback


def _env_prefix(category: ErrorCategory) -> str:
    return f"AGENT_RETRY_{category.value.upper()}"


def load_retry_policies(env: Optional[Mapping[str, str]] = None) -> Dict[ErrorCategory, RetryPolicy]:
    """Load per-category retry defaults from environment variables with safe fallbacks.

    ``AGENT_RETRY_RATE_LIMIT_DELAY_MS=30000`` overrides the rate-limit delay,
    ``AGENT_RETRY_LLM_MAX_RETRIES=1`` the LLM retry count, and so on.
    """

    source = os.environ if env is None else env
    policies: Dict[ErrorCategory, RetryPolicy] = {}
    for category, default in DEFAULT_RETRY_POLICIES.items():
        prefix = _env_prefix(category)
        policies[category] = RetryPolicy(
            delay_ms=_parse_int(source.get(f"{prefix}_DELAY_MS"), default.delay_ms, minimum=1),
            max_retries=_parse_int(source.get(f"{prefix}_MAX_RETRIES"), default.max_retries, minimum=0),
        )
    return policies


def load_runtime_config(
    path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> RuntimeConfig:
    """Build a ``RuntimeConfig`` from the environment, then apply a TOML file if given.

    The file uses a ``[runtime]`` table::

        [runtime]
        backoff_multiplier = 3
        telemetry_log = "logs/runtime.jsonl"

        [runtime.retry.timeout]
        delay_ms = 2000
        max_retries = 4
    """

    source = os.environ if env is None else env
    policies = load_retry_policies(source)
    multiplier = _parse_multiplier(source.get("AGENT_RETRY_BACKOFF_MULTIPLIER"), DEFAULT_BACKOFF_MULTIPLIER)

    if path is None:
        return RuntimeConfig(retry_policies=policies, backoff_multiplier=multiplier)

    if not path.exists():
        raise FileNotFoundError(path)

    with path.open("rb") as fh:
        data = tomllib.load(fh)

    runtime_section = data.get("runtime", {})
    if not isinstance(runtime_section, dict):
        raise ValueError("[runtime] section must be a table")

    base_dir = path.parent

    def _to_int(value: object, name: str, minimum: int) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name} must be an integer")
        if value < minimum:
            raise ValueError(f"{name} must be >= {minimum}")
        return value

    retry_section = runtime_section.get("retry", {})
    if not isinstance(retry_section, dict):
        raise ValueError("[runtime.retry] section must be a table")

    for key, table in retry_section.items():
        try:
            category = ErrorCategory(key)
        except ValueError:
            raise ValueError(f"unknown error category in [runtime.retry]: {key}") from None
        if category not in DEFAULT_RETRY_POLICIES:
            raise ValueError(f"category '{key}' is not retryable")
        if not isinstance(table, dict):
            raise ValueError(f"[runtime.retry.{key}] must be a table")
        current = policies[category]
        policies[category] = RetryPolicy(
            delay_ms=_to_int(table.get("delay_ms", current.delay_ms), f"{key}.delay_ms", 1),
            max_retries=_to_int(table.get("max_retries", current.max_retries), f"{key}.max_retries", 0),
        )

    raw_multiplier = runtime_section.get("backoff_multiplier")
    if raw_multiplier is not None:
        if isinstance(raw_multiplier, bool) or not isinstance(raw_multiplier, (int, float)):
            raise ValueError("backoff_multiplier must be a number")
        if raw_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")
        multiplier = float(raw_multiplier)

    telemetry_log = runtime_section.get("telemetry_log")
    telemetry_path: Optional[Path] = None
    if telemetry_log is not None:
        if not isinstance(telemetry_log, str):
            raise ValueError("paths must be strings")
        telemetry_path = (base_dir / telemetry_log).resolve()

    return RuntimeConfig(
        retry_policies=policies,
        backoff_multiplier=multiplier,
        telemetry_log_path=telemetry_path,
    )


__all__ = [
    "DEFAULT_BACKOFF_MULTIPLIER",
    "DEFAULT_RETRY_POLICIES",
    "RetryPolicy",
    "RuntimeConfig",
    "load_retry_policies",
    "load_runtime_config",
]
