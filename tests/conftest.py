"""Shared pytest fixtures for the agent runtime test suite."""
from __future__ import annotations

from types import SimpleNamespace

import pytest

from tests.tool_harness import FakeSleep
from tools.registry import ToolRegistry


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def rate_limit_response() -> SimpleNamespace:
    """Minimal stand-in for the HTTP response carried by Anthropic status errors."""
    return SimpleNamespace(
        request=SimpleNamespace(url="https://api.test"),
        status_code=429,
        text="rate limit",
        headers={},
    )
