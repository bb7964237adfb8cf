"""Redaction of secrets from user-facing error text."""
from __future__ import annotations

import re

API_KEY_PLACEHOLDER = "[API_KEY_REDACTED]"
URL_PLACEHOLDER = "[URL_REDACTED]"
DATABASE_URL_PLACEHOLDER = "[DATABASE_URL_REDACTED]"

_API_KEY_RE = re.compile(r"sk-[a-zA-Z0-9]{32,}")
_TOKEN_URL_RE = re.compile(r"https?://[^\s]*token=[^\s&]*", re.IGNORECASE)
_DATABASE_URL_RE = re.compile(
    r"(?:postgres(?:ql)?|mysql|mongodb(?:\+srv)?|redis)://[^\s]*",
    re.IGNORECASE,
)


def sanitize_error_message(message: str) -> str:
    """Strip API keys, token-bearing URLs and database connection strings."""

    if not isinstance(message, str):
        message = str(message)
    sanitized = _API_KEY_RE.sub(API_KEY_PLACEHOLDER, message)
    sanitized = _TOKEN_URL_RE.sub(URL_PLACEHOLDER, sanitized)
    sanitized = _DATABASE_URL_RE.sub(DATABASE_URL_PLACEHOLDER, sanitized)
    return sanitized


__all__ = [
    "API_KEY_PLACEHOLDER",
    "DATABASE_URL_PLACEHOLDER",
    "URL_PLACEHOLDER",
    "sanitize_error_message",
]
