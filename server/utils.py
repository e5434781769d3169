"""Shared utilities for FastAPI routes."""

from collections.abc import Mapping

SENSITIVE_HEADERS = {"x-api-key", "authorization"}


def redact_sensitive_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy of the headers with credentials masked, safe for logging."""
    return {
        key: ("***" if key.lower() in SENSITIVE_HEADERS else value)
        for key, value in headers.items()
    }
