"""FastAPI dependencies for authentication, settings and orchestrator access."""

import os

from fastapi import Header, HTTPException, Request, status

from config.config import WebSearchSettings, get_settings_cell
from server.utils import redact_sensitive_headers
from utils.logger import get_logger
from websearch.collaborators import InMemoryPromptSink

logger = get_logger(__name__)


async def get_api_key(request: Request, x_api_key: str | None = Header(None)):
    """Validate API key from X-API-Key header."""
    valid_keys_str = os.getenv("API_KEYS", "")
    redacted_headers = redact_sensitive_headers(dict(request.headers))

    if not valid_keys_str:
        logger.error(
            "API authentication not configured",
            extra={"extra_fields": {"path": request.url.path, "headers": redacted_headers}},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API authentication not configured",
        )

    valid_keys = [k.strip() for k in valid_keys_str.split(",") if k.strip()]

    if not x_api_key or x_api_key not in valid_keys:
        logger.warning(
            "API authentication failed",
            extra={"extra_fields": {"path": request.url.path, "headers": redacted_headers}},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or missing API key"
        )

    return x_api_key


def get_settings() -> WebSearchSettings:
    """Snapshot of the current settings for one request."""
    return get_settings_cell().get()


def get_prompt_sink() -> InMemoryPromptSink:
    """Dependency to get the process-wide prompt sink (singleton pattern)."""
    if not hasattr(get_prompt_sink, "_instance"):
        get_prompt_sink._instance = InMemoryPromptSink()
    return get_prompt_sink._instance


def get_orchestrator():
    """Dependency to get orchestrator instance (singleton pattern)."""
    from websearch.factory import create_orchestrator_from_env

    if not hasattr(get_orchestrator, "_instance"):
        get_orchestrator._instance = create_orchestrator_from_env(sink=get_prompt_sink())
    return get_orchestrator._instance
