"""Common interface for search backends."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

import httpx

from config.config import Secrets, WebSearchSettings

from ..contracts import RawHit

# Ranked results kept per category (organic-style, related-question-style)
MAX_RESULTS = 10


class SearchProvider(ABC):
    """
    Abstract base for search backends.

    An adapter is built per call with the settings snapshot of that call.
    search() may raise; ProviderRegistry.run_search turns failures into an
    empty ProviderResult.
    """

    # Adapter label in log records; the registry keys adapters by source id
    name: str = ""

    def __init__(self, settings: WebSearchSettings, secrets: Secrets, http: httpx.AsyncClient):
        self.settings = settings
        self.secrets = secrets
        self.http = http

    @abstractmethod
    async def is_available(self) -> bool:
        """Whether the backend is configured and may be called."""

    @abstractmethod
    async def search(self, query: str) -> RawHit:
        """Run the query and map the payload into a RawHit."""

    async def _get_json(self, url: str, **kwargs: Any) -> Any:
        response = await self.http.get(url, **kwargs)
        response.raise_for_status()
        return response.json()

    async def _post_json(self, url: str, **kwargs: Any) -> Any:
        response = await self.http.post(url, **kwargs)
        response.raise_for_status()
        return response.json()


def as_text(value: Any) -> str:
    """Best-effort string of a payload field; missing values become ""."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def first_text(mapping: dict[str, Any], *keys: str) -> str:
    """First non-empty string among the given keys."""
    for key in keys:
        text = as_text(mapping.get(key))
        if text:
            return text
    return ""


def as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def compact(items: Iterable[str]) -> list[str]:
    return [item for item in items if item]
