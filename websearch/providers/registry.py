"""Provider registry: maps a source id to its adapter and guards the call boundary."""

from collections.abc import Callable

import httpx

from config.config import Secrets, SearchSource, WebSearchSettings
from utils.logger import get_logger

from ..contracts import ProviderResult
from .base import SearchProvider
from .extras import ExtrasProvider
from .koboldcpp import KoboldCppProvider
from .searxng import SearXNGProvider
from .serpapi import SerpApiProvider
from .serper import SerperProvider
from .tavily_client import TavilyProvider

logger = get_logger(__name__)

ProviderFactory = Callable[[WebSearchSettings, Secrets, httpx.AsyncClient], SearchProvider]


def _source_id(source: str | SearchSource) -> str:
    return source.value if isinstance(source, SearchSource) else str(source)


class ProviderRegistry:
    """
    Registry of search backends.

    Backends register a factory under their source id; the settings snapshot
    of each call picks one. run_search() is the failure boundary: whatever
    the adapter raises comes back as a failed ProviderResult.
    """

    def __init__(self, secrets: Secrets, http: httpx.AsyncClient):
        self.secrets = secrets
        self.http = http
        self._factories: dict[str, ProviderFactory] = {}

    def register(self, source: str | SearchSource, factory: ProviderFactory) -> None:
        self._factories[_source_id(source)] = factory

    def sources(self) -> list[str]:
        return sorted(self._factories)

    def create(self, settings: WebSearchSettings) -> SearchProvider:
        """
        Build the adapter selected by settings.source.

        Raises:
            ValueError: If no backend is registered under that id
        """
        source = _source_id(settings.source)
        factory = self._factories.get(source)
        if factory is None:
            raise ValueError(f"Unrecognized search source: {source}")
        return factory(settings, self.secrets, self.http)

    async def is_available(self, settings: WebSearchSettings) -> bool:
        """Availability predicate of the selected backend; errors count as unavailable."""
        try:
            available = await self.create(settings).is_available()
        except Exception as e:
            logger.warning(f"Availability check failed for '{_source_id(settings.source)}': {e}")
            return False

        if not available:
            logger.debug(f"Search source '{_source_id(settings.source)}' is not available")
        return available

    async def run_search(self, query: str, settings: WebSearchSettings) -> ProviderResult:
        """
        Run the query against the selected backend.

        This method NEVER raises: transport, status and parse errors are logged
        and returned as ProviderResult.failed with an empty hit.
        """
        source = _source_id(settings.source)
        try:
            provider = self.create(settings)
            hit = await provider.search(query)
        except Exception as e:
            logger.error(
                f"❌ Search failed on '{source}': {e}",
                exc_info=True,
                extra={"extra_fields": {"source": source, "error_type": type(e).__name__}},
            )
            return ProviderResult.failed(f"{type(e).__name__}: {e}")

        logger.info(
            f"Search on '{source}' returned {len(hit.text_bits)} text bits, {len(hit.links)} links",
            extra={"extra_fields": {"source": source, "provider": provider.name}},
        )
        return ProviderResult.success(hit)


def create_default_registry(secrets: Secrets, http: httpx.AsyncClient) -> ProviderRegistry:
    """Registry with every built-in backend."""
    registry = ProviderRegistry(secrets=secrets, http=http)
    registry.register(SearchSource.SERPAPI, SerpApiProvider)
    registry.register(SearchSource.SERPER, SerperProvider)
    registry.register(SearchSource.TAVILY, TavilyProvider)
    registry.register(SearchSource.SEARXNG, SearXNGProvider)
    registry.register(SearchSource.EXTRAS, ExtrasProvider)
    registry.register(SearchSource.KOBOLDCPP, KoboldCppProvider)
    return registry
