"""Factory for building the search orchestrator from environment configuration."""

import httpx

from config.config import Secrets, WebSearchSettings, get_settings_cell
from utils.logger import get_logger

from .cache import ResultCache
from .collaborators import PromptSink, ToolCallingDelegate
from .link_visitor import LinkVisitor
from .orchestrator import SearchOrchestrator
from .providers.registry import create_default_registry

logger = get_logger(__name__)

# Singleton cache instance (process-shared)
_cache_instance: ResultCache | None = None


def get_shared_cache(settings: WebSearchSettings) -> ResultCache:
    global _cache_instance

    if _cache_instance is None:
        _cache_instance = ResultCache(lifetime_seconds=settings.cache_lifetime)
    return _cache_instance


def create_http_client(settings: WebSearchSettings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(settings.request_timeout_s))


def create_orchestrator_from_env(
    sink: PromptSink,
    delegate: ToolCallingDelegate | None = None,
    http: httpx.AsyncClient | None = None,
) -> SearchOrchestrator:
    """
    Create a SearchOrchestrator from the process settings and environment.

    Environment variables:
        SERPAPI_API_KEY / SERPER_API_KEY / TAVILY_API_KEY: backend credentials
        WEBSEARCH_CONFIG: settings YAML path (default: config/websearch.yaml)

    Args:
        sink: Prompt injection sink of the host
        delegate: Tool-calling delegate of the host, if any
        http: Shared HTTP client (created from settings when omitted)

    Returns:
        Configured SearchOrchestrator sharing the process-wide cache
    """
    settings = get_settings_cell().get()
    secrets = Secrets.from_env()
    http = http or create_http_client(settings)

    registry = create_default_registry(secrets=secrets, http=http)
    logger.info(
        f"🚀 Web search ready (source={settings.source}, backends={', '.join(registry.sources())})"
    )

    return SearchOrchestrator(
        registry=registry,
        cache=get_shared_cache(settings),
        visitor=LinkVisitor(http),
        sink=sink,
        delegate=delegate,
    )
