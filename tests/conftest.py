import os

import pytest
from dotenv import load_dotenv

# Load environment variables from .env file for tests
load_dotenv()

# Keep test runs from writing log files; read when the first logger is created
os.environ["LOG_TO_FILE"] = "false"
os.environ["LOG_TO_CONSOLE"] = "false"


class FakeBackend:
    """Stands in for a search provider: canned hit, call recording, optional failure."""

    def __init__(self):
        from websearch.contracts import RawHit

        self.hit = RawHit()
        self.available = True
        self.error: Exception | None = None
        self.queries: list[str] = []

    def factory(self, settings, secrets, http):
        from websearch.providers.base import SearchProvider

        backend = self

        class _Provider(SearchProvider):
            name = "fake"

            async def is_available(self) -> bool:
                return backend.available

            async def search(self, query: str):
                backend.queries.append(query)
                if backend.error is not None:
                    raise backend.error
                return backend.hit

        return _Provider(settings, secrets, http)


class FakeVisitor:
    """Records visit calls and returns canned pages and images."""

    def __init__(self):
        self.pages = []
        self.images = []
        self.error: Exception | None = None
        self.visited: list[list[str]] = []
        self.image_calls: list[list[str]] = []

    async def visit(self, links, max_count, blacklist):
        self.visited.append(list(links))
        if self.error is not None:
            raise self.error
        return list(self.pages)

    async def visit_images(self, images, max_count, blacklist, target_dir, label="image"):
        self.image_calls.append(list(images))
        return list(self.images)


@pytest.fixture
def make_settings():
    """Factory for enabled settings with overrides."""
    from config.config import WebSearchSettings

    def _make(**overrides):
        values = {"enabled": True}
        values.update(overrides)
        return WebSearchSettings(**values)

    return _make


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def fake_visitor():
    return FakeVisitor()


@pytest.fixture
def registry(fake_backend):
    """Registry whose serpapi slot is served by the fake backend."""
    from config.config import Secrets, SearchSource
    from websearch.providers.registry import ProviderRegistry

    registry = ProviderRegistry(secrets=Secrets(), http=None)
    registry.register(SearchSource.SERPAPI, fake_backend.factory)
    return registry


@pytest.fixture
def orchestrator(registry, fake_visitor):
    from websearch.cache import ResultCache
    from websearch.collaborators import InMemoryPromptSink, StaticToolDelegate
    from websearch.orchestrator import SearchOrchestrator

    return SearchOrchestrator(
        registry=registry,
        cache=ResultCache(lifetime_seconds=3600),
        visitor=fake_visitor,
        sink=InMemoryPromptSink(),
        delegate=StaticToolDelegate(active=False),
    )


@pytest.fixture
def mock_env(monkeypatch):
    """Fixture to mock environment variables for testing."""
    env_vars = {
        "SERPAPI_API_KEY": "test-serpapi-key",
        "API_KEYS": "test-key-1,test-key-2",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    for key in ("WEBSEARCH_ENABLED", "WEBSEARCH_SOURCE", "WEBSEARCH_CONFIG", "SEARXNG_URL"):
        monkeypatch.delenv(key, raising=False)
    return env_vars
