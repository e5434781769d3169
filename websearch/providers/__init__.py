"""Search backends."""

from .base import MAX_RESULTS, SearchProvider
from .registry import ProviderRegistry, create_default_registry

__all__ = ["MAX_RESULTS", "ProviderRegistry", "SearchProvider", "create_default_registry"]
