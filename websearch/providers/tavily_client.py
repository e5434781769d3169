"""Tavily API search backend.

Tavily returns a generated answer plus ranked sources with clean extracted
content, so its payload maps directly onto a RawHit.
"""

from typing import Any

from utils.logger import get_logger

from ..contracts import RawHit
from .base import MAX_RESULTS, SearchProvider, as_dict, as_list, as_text, compact

logger = get_logger(__name__)


def parse_tavily_payload(response: dict[str, Any]) -> RawHit:
    """Answer first, then result contents; images may be URLs or {url, description}."""
    hit = RawHit()

    answer = as_text(response.get("answer"))
    if answer:
        hit.text_bits.append(answer)

    for result in as_list(response.get("results"))[:MAX_RESULTS]:
        result = as_dict(result)
        hit.text_bits.extend(compact([as_text(result.get("content"))]))
        hit.links.extend(compact([as_text(result.get("url"))]))

    for image in as_list(response.get("images")):
        url = as_text(image) if isinstance(image, str) else as_text(as_dict(image).get("url"))
        hit.images.extend(compact([url]))

    return hit


class TavilyProvider(SearchProvider):
    """
    Tavily-powered search.

    The tavily client is imported lazily so the package works without it
    unless this backend is selected.
    """

    name = "tavily"

    def _client(self):
        try:
            from tavily import AsyncTavilyClient
        except ModuleNotFoundError as e:
            raise ModuleNotFoundError(
                "Optional dependency 'tavily' is not installed. "
                "Install it to enable the Tavily backend: pip install tavily-python"
            ) from e

        return AsyncTavilyClient(api_key=self.secrets.tavily_api_key)

    async def is_available(self) -> bool:
        return bool(self.secrets.tavily_api_key)

    async def search(self, query: str) -> RawHit:
        logger.info(f"Tavily search: '{query}' (max_results={MAX_RESULTS})")

        response = await self._client().search(
            query=query,
            search_depth="advanced",
            max_results=MAX_RESULTS,
            include_answer=True,
            include_images=self.settings.include_images,
            include_raw_content=False,
        )

        hit = parse_tavily_payload(as_dict(response))
        if not self.settings.include_images:
            hit.images = []

        logger.info(f"✅ Tavily returned {len(hit.links)} sources")
        return hit
