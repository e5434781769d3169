"""SearXNG (self-hosted metasearch) backend using its JSON output format."""

from typing import Any

from utils.logger import get_logger

from ..contracts import RawHit
from .base import MAX_RESULTS, SearchProvider, as_dict, as_list, as_text, compact, first_text

logger = get_logger(__name__)


def parse_searxng_payload(data: dict[str, Any]) -> RawHit:
    """Direct answers, then infobox content, then ranked result snippets."""
    hit = RawHit()

    for answer in as_list(data.get("answers")):
        text = as_text(answer) if isinstance(answer, str) else first_text(as_dict(answer), "answer")
        hit.text_bits.extend(compact([text]))

    for infobox in as_list(data.get("infoboxes")):
        hit.text_bits.extend(compact([first_text(as_dict(infobox), "content", "infobox")]))

    for result in as_list(data.get("results"))[:MAX_RESULTS]:
        result = as_dict(result)
        hit.text_bits.extend(compact([as_text(result.get("content"))]))
        hit.links.extend(compact([as_text(result.get("url"))]))

    return hit


class SearXNGProvider(SearchProvider):
    """Search through a SearXNG instance (json format must be enabled on it)."""

    name = "searxng"

    async def is_available(self) -> bool:
        return bool(self.settings.searxng_url)

    async def search(self, query: str) -> RawHit:
        url = f"{self.settings.searxng_url}/search"
        data = await self._get_json(url, params={"q": query, "format": "json"})
        hit = parse_searxng_payload(as_dict(data))

        if self.settings.include_images:
            images = await self._get_json(
                url, params={"q": query, "format": "json", "categories": "images"}
            )
            for result in as_list(as_dict(images).get("results"))[:MAX_RESULTS]:
                hit.images.extend(compact([first_text(as_dict(result), "img_src", "thumbnail_src")]))

        return hit
