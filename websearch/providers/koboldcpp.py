"""KoboldCpp built-in websearch endpoint backend."""

from typing import Any

from ..contracts import RawHit
from .base import MAX_RESULTS, SearchProvider, as_dict, as_list, as_text, compact, first_text


def parse_koboldcpp_payload(data: Any) -> RawHit:
    """The endpoint returns a list of {title, url, desc, content}."""
    hit = RawHit()
    for result in as_list(data)[:MAX_RESULTS]:
        result = as_dict(result)
        hit.text_bits.extend(compact([first_text(result, "desc", "content")]))
        hit.links.extend(compact([as_text(result.get("url"))]))
    return hit


class KoboldCppProvider(SearchProvider):
    name = "koboldcpp"

    async def is_available(self) -> bool:
        return bool(self.settings.koboldcpp_url)

    async def search(self, query: str) -> RawHit:
        data = await self._post_json(
            f"{self.settings.koboldcpp_url}/api/extra/websearch", json={"q": query}
        )
        return parse_koboldcpp_payload(data)
