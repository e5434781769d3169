"""Serper (google.serper.dev) search backend."""

from typing import Any

from utils.logger import get_logger

from ..contracts import RawHit
from .base import MAX_RESULTS, SearchProvider, as_dict, as_list, as_text, compact, first_text

logger = get_logger(__name__)

SERPER_SEARCH_URL = "https://google.serper.dev/search"
SERPER_IMAGES_URL = "https://google.serper.dev/images"


def parse_serper_payload(data: dict[str, Any]) -> RawHit:
    """
    Map a Serper search response.

    Order: answer box, knowledge graph, then organic results and people-also-ask
    entries interleaved by rank.
    """
    hit = RawHit()
    organic = as_list(data.get("organic"))[:MAX_RESULTS]
    related = as_list(data.get("peopleAlsoAsk"))[:MAX_RESULTS]

    answer_box = as_dict(data.get("answerBox"))
    if answer_box:
        hit.text_bits.extend(compact([first_text(answer_box, "answer", "snippet", "title")]))

    graph = as_dict(data.get("knowledgeGraph"))
    if graph:
        hit.text_bits.extend(compact([first_text(graph, "description", "title")]))

    hit.links.extend(compact(as_text(as_dict(x).get("link")) for x in organic))

    for i in range(MAX_RESULTS):
        if i < len(organic):
            hit.text_bits.extend(compact([as_text(as_dict(organic[i]).get("snippet"))]))
        if i < len(related):
            question = as_dict(related[i])
            text = " ".join(compact([as_text(question.get("question")), as_text(question.get("snippet"))]))
            hit.text_bits.extend(compact([text]))

    return hit


class SerperProvider(SearchProvider):
    """Google search through Serper."""

    name = "serper"

    def _headers(self) -> dict[str, str]:
        return {"X-API-KEY": self.secrets.serper_api_key, "Content-Type": "application/json"}

    async def is_available(self) -> bool:
        return bool(self.secrets.serper_api_key)

    async def search(self, query: str) -> RawHit:
        data = await self._post_json(SERPER_SEARCH_URL, json={"q": query}, headers=self._headers())
        hit = parse_serper_payload(as_dict(data))

        if self.settings.include_images:
            images = await self._post_json(SERPER_IMAGES_URL, json={"q": query}, headers=self._headers())
            for image in as_list(as_dict(images).get("images"))[:MAX_RESULTS]:
                hit.images.extend(compact([as_text(as_dict(image).get("imageUrl"))]))

        return hit
