"""SerpApi (Google results) search backend."""

from typing import Any

from utils.logger import get_logger

from ..contracts import RawHit
from .base import MAX_RESULTS, SearchProvider, as_dict, as_list, as_text, compact, first_text

logger = get_logger(__name__)

SERPAPI_SEARCH_URL = "https://serpapi.com/search.json"


def _join(*parts: Any, sep: str = " ") -> str:
    return sep.join(compact(as_text(part) for part in parts))


def parse_answer_box(box: dict[str, Any]) -> list[str]:
    """
    Map a SerpApi answer box into text bits.

    The answer box shape depends on its "type"; unknown types fall back to
    result / answer / title.
    """
    box_type = box.get("type")

    if box_type == "organic_result":
        bits = [first_text(box, "snippet", "result", "title")]
        if as_list(box.get("list")):
            bits.append("\n".join(compact(as_text(x) for x in box["list"])))
        if as_list(box.get("table")):
            rows = [row if isinstance(row, str) else " ".join(map(str, row)) for row in box["table"]]
            bits.append("\n".join(rows))
        return compact(bits)

    if box_type == "translation_result":
        target = as_dict(as_dict(box.get("translation")).get("target"))
        return compact([as_text(target.get("text"))])

    if box_type == "calculator_result":
        result = as_text(box.get("result"))
        return [f"Answer: {result}"] if result else []

    if box_type == "population_result":
        return compact([_join(box.get("place"), box.get("population"))])

    if box_type == "currency_converter":
        return compact([as_text(box.get("result"))])

    if box_type == "finance_results":
        return compact(
            [
                _join(
                    box.get("title"),
                    box.get("exchange"),
                    box.get("stock"),
                    box.get("price"),
                    box.get("currency"),
                )
            ]
        )

    if box_type == "weather_result":
        temperature = _join(box.get("temperature"), box.get("unit"))
        return compact([_join(box.get("location"), box.get("weather"), temperature, sep="; ")])

    if box_type == "flight_duration":
        return compact([as_text(box.get("duration"))])

    if box_type == "dictionary_results":
        definitions = compact(as_text(x) for x in as_list(box.get("definitions")))
        return ["\n".join(definitions)] if definitions else []

    if box_type == "time":
        return compact([_join(box.get("result"), box.get("date"))])

    return compact([first_text(box, "result", "answer", "title")])


def parse_serpapi_payload(data: dict[str, Any], include_images: bool = False) -> RawHit:
    """
    Map a SerpApi response into a RawHit.

    Order: answer box, knowledge graph, then organic results and related
    questions interleaved by rank (first MAX_RESULTS of each).
    """
    hit = RawHit()
    organic = as_list(data.get("organic_results"))[:MAX_RESULTS]
    related = as_list(data.get("related_questions"))[:MAX_RESULTS]

    hit.links.extend(compact(as_text(as_dict(x).get("link")) for x in organic))

    if data.get("answer_box"):
        hit.text_bits.extend(parse_answer_box(as_dict(data["answer_box"])))

    if data.get("knowledge_graph"):
        graph = as_dict(data["knowledge_graph"])
        hit.text_bits.extend(
            compact([first_text(graph, "description", "snippet", "merchant_description", "title")])
        )

    for i in range(MAX_RESULTS):
        if i < len(organic):
            hit.text_bits.extend(compact([as_text(as_dict(organic[i]).get("snippet"))]))
        if i < len(related):
            question = as_dict(related[i])
            hit.text_bits.extend(compact([_join(question.get("question"), question.get("snippet"))]))

    if include_images:
        for image in as_list(data.get("inline_images")):
            hit.images.extend(compact([first_text(as_dict(image), "original", "thumbnail")]))

    return hit


class SerpApiProvider(SearchProvider):
    """Google search through SerpApi."""

    name = "serpapi"

    async def is_available(self) -> bool:
        return bool(self.secrets.serpapi_api_key)

    async def search(self, query: str) -> RawHit:
        data = await self._get_json(
            SERPAPI_SEARCH_URL,
            params={"q": query, "api_key": self.secrets.serpapi_api_key, "engine": "google"},
        )
        logger.debug("SerpApi search response", extra={"extra_fields": {"query": query}})
        return parse_serpapi_payload(as_dict(data), include_images=self.settings.include_images)
