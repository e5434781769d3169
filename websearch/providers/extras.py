"""Extras API websearch module backend (headless browser scraping on the Extras server)."""

from typing import Any

from utils.logger import get_logger

from ..contracts import RawHit
from .base import SearchProvider, as_dict, as_list, as_text, compact

logger = get_logger(__name__)


def parse_extras_payload(data: dict[str, Any], include_images: bool = False) -> RawHit:
    """The module returns newline-separated result text plus link and image lists."""
    results = data.get("results")
    text_bits = results.split("\n") if isinstance(results, str) else []

    return RawHit(
        text_bits=compact(bit.strip() for bit in text_bits),
        links=compact(as_text(x) for x in as_list(data.get("links"))),
        images=compact(as_text(x) for x in as_list(data.get("images"))) if include_images else [],
    )


class ExtrasProvider(SearchProvider):
    name = "extras"

    _headers = {"Content-Type": "application/json", "Bypass-Tunnel-Reminder": "bypass"}

    async def is_available(self) -> bool:
        """The Extras server must be reachable and have the websearch module loaded."""
        if not self.settings.extras_url:
            return False

        try:
            data = await self._get_json(f"{self.settings.extras_url}/api/modules", headers=self._headers)
        except Exception as e:
            logger.debug(f"Extras module probe failed: {e}")
            return False

        return "websearch" in as_list(as_dict(data).get("modules"))

    async def search(self, query: str) -> RawHit:
        data = await self._post_json(
            f"{self.settings.extras_url}/api/websearch",
            json={"query": query, "engine": self.settings.extras_engine},
            headers=self._headers,
        )
        return parse_extras_payload(as_dict(data), include_images=self.settings.include_images)
