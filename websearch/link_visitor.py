"""Concurrent fetching of result pages and images."""

import asyncio
import mimetypes
import time
from pathlib import Path
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from utils.logger import get_logger

from .contracts import VisitedImage, VisitedPage
from .text_utils import sluggify

logger = get_logger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
}


def is_allowed_url(link: str, blacklist: list[str]) -> bool:
    """
    Check whether a link may be visited.

    Args:
        link: Candidate URL
        blacklist: Host substrings that must not be visited

    Returns:
        False for unparseable/non-http links and blacklisted hosts
    """
    try:
        parsed = urlparse(link)
        host = parsed.hostname
    except (ValueError, AttributeError):
        logger.debug(f"Invalid link: {link}")
        return False

    if parsed.scheme not in ("http", "https") or not host:
        logger.debug(f"Invalid link: {link}")
        return False

    if any(entry and entry.lower() in host for entry in blacklist):
        logger.debug(f"Blacklisted link: {link}")
        return False

    return True


def select_links(links: list[str], max_count: int, blacklist: list[str]) -> list[str]:
    """Allowed links, at most max_count, original order kept."""
    return [link for link in links if is_allowed_url(link, blacklist)][: max(max_count, 0)]


def extract_paragraph_text(html: str) -> str:
    """Text of <p> elements only, one paragraph per line."""
    soup = BeautifulSoup(html, "html.parser")
    paragraphs = (p.get_text(" ", strip=True) for p in soup.find_all("p"))
    return "\n".join(text for text in paragraphs if text)


def _image_extension(response: httpx.Response, link: str) -> str | None:
    content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type.startswith("image/"):
        return mimetypes.guess_extension(content_type) or "." + content_type.split("/")[1]

    suffix = Path(urlparse(link).path).suffix.lower()
    if suffix in (".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".svg"):
        return suffix
    return None


class LinkVisitor:
    """
    Visits result links concurrently.

    All fetches start together and are joined with "wait for all, keep the
    successes"; a failing link is logged and dropped without affecting the
    others.
    """

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def _fetch(self, link: str) -> httpx.Response:
        response = await self.http.get(link, headers=DEFAULT_HEADERS, follow_redirects=True)
        response.raise_for_status()
        return response

    async def visit_link(self, link: str) -> VisitedPage:
        response = await self._fetch(link)
        text = extract_paragraph_text(response.text)
        logger.debug(f"Visit result for {link}: {len(text)} chars")
        return VisitedPage(link=link, text=text)

    async def visit(self, links: list[str], max_count: int, blacklist: list[str]) -> list[VisitedPage]:
        """
        Fetch pages and extract their paragraph text.

        Args:
            links: Candidate links in rank order
            max_count: Maximum number of pages to fetch
            blacklist: Host substrings to skip

        Returns:
            Successful, non-empty extractions in original link order
        """
        selected = select_links(links, max_count, blacklist)
        if not selected:
            logger.debug("No links to visit")
            return []

        results = await asyncio.gather(
            *(self.visit_link(link) for link in selected), return_exceptions=True
        )

        pages: list[VisitedPage] = []
        for link, result in zip(selected, results):
            if isinstance(result, BaseException):
                logger.warning(f"Visit failed for {link}: {result}")
                continue
            if result.text:
                pages.append(result)

        logger.info(f"Visited {len(selected)} links, {len(pages)} with text")
        return pages

    async def download_image(self, link: str, target_dir: Path, stem: str) -> VisitedImage:
        response = await self._fetch(link)
        extension = _image_extension(response, link)
        if extension is None:
            raise ValueError(f"not an image: {response.headers.get('content-type', 'unknown')}")

        path = target_dir / f"{stem}{extension}"
        await asyncio.to_thread(path.write_bytes, response.content)
        return VisitedImage(link=link, path=str(path))

    async def visit_images(
        self,
        images: list[str],
        max_count: int,
        blacklist: list[str],
        target_dir: str | Path,
        label: str = "image",
    ) -> list[VisitedImage]:
        """
        Download images and persist them as local files.

        The files belong to the chat once attached; nothing here deletes them.

        Args:
            images: Candidate image URLs
            max_count: Maximum number of downloads
            blacklist: Host substrings to skip
            target_dir: Directory receiving the files
            label: Used in file names (usually the query)

        Returns:
            Successfully saved images in original order
        """
        selected = select_links(images, max_count, blacklist)
        if not selected:
            return []

        directory = Path(target_dir)
        await asyncio.to_thread(directory.mkdir, parents=True, exist_ok=True)
        prefix = f"websearch_{sluggify(label)}_{int(time.time() * 1000)}"

        results = await asyncio.gather(
            *(
                self.download_image(link, directory, f"{prefix}_{i}")
                for i, link in enumerate(selected)
            ),
            return_exceptions=True,
        )

        saved: list[VisitedImage] = []
        for link, result in zip(selected, results):
            if isinstance(result, BaseException):
                logger.warning(f"Image download failed for {link}: {result}")
                continue
            saved.append(result)

        logger.info(f"Downloaded {len(saved)} of {len(selected)} images")
        return saved
