"""Build the injected prompt text and the visited-pages attachment."""

import re
import time

from config.config import DEFAULT_INSERTION_TEMPLATE

from .contracts import VisitedPage
from .text_utils import sluggify, substitute_params

_TEXT_MACRO = re.compile(r"\{\{text\}\}", re.IGNORECASE)


def build_injected_text(template: str, query: str, text: str) -> str:
    """
    Render the insertion template.

    An empty template falls back to the default one; a template without a
    {{text}} macro gets it appended on a new line.

    Args:
        template: Configured insertion template
        query: Search query
        text: Aggregated result text

    Returns:
        Prompt text ready for the injection sink
    """
    if not template:
        template = DEFAULT_INSERTION_TEMPLATE

    if not _TEXT_MACRO.search(template):
        template += "\n{{text}}"

    return substitute_params(template, {"text": text, "query": query})


def compose_visit_file(
    query: str, pages: list[VisitedPage], file_header: str, block_header: str
) -> str:
    """
    Build the attachment text: the file header once, then one block per page.

    Returns:
        Composite text, or "" when no page has text
    """
    blocks = [
        substitute_params(block_header, {"query": query, "link": page.link, "text": page.text})
        for page in pages
        if page.text
    ]
    if not blocks:
        return ""

    return substitute_params(file_header, {"query": query}) + "".join(blocks)


def attachment_file_name(query: str) -> str:
    return f"websearch_{sluggify(query)}_{int(time.time() * 1000)}.txt"
