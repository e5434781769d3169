"""Web search exposed as a model-callable function tool."""

from typing import Any

from config.config import WebSearchSettings
from utils.logger import get_logger

from .orchestrator import SearchOrchestrator

logger = get_logger(__name__)

WEB_SEARCH_TOOL_NAME = "WebSearch"

WEB_SEARCH_TOOL = {
    "type": "function",
    "function": {
        "name": WEB_SEARCH_TOOL_NAME,
        "description": (
            "Search the web and get the content of the relevant pages. "
            "Search for unknown knowledge, public personalities, up-to-date information, "
            "weather, news."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Web search query."},
                "links": {
                    "type": "boolean",
                    "description": "Whether to visit the result pages and include their full text.",
                },
            },
            "required": ["query"],
        },
    },
}


async def invoke_web_search_tool(
    orchestrator: SearchOrchestrator, arguments: dict[str, Any], settings: WebSearchSettings
) -> str:
    """
    Handle a WebSearch tool call.

    Args:
        orchestrator: Search orchestrator
        arguments: Tool call arguments as decoded from the model output
        settings: Settings snapshot

    Returns:
        Text for the tool result message

    Raises:
        ValueError: If the arguments are malformed
    """
    query = arguments.get("query")
    if not isinstance(query, str) or not query.strip():
        raise ValueError("WebSearch tool requires a non-empty 'query' string")

    links = arguments.get("links", False)
    if not isinstance(links, bool):
        raise ValueError("WebSearch tool 'links' must be a boolean")

    logger.info(f"WebSearch tool called: '{query}' (links={links})")
    result = await orchestrator.search_command(query, settings, snippets=True, links=links)
    return result.output
