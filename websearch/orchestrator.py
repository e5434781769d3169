"""Search orchestration: one cycle per chat turn, plus the explicit search commands."""

import time

from config.config import WebSearchSettings
from utils.logger import get_logger

from .aggregator import aggregate
from .cache import ResultCache
from .collaborators import ChatTranscript, PromptSink, ToolCallingDelegate
from .contracts import (
    AggregatedResult,
    ChatMessage,
    CycleState,
    SearchCommandResult,
    SearchCycleResult,
    VisitedPage,
)
from .intent import extract_search_query, is_break_condition
from .link_visitor import LinkVisitor
from .providers.registry import ProviderRegistry
from .research_pack import attachment_file_name, build_injected_text, compose_visit_file

logger = get_logger(__name__)

EXTENSION_PROMPT_MARKER = "___WebSearch___"


def find_search_query(
    messages: list[ChatMessage], settings: WebSearchSettings
) -> tuple[str, ChatMessage | None]:
    """
    Scan the transcript most-recent-first for a search query.

    System messages are skipped; a hard-stop user message ends the scan; the
    first user message yielding a query wins.

    Returns:
        (query, trigger message), or ("", None) when nothing asks for a search
    """
    for message in reversed(messages):
        if message.is_system:
            continue

        if message.text and message.is_user:
            if is_break_condition(message.text):
                break

            query = extract_search_query(message.text, settings)
            if not query:
                continue

            return query, message

    return "", None


class SearchOrchestrator:
    """
    Wires extraction, cache, provider, aggregation and visiting together.

    run_cycle() NEVER raises: every failure ends the cycle with the injected
    prompt cleared and the reason recorded in the returned SearchCycleResult.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        cache: ResultCache,
        visitor: LinkVisitor,
        sink: PromptSink,
        delegate: ToolCallingDelegate | None = None,
    ):
        self.registry = registry
        self.cache = cache
        self.visitor = visitor
        self.sink = sink
        self.delegate = delegate

    def _publish(self, text: str, settings: WebSearchSettings) -> None:
        self.sink.set_extension_prompt(
            EXTENSION_PROMPT_MARKER, text, settings.position, settings.depth
        )

    async def is_available(self, settings: WebSearchSettings) -> bool:
        return await self.registry.is_available(settings)

    async def perform_search(
        self, query: str, settings: WebSearchSettings, use_cache: bool = True
    ) -> tuple[AggregatedResult, bool]:
        """
        Search with the cache in front of the provider.

        Args:
            query: Search query
            settings: Settings snapshot for this call
            use_cache: Read and write the cache (False for test searches)

        Returns:
            (result, cache_hit); result.text is empty when the search failed
        """
        if use_cache:
            cached = await self.cache.get(query, lifetime_seconds=settings.cache_lifetime)
            if cached is not None:
                logger.info(f"✅ Cache hit for query: '{query}'")
                return cached, True

        logger.info(f"🔎 Searching '{settings.source}': {query}")
        provider_result = await self.registry.run_search(query, settings)
        if not provider_result.ok:
            logger.warning(f"Search failed: {provider_result.error}")

        result = aggregate(provider_result.hit, settings.budget)
        if result.empty:
            return result, False

        if use_cache:
            await self.cache.set(query, result)

        return result, False

    async def run_cycle(
        self, transcript: ChatTranscript, settings: WebSearchSettings
    ) -> SearchCycleResult:
        """
        Run one search cycle for the current chat.

        Args:
            transcript: Chat accessor
            settings: Settings snapshot for this cycle

        Returns:
            SearchCycleResult with the terminal state reached
        """
        start_time = time.monotonic()

        try:
            self._publish("", settings)

            if not settings.enabled:
                logger.debug("Web search is disabled")
                return SearchCycleResult(state=CycleState.DISABLED)

            if settings.use_function_tool and self.delegate is not None and self.delegate.is_active():
                logger.debug("Function tool is active, leaving the search to the model")
                return SearchCycleResult(state=CycleState.DELEGATED)

            messages = transcript.messages()
            if not messages:
                logger.debug("Chat is empty")
                return SearchCycleResult(state=CycleState.EMPTY_CHAT)

            if not await self.is_available(settings):
                return SearchCycleResult(state=CycleState.UNAVAILABLE)

            query, trigger = find_search_query(messages, settings)
            if not query:
                logger.debug("No user message with a search query found")
                return SearchCycleResult(state=CycleState.NO_QUERY)

            result, cache_hit = await self.perform_search(query, settings)
            if result.empty:
                return SearchCycleResult(state=CycleState.NO_RESULT, query=query)

            outcome = SearchCycleResult(
                state=CycleState.PUBLISHED,
                query=query,
                text=result.text,
                links=list(result.links),
                images=list(result.images),
                cache_hit=cache_hit,
            )

            if settings.visit_enabled and trigger is not None and (result.links or result.images):
                await self._attach_visits(transcript, trigger, query, result, settings, outcome)

            outcome.prompt = build_injected_text(settings.insertion_template, query, result.text)
            self._publish(outcome.prompt, settings)
            logger.info("Web search prompt updated", extra={"extra_fields": outcome.to_metadata()})
            return outcome

        except Exception as e:
            logger.error(f"❌ Error while processing the search cycle: {e}", exc_info=True)
            return SearchCycleResult(state=CycleState.NO_RESULT, error=str(e))

        finally:
            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            logger.info(f"Web search cycle finished in {elapsed_ms} ms")

    async def _attach_visits(
        self,
        transcript: ChatTranscript,
        trigger: ChatMessage,
        query: str,
        result: AggregatedResult,
        settings: WebSearchSettings,
        outcome: SearchCycleResult,
    ) -> None:
        """Visit pages and images and attach them to the trigger message. Best-effort."""
        if result.links and trigger.extra.get("file"):
            logger.debug("Message already has a file attachment")
        elif result.links:
            try:
                pages = await self.visitor.visit(
                    result.links, settings.visit_count, settings.visit_blacklist
                )
                file_text = compose_visit_file(
                    query, pages, settings.visit_file_header, settings.visit_block_header
                )
                if file_text:
                    reference = await transcript.attach_file(
                        trigger.index, attachment_file_name(query), file_text
                    )
                    if reference:
                        outcome.attachment = reference
                    else:
                        logger.warning("Failed to attach the visited pages file")
                else:
                    logger.debug("No text to attach")
            except Exception as e:
                logger.error(f"Failed to attach the visited pages: {e}", exc_info=True)

        if settings.include_images and result.images:
            try:
                images = await self.visitor.visit_images(
                    result.images,
                    settings.visit_count,
                    settings.visit_blacklist,
                    settings.image_dir,
                    label=query,
                )
                for image in images:
                    await transcript.attach_image(trigger.index, image.path)
                    outcome.image_attachments.append(image.path)
            except Exception as e:
                logger.error(f"Failed to attach the images: {e}", exc_info=True)

    async def search_command(
        self,
        query: str,
        settings: WebSearchSettings,
        snippets: bool = True,
        links: bool = False,
    ) -> SearchCommandResult:
        """
        Explicit search: snippets and/or the full text of the visited result pages.

        Args:
            query: Search query, used verbatim
            settings: Settings snapshot
            snippets: Include the aggregated snippets
            links: Visit result pages and append their text

        Returns:
            SearchCommandResult; output is "" when nothing could be produced
        """
        empty = SearchCommandResult(output="", result=AggregatedResult(text=""))

        query = (query or "").strip()
        if not query:
            logger.warning("No search query specified")
            return empty

        if not snippets and not links:
            logger.warning("No search result type specified")
            return empty

        if not await self.is_available(settings):
            return empty

        result, _ = await self.perform_search(query, settings, use_cache=True)
        output = result.text if snippets else ""
        pages: list[VisitedPage] = []

        if links and result.links:
            pages = await self.visitor.visit(
                result.links, settings.visit_count, settings.visit_blacklist
            )
            output += "\n" + compose_visit_file(
                query, pages, settings.visit_file_header, settings.visit_block_header
            )

        return SearchCommandResult(output=output, result=result, pages=pages)

    async def visit_command(self, links: list[str], settings: WebSearchSettings) -> list[VisitedPage]:
        """Visit the given links (blacklist still applies) and return their texts."""
        if not links:
            logger.warning("No links specified")
            return []

        if not await self.is_available(settings):
            return []

        return await self.visitor.visit(links, len(links), settings.visit_blacklist)

    async def test_search(self, query: str, settings: WebSearchSettings) -> AggregatedResult:
        """Uncached search with the current settings, for diagnostics."""
        result, _ = await self.perform_search(query, settings, use_cache=False)
        logger.info(f"Test search for '{query}': {len(result.text)} chars, {len(result.links)} links")
        return result

    async def clear_cache(self) -> None:
        await self.cache.clear()
