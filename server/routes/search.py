"""Search command endpoints: explicit search, link visiting, chat interception, cache reset."""

from fastapi import APIRouter, Depends, status

from server.dependencies import get_api_key, get_orchestrator, get_settings
from server.schemas.requests import (
    DiagnosticSearchRequest,
    InterceptRequest,
    SearchRequest,
    VisitRequest,
)
from server.schemas.responses import (
    DiagnosticSearchResponseDTO,
    InterceptResponseDTO,
    SearchResponseDTO,
    VisitedPageDTO,
    VisitResponseDTO,
)
from utils.logger import get_logger
from websearch.collaborators import InMemoryTranscript
from websearch.contracts import ChatMessage

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Search"])


@router.post("/search", response_model=SearchResponseDTO)
async def search(
    request: SearchRequest,
    api_key: str = Depends(get_api_key),
    settings=Depends(get_settings),
    orchestrator=Depends(get_orchestrator),
):
    """Search the web; optionally visit result pages and return their text."""
    command_result = await orchestrator.search_command(
        request.query, settings, snippets=request.snippets, links=request.links
    )
    return SearchResponseDTO.from_command_result(request.query, command_result)


@router.post("/visit", response_model=VisitResponseDTO)
async def visit(
    request: VisitRequest,
    api_key: str = Depends(get_api_key),
    settings=Depends(get_settings),
    orchestrator=Depends(get_orchestrator),
):
    """Visit specific links and return the extracted text of each."""
    pages = await orchestrator.visit_command(request.links, settings)
    return VisitResponseDTO(pages=[VisitedPageDTO(link=p.link, text=p.text) for p in pages])


@router.post("/intercept", response_model=InterceptResponseDTO)
async def intercept(
    request: InterceptRequest,
    api_key: str = Depends(get_api_key),
    settings=Depends(get_settings),
    orchestrator=Depends(get_orchestrator),
):
    """Run one search cycle over a chat transcript and return the injected prompt."""
    transcript = InMemoryTranscript(
        [
            ChatMessage(
                text=item.text, is_user=item.is_user, is_system=item.is_system, index=item.index
            )
            for item in request.messages
        ]
    )
    outcome = await orchestrator.run_cycle(transcript, settings)
    return InterceptResponseDTO.from_cycle_result(outcome)


@router.post("/test-search", response_model=DiagnosticSearchResponseDTO)
async def test_search(
    request: DiagnosticSearchRequest,
    api_key: str = Depends(get_api_key),
    settings=Depends(get_settings),
    orchestrator=Depends(get_orchestrator),
):
    """Uncached search with the current settings."""
    result = await orchestrator.test_search(request.query, settings)
    return DiagnosticSearchResponseDTO(
        text=result.text, links=list(result.links), images=list(result.images)
    )


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cache(
    api_key: str = Depends(get_api_key),
    orchestrator=Depends(get_orchestrator),
):
    """Remove every cached search result."""
    await orchestrator.clear_cache()
