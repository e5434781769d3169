"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from server.dependencies import get_orchestrator, get_settings
from server.schemas.responses import HealthResponseDTO

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponseDTO)
async def health_check(settings=Depends(get_settings), orchestrator=Depends(get_orchestrator)):
    """Health check endpoint, including the selected backend's availability."""
    return HealthResponseDTO(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        version="1.0.0",
        source=str(settings.source),
        source_available=await orchestrator.is_available(settings),
    )
