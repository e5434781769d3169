"""Settings endpoints: read the current options and hot-reload changes."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError

from config.config import WebSearchSettings, get_settings_cell
from server.dependencies import get_api_key
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Settings"])


@router.get("/settings")
async def read_settings(api_key: str = Depends(get_api_key)) -> dict[str, Any]:
    return get_settings_cell().get().model_dump(mode="json")


@router.patch("/settings")
async def update_settings(
    changes: dict[str, Any] = Body(...),
    api_key: str = Depends(get_api_key),
) -> dict[str, Any]:
    """Apply a partial update; the merged settings are validated as a whole."""
    unknown = sorted(set(changes) - set(WebSearchSettings.model_fields))
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown settings: {', '.join(unknown)}",
        )

    try:
        settings = get_settings_cell().update(**changes)
    except ValidationError as e:
        logger.warning(f"Rejected settings update: {e.error_count()} errors")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        ) from e

    return settings.model_dump(mode="json")
