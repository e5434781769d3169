"""Web search prompt augmentation."""

from .contracts import AggregatedResult, ChatMessage, CycleState, RawHit, SearchCycleResult
from .factory import create_orchestrator_from_env
from .orchestrator import EXTENSION_PROMPT_MARKER, SearchOrchestrator

__all__ = [
    "AggregatedResult",
    "ChatMessage",
    "CycleState",
    "EXTENSION_PROMPT_MARKER",
    "RawHit",
    "SearchCycleResult",
    "SearchOrchestrator",
    "create_orchestrator_from_env",
]
