"""Budget-constrained assembly of provider hits into injectable text."""

from utils.logger import get_logger

from .contracts import AggregatedResult, RawHit
from .text_utils import trim_to_end_sentence, trim_to_start_sentence, unique

logger = get_logger(__name__)

ELLIPSIS_MARKERS = ("...", "…")


def trim_fragment(bit: str) -> str:
    """
    Trim dangling sentence fragments marked by an ellipsis.

    A trailing marker means the snippet was cut mid-sentence: keep up to the
    last complete sentence. A leading marker means it starts mid-sentence:
    drop up to the first sentence boundary.
    """
    for marker in ELLIPSIS_MARKERS:
        if bit.endswith(marker):
            bit = trim_to_end_sentence(bit[: -len(marker)]).strip()
            break

    for marker in ELLIPSIS_MARKERS:
        if bit.startswith(marker):
            bit = trim_to_start_sentence(bit[len(marker) :]).strip()
            break

    return bit


def aggregate(raw_hit: RawHit, budget: int) -> AggregatedResult:
    """
    Build the final result text from a provider hit.

    The budget is a soft ceiling checked after each whole bit: the bit that
    crosses it is kept, the rest are dropped, nothing is split.

    Args:
        raw_hit: Provider output in priority order
        budget: Character budget

    Returns:
        AggregatedResult; text is empty when nothing usable was found
    """
    text = ""

    for bit in unique(raw_hit.text_bits):
        bit = trim_fragment(bit) if bit else ""
        if bit:
            text += bit + "\n"
        if len(text) > budget:
            break

    if not text:
        logger.debug("Search produced no text")
        return AggregatedResult(text="", links=[], images=[])

    logger.debug(f"Extracted text (length = {len(text)}, budget = {budget})")
    return AggregatedResult(
        text=text,
        links=unique(link for link in raw_hit.links if link),
        images=unique(image for image in raw_hit.images if image),
    )
