"""Small text helpers shared by extraction, aggregation and visiting."""

import re
from collections.abc import Iterable, Mapping

_END_PUNCTUATION = frozenset('.!?*")}`]$。！？”）】’」_')
_START_BOUNDARIES = (".", "!", "?", "\n")
_PLACEHOLDER = re.compile(r"\{\{\s*([a-zA-Z0-9_]+)\s*\}\}")


def unique(items: Iterable[str]) -> list[str]:
    """Deduplicate preserving first-occurrence order."""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def trim_to_end_sentence(text: str) -> str:
    """
    Cut text after the last sentence-ending punctuation mark.

    A mark preceded by whitespace (a stray quote or bracket) is dropped with
    it. Text without any mark is returned unchanged apart from trailing space.
    """
    if not text:
        return ""

    for i in range(len(text) - 1, -1, -1):
        if text[i] in _END_PUNCTUATION:
            last = i - 1 if i > 0 and text[i - 1].isspace() else i
            return text[: last + 1].rstrip()

    return text.rstrip()


def trim_to_start_sentence(text: str) -> str:
    """Drop everything up to and including the first sentence boundary."""
    if not text:
        return ""

    positions = [text.find(mark) for mark in _START_BOUNDARIES]
    positions = [pos for pos in positions if pos > 0]
    if not positions:
        return text

    return text[min(positions) + 1 :].lstrip()


def substitute_params(template: str, values: Mapping[str, object]) -> str:
    """
    Replace {{key}} placeholders (case-insensitive keys).

    Unknown placeholders are left as they are so hosts can expand their own.
    """
    lookup = {key.lower(): value for key, value in values.items()}

    def _replace(match: re.Match) -> str:
        key = match.group(1).lower()
        if key not in lookup:
            return match.group(0)
        return str(lookup[key])

    return _PLACEHOLDER.sub(_replace, template)


def sluggify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower())[:32]
