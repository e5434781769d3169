"""Intent detection: deciding whether a chat message asks for a web search, and for what."""

import re

from config.config import WebSearchSettings
from utils.logger import get_logger

logger = get_logger(__name__)

# Punctuation removed during normalization (backslash included)
_PUNCTUATION = re.compile(r"[\\.,@#!?$%&;:{}=_~\[\]]")
_QUOTES = re.compile(r"[\"“”]")
_TRIPLE_BACKTICK_BLOCK = re.compile(r"```[^`]+```")
_BACKTICK_QUERY = re.compile(r"`([^`]+)`")
_GROUP_REFERENCE = re.compile(r"\$(\d\d?)")


def is_break_condition(message: str | None) -> bool:
    """
    Detect a hard-stop message.

    A user message starting with "!" stops the backward transcript scan
    entirely: older messages are not considered for a query.

    Args:
        message: Raw message text

    Returns:
        True if scanning must stop at this message
    """
    if message and message.strip().startswith("!"):
        logger.debug("Message starts with an exclamation mark, stopping")
        return True
    return False


def process_input_text(text: str) -> str:
    """
    Normalize message text before query extraction.

    Lowercases, strips punctuation and double quotes, folds newlines into
    spaces and collapses whitespace.

    Args:
        text: Raw message text

    Returns:
        Normalized text (may be empty)
    """
    text = text.lower()
    text = _PUNCTUATION.sub("", text)
    text = _QUOTES.sub("", text)
    text = text.replace("\r", "")
    text = re.sub(r"\n+", " ", text)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def strip_code_blocks(message: str) -> str:
    """Remove ```fenced``` blocks; they hold code or instructions, not queries."""
    return _TRIPLE_BACKTICK_BLOCK.sub("", message)


def find_backtick_query(message: str) -> str | None:
    """
    Return the trimmed contents of the first `single-backtick` span.

    Returns None when there is no span at all, and "" when the span is blank.
    """
    match = _BACKTICK_QUERY.search(message)
    if not match:
        return None

    query = match.group(1).strip()
    logger.debug(f"Backtick-enclosed substring found: '{query}'")
    return query


def expand_rule_template(template: str, match: re.Match) -> str:
    """
    Substitute $1..$99 in a rule template with the match's capture groups.

    A two-digit reference is used when that group exists, otherwise the first
    digit is the group and the second stays literal ("$10" with one group is
    group 1 followed by "0"). References to missing groups and $0 are left as
    they are; unmatched groups become "".
    """
    groups = match.re.groups

    def _group(ref: re.Match) -> str:
        digits = ref.group(1)
        if len(digits) == 2 and 1 <= int(digits) <= groups:
            return match.group(int(digits)) or ""

        index = int(digits[0])
        if 1 <= index <= groups:
            return (match.group(index) or "") + digits[1:]
        return ref.group(0)

    return _GROUP_REFERENCE.sub(_group, template)


def extract_regex_query(message: str, settings: WebSearchSettings) -> str | None:
    """
    Apply the configured regex rules in order; the first matching rule wins.

    Args:
        message: Normalized message
        settings: Current settings (rules are validated at load time)

    Returns:
        Expanded query, or None if no rule matched
    """
    for rule in settings.regex:
        match = rule.compiled().search(message)
        if not match:
            continue

        query = expand_rule_template(rule.query, match).strip()
        logger.debug(f"Regex rule matched: {rule.pattern!r} -> '{query}'")
        return query or None

    return None


def extract_trigger_phrase_query(message: str, settings: WebSearchSettings) -> str | None:
    """
    Take the words following the first configured trigger phrase found.

    Phrases are tried in list order and the first one present anywhere in
    the message wins, even if a later-listed phrase starts earlier.

    Args:
        message: Normalized message
        settings: Current settings

    Returns:
        Up to max_words words after the phrase, or None if no phrase occurs
    """
    for phrase in settings.trigger_phrases:
        phrase = phrase.lower()
        index = message.find(phrase)
        if index == -1:
            continue

        logger.debug(f"Trigger phrase found '{phrase}' at index {index}")
        tail = message[index + len(phrase) :].strip()
        query = " ".join(tail.split(" ")[: settings.max_words])
        return query or None

    logger.debug("No trigger phrase found")
    return None


def extract_search_query(message: str | None, settings: WebSearchSettings) -> str | None:
    """
    Derive a search query from a user message.

    Stages run in order and the first one producing a query wins:
    backticks, regex rules, trigger phrases. Each can be disabled.

    Args:
        message: Raw message text
        settings: Current settings

    Returns:
        Search query, or None if the message does not ask for a search
    """
    if not message:
        return None

    if message.strip().startswith("."):
        logger.debug("Message starts with a dot, ignoring")
        return None

    normalized = process_input_text(message)
    if not normalized:
        logger.debug("Processed message is empty")
        return None

    if settings.use_backticks:
        normalized = strip_code_blocks(normalized)
        query = find_backtick_query(normalized)
        if query is not None:
            # A backtick span decides the outcome even when it is blank
            return query or None

    if settings.use_regex:
        query = extract_regex_query(normalized, settings)
        if query:
            return query

    if settings.use_trigger_phrases:
        query = extract_trigger_phrase_query(normalized, settings)
        if query:
            logger.info(f"Extracted query: '{query}'")
            return query

    return None
