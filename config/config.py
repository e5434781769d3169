"""Configuration management for the web search service.

Settings are an immutable pydantic model passed explicitly into every call.
The process-wide SettingsCell is the only place they change (hot reload via
update()), and every change goes through full validation again.
"""

import os
import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "websearch.yaml"
ENV_PATH = Path(__file__).parent.parent / ".env"

DEFAULT_INSERTION_TEMPLATE = "***\nRelevant information from the web ({{query}}):\n{{text}}\n***"

DEFAULT_TRIGGER_PHRASES = [
    "search for",
    "look up",
    "find me",
    "tell me",
    "explain me",
    "can you",
    "how to",
    "how is",
    "how do you",
    "ways to",
    "who is",
    "who are",
    "who was",
    "who were",
    "who did",
    "what is",
    "what's",
    "what are",
    "what're",
    "what was",
    "what were",
    "what did",
    "what do",
    "where are",
    "where're",
    "where's",
    "where is",
    "where was",
    "where were",
    "where did",
    "where do",
    "where does",
    "where can",
    "how do i",
    "where do i",
    "how much",
    "definition of",
    "what happened",
    "why does",
    "why do",
    "why did",
    "why is",
    "why are",
    "why were",
    "when does",
    "when do",
    "when did",
    "when is",
    "when was",
    "when were",
    "how does",
    "meaning of",
]

DEFAULT_VISIT_BLACKLIST = [
    "youtube.com",
    "twitter.com",
    "facebook.com",
    "instagram.com",
]

# JS-style flags accepted in "/pattern/flags" rules; g/u/y have no Python meaning
_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "g": 0,
    "u": 0,
    "y": 0,
}


class SearchSource(str, Enum):
    """Supported search backends."""

    SERPAPI = "serpapi"
    SERPER = "serper"
    TAVILY = "tavily"
    SEARXNG = "searxng"
    EXTRAS = "extras"
    KOBOLDCPP = "koboldcpp"


@lru_cache(maxsize=256)
def compile_rule_pattern(pattern: str) -> re.Pattern:
    """
    Compile a regex rule pattern.

    Accepts either a plain pattern or a "/pattern/flags" literal.

    Raises:
        ValueError: If the pattern is empty, has unknown flags or fails to compile
    """
    if not pattern:
        raise ValueError("regex pattern must not be empty")

    body, flags = pattern, 0
    literal = re.fullmatch(r"/(.+)/([a-z]*)", pattern, re.DOTALL)
    if literal:
        body = literal.group(1)
        for flag in literal.group(2):
            if flag not in _REGEX_FLAGS:
                raise ValueError(f"unsupported regex flag '{flag}' in {pattern!r}")
            flags |= _REGEX_FLAGS[flag]

    try:
        return re.compile(body, flags)
    except re.error as e:
        raise ValueError(f"invalid regex {pattern!r}: {e}") from e


class RegexRule(BaseModel):
    """A query extraction rule: first matching pattern wins, $1..$n fill the template."""

    model_config = ConfigDict(frozen=True)

    pattern: str
    query: str = "$1"

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, value: str) -> str:
        compile_rule_pattern(value)
        return value

    def compiled(self) -> re.Pattern:
        return compile_rule_pattern(self.pattern)


class WebSearchSettings(BaseModel):
    """Immutable view of every web search option."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    enabled: bool = False
    source: SearchSource = Field(SearchSource.SERPAPI, validate_default=True)

    # Query extraction
    trigger_phrases: list[str] = Field(default_factory=lambda: list(DEFAULT_TRIGGER_PHRASES))
    max_words: int = Field(10, ge=1, le=100)
    use_backticks: bool = True
    use_trigger_phrases: bool = True
    use_regex: bool = False
    regex: list[RegexRule] = Field(default_factory=list)
    use_function_tool: bool = False

    # Result assembly
    budget: int = Field(1500, ge=1)
    cache_lifetime: int = Field(60 * 60 * 24 * 7, ge=0)  # seconds, 1 week
    include_images: bool = False

    # Prompt injection
    insertion_template: str = DEFAULT_INSERTION_TEMPLATE
    position: int = 0
    depth: int = Field(2, ge=0)

    # Link visiting
    visit_enabled: bool = False
    visit_count: int = Field(3, ge=1, le=10)
    visit_blacklist: list[str] = Field(default_factory=lambda: list(DEFAULT_VISIT_BLACKLIST))
    visit_file_header: str = 'Web search results for "{{query}}"\n\n'
    visit_block_header: str = "---\nInformation from {{link}}\n\n{{text}}\n\n"
    image_dir: str = "websearch_images"

    # Backend endpoints
    extras_url: str = "http://localhost:5100"
    extras_engine: str = "google"
    searxng_url: str = ""
    koboldcpp_url: str = ""
    request_timeout_s: float = Field(15.0, gt=0, le=300)

    @field_validator("trigger_phrases", "visit_blacklist")
    @classmethod
    def drop_blank_entries(cls, value: list[str]) -> list[str]:
        # A blank phrase matches every message; a blank host blacklists every link
        return [item.strip() for item in value if item and item.strip()]

    @field_validator("extras_url", "searxng_url", "koboldcpp_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")


@dataclass(frozen=True)
class Secrets:
    """Per-provider credentials, read from the environment."""

    serpapi_api_key: str = ""
    serper_api_key: str = ""
    tavily_api_key: str = ""

    @classmethod
    def from_env(cls) -> "Secrets":
        load_environment()
        return cls(
            serpapi_api_key=(os.getenv("SERPAPI_API_KEY") or "").strip(),
            serper_api_key=(os.getenv("SERPER_API_KEY") or "").strip(),
            tavily_api_key=(os.getenv("TAVILY_API_KEY") or "").strip(),
        )


def load_environment() -> None:
    """Load variables from the project .env file, if present."""
    if ENV_PATH.exists():
        load_dotenv(dotenv_path=ENV_PATH)


# Environment variables that override YAML values
_ENV_OVERRIDES = {
    "WEBSEARCH_ENABLED": "enabled",
    "WEBSEARCH_SOURCE": "source",
    "SEARXNG_URL": "searxng_url",
    "EXTRAS_URL": "extras_url",
    "KOBOLDCPP_URL": "koboldcpp_url",
}


def load_settings(path: str | Path | None = None) -> WebSearchSettings:
    """
    Load settings from defaults, a YAML file and environment overrides.

    Args:
        path: YAML file path (defaults to WEBSEARCH_CONFIG or config/websearch.yaml)

    Returns:
        Validated WebSearchSettings

    Raises:
        ValueError: If an explicitly given file does not exist
        pydantic.ValidationError: If any option is invalid
    """
    load_environment()

    explicit = path or os.getenv("WEBSEARCH_CONFIG")
    config_path = Path(explicit) if explicit else DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        loaded = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        if loaded is not None and not isinstance(loaded, dict):
            raise ValueError(f"Invalid settings file {config_path}: expected a mapping")
        data = loaded or {}
    elif explicit:
        raise ValueError(f"Settings file not found at {config_path}")

    for env_name, field_name in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            data[field_name] = value

    settings = WebSearchSettings.model_validate(data)
    logger.info(
        "Web search settings loaded",
        extra={
            "extra_fields": {
                "config_path": str(config_path),
                "source": settings.source,
                "enabled": settings.enabled,
            }
        },
    )
    return settings


class SettingsCell:
    """
    Process-wide holder of the current settings.

    Readers take a snapshot with get() and pass it down; writers go through
    update(), which revalidates the merged options before swapping them in.
    """

    def __init__(self, settings: WebSearchSettings | None = None):
        self._settings = settings

    def get(self) -> WebSearchSettings:
        if self._settings is None:
            self._settings = load_settings()
        return self._settings

    def update(self, **changes: Any) -> WebSearchSettings:
        """
        Apply option changes.

        Raises:
            pydantic.ValidationError: If the merged options are invalid
        """
        merged = {**self.get().model_dump(), **changes}
        self._settings = WebSearchSettings.model_validate(merged)
        logger.info(
            "Web search settings updated",
            extra={"extra_fields": {"changed": sorted(changes)}},
        )
        return self._settings


# Module-level singleton instance
_cell = SettingsCell()


def get_settings_cell() -> SettingsCell:
    """Get the global settings cell singleton."""
    return _cell
