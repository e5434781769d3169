"""Interfaces of the host collaborators, plus in-memory implementations.

The host application owns the chat, the prompt and tool calling; the
pipeline only talks to them through these protocols. The in-memory
implementations back the HTTP server and the tests.
"""

from typing import Protocol

from utils.logger import get_logger

from .contracts import ChatMessage

logger = get_logger(__name__)


class PromptSink(Protocol):
    """Named-slot prompt injection. Position and depth are opaque placement hints."""

    def set_extension_prompt(self, marker: str, text: str, position: int, depth: int) -> None: ...


class ChatTranscript(Protocol):
    """Ordered chat messages plus attachment writes onto a message."""

    def messages(self) -> list[ChatMessage]: ...

    async def attach_file(self, index: int, name: str, content: str) -> str | None:
        """Attach a text file to the message; returns a file reference or None on failure."""
        ...

    async def attach_image(self, index: int, path: str) -> None: ...


class ToolCallingDelegate(Protocol):
    """Reports whether the model will call the search tool itself this turn."""

    def is_active(self) -> bool: ...


class InMemoryPromptSink:
    """Keeps the latest text per marker; last write wins."""

    def __init__(self):
        self._slots: dict[str, tuple[str, int, int]] = {}

    def set_extension_prompt(self, marker: str, text: str, position: int, depth: int) -> None:
        self._slots[marker] = (text, position, depth)

    def get(self, marker: str) -> str:
        slot = self._slots.get(marker)
        return slot[0] if slot else ""

    def placement(self, marker: str) -> tuple[int, int] | None:
        slot = self._slots.get(marker)
        return (slot[1], slot[2]) if slot else None


class InMemoryTranscript:
    """A transcript held in a list; attachments are recorded in message.extra."""

    def __init__(self, messages: list[ChatMessage] | None = None):
        self._messages = list(messages or [])

    def messages(self) -> list[ChatMessage]:
        return self._messages

    def _find(self, index: int) -> ChatMessage | None:
        for message in self._messages:
            if message.index == index:
                return message
        return None

    async def attach_file(self, index: int, name: str, content: str) -> str | None:
        message = self._find(index)
        if message is None:
            logger.debug(f"Failed to find message {index} for attachment")
            return None

        message.extra["file"] = {"name": name, "size": len(content), "text": content}
        return name

    async def attach_image(self, index: int, path: str) -> None:
        message = self._find(index)
        if message is None:
            logger.debug(f"Failed to find message {index} for image attachment")
            return
        message.extra.setdefault("images", []).append(path)


class StaticToolDelegate:
    def __init__(self, active: bool = False):
        self.active = active

    def is_active(self) -> bool:
        return self.active
