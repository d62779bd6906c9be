"""Abstract interfaces for the collaborators the chat core depends on."""

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator

from .cancel import CancelToken
from .core import Character, Message, Settings


class ChatGenerator(ABC):
    """Streaming text-generation backend.

    Implementations wrap a concrete model API. They must stop producing
    fragments once ``cancel_token`` fires, preferably by raising
    ``GenerationAborted``; any other exception is reported as a failure.
    """

    @abstractmethod
    def generate(
        self,
        history: list[Message],
        character: Character,
        settings: Settings,
        prior_summary: str,
        cancel_token: CancelToken,
    ) -> AsyncIterator[str]:
        """Return a lazy, single-use stream of text fragments."""
        ...


class Summarizer(ABC):
    """Folds older messages into a running conversation summary."""

    @abstractmethod
    async def summarize(
        self,
        messages: list[Message],
        settings: Settings,
        prior_summary: str,
    ) -> str:
        """Return a new summary extending ``prior_summary`` with ``messages``."""
        ...


class StorageBackend(ABC):
    """Whole-document JSON storage keyed by name. No merge logic."""

    name: str  # "file", "memory"

    @abstractmethod
    def load(self, key: str) -> Any | None:
        """Return the stored document, or None if the key is absent."""
        ...

    @abstractmethod
    def save(self, key: str, data: Any) -> None:
        """Replace the document stored under ``key``."""
        ...
