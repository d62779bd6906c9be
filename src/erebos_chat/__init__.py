"""Character chat client core: sessions, streamed generation and summaries."""

from .cancel import CancelToken
from .client import ChatClient
from .core import Character, ChatSession, GenerationOutcome, Message, Settings
from .exceptions import ErebosError, GenerationAborted, StorageError
from .provider import ChatGenerator, StorageBackend, Summarizer

__all__ = [
    "CancelToken",
    "ChatClient",
    "Character",
    "ChatSession",
    "GenerationOutcome",
    "Message",
    "Settings",
    "ErebosError",
    "GenerationAborted",
    "StorageError",
    "ChatGenerator",
    "StorageBackend",
    "Summarizer",
]
