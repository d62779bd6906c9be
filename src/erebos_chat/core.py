"""Core data models for erebos-chat."""

import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

USER = "user"
MODEL = "model"


def generate_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_ts(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, (int, float)):
        # Millisecond epoch values written by older clients
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return datetime.fromisoformat(value)


@dataclass
class Character:
    """A persona the user can chat with."""

    id: str
    name: str
    tagline: str = ""
    description: str = ""
    first_message: str = ""  # seed text for new sessions
    avatar_url: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "tagline": self.tagline,
            "description": self.description,
            "first_message": self.first_message,
            "avatar_url": self.avatar_url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Character":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            tagline=data.get("tagline", ""),
            description=data.get("description", ""),
            first_message=data.get("first_message", data.get("firstMessage", "")),
            avatar_url=data.get("avatar_url", data.get("avatarUrl", "")),
        )


@dataclass
class Message:
    """A single message within a chat session.

    ``partial`` marks a model reply whose stream was cancelled or failed
    after some content had already been folded in. The content is kept.
    """

    id: str
    role: str  # "user" | "model"
    content: str
    timestamp: datetime
    partial: bool = False

    @classmethod
    def create(cls, role: str, content: str, after: Optional[datetime] = None) -> "Message":
        """Build a fresh message whose timestamp never precedes ``after``."""
        now = utc_now()
        if after is not None and now < after:
            now = after
        return cls(id=generate_id(), role=role, content=content, timestamp=now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "partial": self.partial,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Message":
        return cls(
            id=data["id"],
            role=data["role"],
            content=data.get("content", ""),
            timestamp=_parse_ts(data.get("timestamp")) or utc_now(),
            partial=bool(data.get("partial", False)),
        )


@dataclass
class ChatSession:
    """A conversation with exactly one character.

    ``character_id`` is a weak reference; the session does not own the
    character. Messages are kept in conversation order and never reordered.
    """

    id: str
    character_id: str
    name: str
    messages: list[Message] = field(default_factory=list)
    summary: str = ""
    last_updated: datetime = field(default_factory=utc_now)

    @property
    def tail(self) -> Optional[Message]:
        return self.messages[-1] if self.messages else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "character_id": self.character_id,
            "name": self.name,
            "messages": [m.to_dict() for m in self.messages],
            "summary": self.summary,
            "last_updated": self.last_updated.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ChatSession":
        return cls(
            id=data["id"],
            character_id=data.get("character_id", data.get("characterId", "")),
            name=data.get("name", ""),
            messages=[Message.from_dict(m) for m in data.get("messages", [])],
            summary=data.get("summary") or "",
            last_updated=_parse_ts(data.get("last_updated", data.get("lastUpdated"))) or utc_now(),
        )


@dataclass
class Settings:
    """User preferences passed through to the generator and summarizer."""

    user_name: str = "User"
    user_avatar_url: str = ""
    model: str = ""
    temperature: float = 0.9
    max_output_tokens: int = 1024
    system_prompt: str = ""
    thought_color: str = "#a1a1aa"
    dialogue_color: str = "#f97316"

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Settings":
        """Merge saved values over the defaults, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})


@dataclass
class Toast:
    """A transient user notification."""

    id: str
    message: str
    kind: str  # "success" | "error" | "info"
    created: float
    expires: float

    def to_dict(self) -> dict:
        return {"id": self.id, "message": self.message, "kind": self.kind}


class GenerationOutcome(str, Enum):
    """How a send request ended."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"
    REJECTED = "rejected"


class FoldState(str, Enum):
    """Whether the next fragment creates the reply message or extends it."""

    AWAITING_FIRST_FRAGMENT = "awaiting-first-fragment"
    ACCUMULATING = "accumulating"
