"""In-memory session store with whole-mapping persistence.

The store exclusively owns the ``session id -> ChatSession`` mapping. Every
mutating call writes the full mapping back to the storage backend.
Operations on an unknown session id are silent no-ops.
"""

import logging

from .config import SESSIONS_KEY
from .core import MODEL, Character, ChatSession, Message, generate_id, utc_now
from .provider import StorageBackend

logger = logging.getLogger(__name__)


class SessionStore:
    """Owns all chat sessions and the currently active one."""

    def __init__(self, storage: StorageBackend, sessions: dict[str, ChatSession] | None = None):
        self.storage = storage
        self._sessions: dict[str, ChatSession] = dict(sessions or {})
        self.active_session_id: str | None = None

    @classmethod
    def load(cls, storage: StorageBackend) -> "SessionStore":
        """Restore the session mapping from ``storage``."""
        raw = storage.load(SESSIONS_KEY) or {}
        sessions = {}
        for sid, data in raw.items():
            try:
                sessions[sid] = ChatSession.from_dict(data)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unreadable session %s: %s", sid, e)
        logger.info("Loaded %d sessions", len(sessions))
        return cls(storage, sessions)

    # ── Queries ──────────────────────────────────────────────────────

    def get(self, session_id: str | None) -> ChatSession | None:
        if session_id is None:
            return None
        return self._sessions.get(session_id)

    def find_by_character(self, character_id: str) -> ChatSession | None:
        for session in self._sessions.values():
            if session.character_id == character_id:
                return session
        return None

    def list_sessions(self) -> list[ChatSession]:
        return list(self._sessions.values())

    @property
    def active_session(self) -> ChatSession | None:
        return self.get(self.active_session_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    # ── Mutations ────────────────────────────────────────────────────

    def create_or_get_session(self, character_id: str, character: Character) -> ChatSession:
        """Return the session for ``character_id``, creating it if needed.

        A new session is seeded with one model message holding the
        character's first message. The resolved session becomes active.
        """
        session = self.find_by_character(character_id)
        if session is None:
            now = utc_now()
            greeting = Message.create(MODEL, character.first_message)
            session = ChatSession(
                id=generate_id(),
                character_id=character_id,
                name=f"Chat with {character.name}",
                messages=[greeting],
                last_updated=now,
            )
            self._sessions[session.id] = session
            logger.info("Created session %s for character %s", session.id, character_id)
            self._persist()
        self.active_session_id = session.id
        return session

    def append_message(self, session_id: str, message: Message) -> bool:
        session = self._sessions.get(session_id)
        if session is None:
            logger.debug("append_message: unknown session %s", session_id)
            return False
        session.messages.append(message)
        session.last_updated = utc_now()
        self._persist()
        return True

    def update_last_message_content(self, session_id: str, message_id: str, content: str) -> bool:
        """Replace the tail message's content if its id is ``message_id``.

        Never touches any other message. User messages are immutable, so a
        matching tail with the user role is left alone as well.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return False
        tail = session.tail
        if tail is None or tail.id != message_id or tail.role != MODEL:
            logger.debug("Tail of session %s is not %s; fold skipped", session_id, message_id)
            return False
        tail.content = content
        session.last_updated = utc_now()
        self._persist()
        return True

    def mark_partial(self, session_id: str, message_id: str) -> bool:
        """Flag a model message as holding an interrupted reply."""
        session = self._sessions.get(session_id)
        if session is None:
            return False
        for message in reversed(session.messages):
            if message.id == message_id:
                if message.role != MODEL:
                    return False
                message.partial = True
                self._persist()
                return True
        return False

    def set_summary(self, session_id: str, text: str) -> bool:
        session = self._sessions.get(session_id)
        if session is None:
            return False
        session.summary = text
        self._persist()
        return True

    def delete_sessions_for_character(self, character_id: str) -> list[str]:
        """Remove every session referencing ``character_id``; return their ids."""
        doomed = [sid for sid, s in self._sessions.items() if s.character_id == character_id]
        for sid in doomed:
            del self._sessions[sid]
        if self.active_session_id in doomed:
            self.active_session_id = None
        if doomed:
            logger.info("Deleted %d sessions for character %s", len(doomed), character_id)
            self._persist()
        return doomed

    def _persist(self) -> None:
        self.storage.save(SESSIONS_KEY, {sid: s.to_dict() for sid, s in self._sessions.items()})
