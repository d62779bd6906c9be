"""Chat client facade: the surface the UI layer reads and drives."""

import logging

from .characters import CharacterRegistry
from .config import SETTINGS_KEY
from .core import Character, ChatSession, GenerationOutcome, Settings, Toast
from .generation import GenerationController
from .notifications import NotificationSink
from .provider import ChatGenerator, StorageBackend, Summarizer
from .sessions import SessionStore
from .summarization import SummarizationTrigger

logger = logging.getLogger(__name__)


class ChatClient:
    """Wires settings, characters, sessions and generation together."""

    def __init__(
        self,
        storage: StorageBackend,
        generator: ChatGenerator,
        summarizer: Summarizer | None = None,
        settings: Settings | None = None,
        characters: CharacterRegistry | None = None,
        sessions: SessionStore | None = None,
        notifications: NotificationSink | None = None,
    ):
        self.storage = storage
        self.settings = settings or Settings()
        self.characters = characters or CharacterRegistry(storage)
        self.sessions = sessions or SessionStore(storage)
        self.notifications = notifications or NotificationSink()
        trigger = SummarizationTrigger(summarizer, self.sessions) if summarizer else None
        self.controller = GenerationController(self.sessions, generator, self.notifications, trigger)
        self.active_character_id: str | None = None

    @classmethod
    def load(
        cls,
        storage: StorageBackend,
        generator: ChatGenerator,
        summarizer: Summarizer | None = None,
        notifications: NotificationSink | None = None,
    ) -> "ChatClient":
        """Restore settings, characters and sessions from ``storage``."""
        return cls(
            storage,
            generator,
            summarizer,
            settings=Settings.from_dict(storage.load(SETTINGS_KEY)),
            characters=CharacterRegistry.load(storage),
            sessions=SessionStore.load(storage),
            notifications=notifications,
        )

    # ── Read access ──────────────────────────────────────────────────

    @property
    def current_session(self) -> ChatSession | None:
        return self.sessions.active_session

    @property
    def current_character(self) -> Character | None:
        if self.active_character_id is None:
            return None
        return self.characters.get(self.active_character_id)

    @property
    def is_generating(self) -> bool:
        return self.controller.is_generating

    @property
    def toasts(self) -> list[Toast]:
        return self.notifications.active

    # ── Chat ─────────────────────────────────────────────────────────

    def select_character(self, character_id: str) -> ChatSession | None:
        character = self.characters.get(character_id)
        if character is None:
            return None
        self.active_character_id = character_id
        return self.sessions.create_or_get_session(character_id, character)

    async def send_message(self, text: str) -> GenerationOutcome:
        session = self.current_session
        character = self.current_character
        if session is None or character is None:
            return GenerationOutcome.REJECTED
        return await self.controller.send_message(session.id, character, self.settings, text)

    def stop_generation(self) -> bool:
        return self.controller.stop()

    # ── Characters & settings ────────────────────────────────────────

    def save_character(self, character: Character) -> Character:
        if self.characters.update(character):
            self.notifications.success("Character updated")
        else:
            self.characters.add(character)
            self.notifications.success("Character created")
        return character

    def delete_character(self, character_id: str) -> bool:
        if not self.characters.delete(character_id):
            return False
        self.sessions.delete_sessions_for_character(character_id)
        if self.active_character_id == character_id:
            self.active_character_id = None
            self.sessions.active_session_id = None
        self.notifications.success("Character deleted")
        return True

    def update_settings(self, **changes) -> Settings:
        merged = {**self.settings.to_dict(), **changes}
        self.settings = Settings.from_dict(merged)
        self.storage.save(SETTINGS_KEY, self.settings.to_dict())
        self.notifications.success("Settings saved")
        return self.settings
