"""Character registry persisted as a single document."""

import logging

from .config import CHARACTERS_KEY
from .core import Character
from .provider import StorageBackend

logger = logging.getLogger(__name__)

DEFAULT_CHARACTERS = [
    Character(
        id="char-seraphine",
        name="Seraphine",
        tagline="Exiled court astronomer",
        description="Maps the heavens from a crumbling tower and trades star charts for secrets.",
        first_message="*She lowers her brass telescope.* \"You climbed all those stairs just to see me?\"",
    ),
    Character(
        id="char-kael",
        name="Kael",
        tagline="Mercenary with a conscience",
        description="A sellsword who keeps a ledger of every debt, owed and owing.",
        first_message="*He doesn't look up from sharpening his blade.* \"State your business.\"",
    ),
    Character(
        id="char-nyx",
        name="Nyx",
        tagline="Keeper of the night market",
        description="Runs a market that only appears when the moon is new.",
        first_message="\"Welcome, traveler. Everything here has a price, though rarely in coin.\"",
    ),
]


class CharacterRegistry:
    """Ordered collection of characters. Every mutation persists the list."""

    def __init__(self, storage: StorageBackend, characters: list[Character] | None = None):
        self.storage = storage
        self._characters: list[Character] = list(characters or [])

    @classmethod
    def load(cls, storage: StorageBackend) -> "CharacterRegistry":
        raw = storage.load(CHARACTERS_KEY)
        if raw is None:
            logger.info("No saved characters; using defaults")
            return cls(storage, [Character(**c.to_dict()) for c in DEFAULT_CHARACTERS])
        characters = []
        for data in raw:
            try:
                characters.append(Character.from_dict(data))
            except (KeyError, TypeError) as e:
                logger.warning("Skipping unreadable character: %s", e)
        return cls(storage, characters)

    def list_characters(self) -> list[Character]:
        return list(self._characters)

    def get(self, character_id: str) -> Character | None:
        for character in self._characters:
            if character.id == character_id:
                return character
        return None

    def search(self, query: str) -> list[Character]:
        """Case-insensitive match against name, tagline and description."""
        q = query.strip().lower()
        if not q:
            return self.list_characters()
        return [
            c for c in self._characters
            if q in c.name.lower()
            or q in c.tagline.lower()
            or q in c.description.lower()
        ]

    def add(self, character: Character) -> Character:
        if self.get(character.id) is not None:
            raise ValueError(f"Character already exists: {character.id}")
        self._characters.append(character)
        self._persist()
        return character

    def update(self, character: Character) -> bool:
        for i, existing in enumerate(self._characters):
            if existing.id == character.id:
                self._characters[i] = character
                self._persist()
                return True
        return False

    def delete(self, character_id: str) -> bool:
        before = len(self._characters)
        self._characters = [c for c in self._characters if c.id != character_id]
        if len(self._characters) == before:
            return False
        self._persist()
        return True

    def __len__(self) -> int:
        return len(self._characters)

    def _persist(self) -> None:
        self.storage.save(CHARACTERS_KEY, [c.to_dict() for c in self._characters])
