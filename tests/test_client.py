"""Tests for the chat client facade and character registry."""

import pytest

from erebos_chat.characters import DEFAULT_CHARACTERS, CharacterRegistry
from erebos_chat.client import ChatClient
from erebos_chat.config import CHARACTERS_KEY, SETTINGS_KEY
from erebos_chat.core import Character, GenerationOutcome

from .conftest import FakeSummarizer, ScriptedGenerator


@pytest.fixture
def client(storage, character, other_character, notifications):
    storage.save(CHARACTERS_KEY, [character.to_dict(), other_character.to_dict()])
    return ChatClient.load(storage, ScriptedGenerator(["Hi ", "back", "!"]), notifications=notifications)


class TestCharacterRegistry:
    def test_defaults_when_nothing_saved(self, storage):
        registry = CharacterRegistry.load(storage)
        assert [c.id for c in registry.list_characters()] == [c.id for c in DEFAULT_CHARACTERS]

    def test_add_update_delete_persist(self, storage):
        registry = CharacterRegistry(storage)
        registry.add(Character(id="a", name="Ash"))
        registry.update(Character(id="a", name="Ashen"))
        registry.add(Character(id="b", name="Birch"))
        registry.delete("b")

        reloaded = CharacterRegistry.load(storage)
        assert [(c.id, c.name) for c in reloaded.list_characters()] == [("a", "Ashen")]

    def test_add_duplicate_rejected(self, storage):
        registry = CharacterRegistry(storage)
        registry.add(Character(id="a", name="Ash"))
        with pytest.raises(ValueError):
            registry.add(Character(id="a", name="Again"))

    def test_search(self, storage, character, other_character):
        registry = CharacterRegistry(storage, [character, other_character])
        assert registry.search("WIZARD") == [character]
        assert registry.search("dar") == [other_character]
        assert registry.search("  ") == [character, other_character]

    def test_load_accepts_camel_case(self, storage):
        storage.save(CHARACTERS_KEY, [{"id": "x", "name": "X", "firstMessage": "Yo", "avatarUrl": "x.png"}])
        character = CharacterRegistry.load(storage).get("x")
        assert character.first_message == "Yo"
        assert character.avatar_url == "x.png"


class TestChatClient:
    def test_select_character_creates_then_reuses_session(self, client, character):
        first = client.select_character(character.id)
        second = client.select_character(character.id)
        assert first.id == second.id
        assert client.current_session is first
        assert client.current_character.id == character.id

    def test_select_unknown_character(self, client):
        assert client.select_character("ghost") is None
        assert client.current_session is None

    @pytest.mark.asyncio
    async def test_send_message_example(self, client, character):
        session = client.select_character(character.id)
        outcome = await client.send_message("Hi")
        assert outcome is GenerationOutcome.COMPLETED
        assert len(session.messages) == 3
        assert session.messages[-1].content == "Hi back!"
        assert not client.is_generating

    @pytest.mark.asyncio
    async def test_send_without_selection_is_rejected(self, client):
        assert await client.send_message("Hi") is GenerationOutcome.REJECTED

    def test_delete_character_removes_its_sessions_only(self, client, character, other_character):
        doomed = client.select_character(character.id)
        kept = client.select_character(other_character.id)
        client.select_character(character.id)

        assert client.delete_character(character.id) is True

        assert client.sessions.get(doomed.id) is None
        assert client.sessions.get(kept.id) is kept
        assert client.current_session is None
        assert client.current_character is None
        assert client.characters.get(character.id) is None
        assert ("success", "Character deleted") in [(t.kind, t.message) for t in client.toasts]

    def test_delete_unknown_character(self, client):
        assert client.delete_character("ghost") is False

    def test_save_character_create_and_update(self, client):
        client.save_character(Character(id="new", name="Newt"))
        client.save_character(Character(id="new", name="Newton"))
        assert client.characters.get("new").name == "Newton"
        assert [t.message for t in client.toasts] == ["Character created", "Character updated"]

    def test_update_settings_persists_and_merges(self, client, storage):
        settings = client.update_settings(user_name="Rin", temperature=0.5)
        assert settings.user_name == "Rin"
        assert settings.temperature == 0.5
        assert storage.load(SETTINGS_KEY)["user_name"] == "Rin"
        assert client.toasts[-1].message == "Settings saved"

    def test_load_restores_everything(self, client, storage, character):
        session = client.select_character(character.id)
        client.update_settings(user_name="Rin")

        restored = ChatClient.load(storage, ScriptedGenerator([]))
        assert restored.settings.user_name == "Rin"
        assert restored.sessions.get(session.id) is not None
        assert restored.characters.get(character.id) is not None

    @pytest.mark.asyncio
    async def test_summarizer_is_wired(self, storage, character, notifications):
        storage.save(CHARACTERS_KEY, [character.to_dict()])
        summarizer = FakeSummarizer(result="so far")
        client = ChatClient.load(storage, ScriptedGenerator(["ok"]), summarizer, notifications=notifications)
        session = client.select_character(character.id)
        for i in range(10):
            await client.send_message(f"turn {i}")
        # 1 greeting + 10 * (user + reply) = 21 messages, over the default threshold
        assert len(session.messages) == 21
        assert len(summarizer.calls) == 1
        assert session.summary == "so far"
