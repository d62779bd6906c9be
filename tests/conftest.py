"""Shared test fixtures for erebos-chat."""

import asyncio

import pytest

from erebos_chat.backends.memory import MemoryStorage
from erebos_chat.core import Character, Settings
from erebos_chat.exceptions import StorageError
from erebos_chat.notifications import NotificationSink
from erebos_chat.provider import ChatGenerator, Summarizer
from erebos_chat.sessions import SessionStore


class FakeClock:
    """Manually advanced clock for notification expiry."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedGenerator(ChatGenerator):
    """Yields a fixed list of fragments.

    - ``fail_at``: raise ``error`` instead of yielding the fragment at that index
    - ``hang_at``: block forever before yielding the fragment at that index
    - ``on_yielded``: called with the index after each fragment is consumed
    - ``pause``: yield to the event loop between fragments
    """

    def __init__(self, fragments, fail_at=None, error=None, hang_at=None, on_yielded=None, pause=True):
        self.fragments = list(fragments)
        self.fail_at = fail_at
        self.error = error or RuntimeError("backend exploded")
        self.hang_at = hang_at
        self.on_yielded = on_yielded
        self.pause = pause
        self.calls = []
        self.closed = False

    def generate(self, history, character, settings, prior_summary, cancel_token):
        self.calls.append({
            "history": list(history),
            "character": character,
            "settings": settings,
            "prior_summary": prior_summary,
            "cancel_token": cancel_token,
        })
        return self._stream()

    async def _stream(self):
        try:
            for i, fragment in enumerate(self.fragments):
                if self.fail_at == i:
                    raise self.error
                if self.hang_at == i:
                    await asyncio.Event().wait()
                yield fragment
                if self.on_yielded:
                    self.on_yielded(i)
                if self.pause:
                    await asyncio.sleep(0)
            if self.fail_at is not None and self.fail_at >= len(self.fragments):
                raise self.error
        finally:
            self.closed = True


class FlakyStorage(MemoryStorage):
    """Memory storage whose saves start failing on demand."""

    def __init__(self):
        super().__init__()
        self.saves_left = None

    def fail_after(self, saves: int) -> None:
        self.saves_left = saves

    def save(self, key, data):
        if self.saves_left is not None:
            if self.saves_left <= 0:
                raise StorageError("disk full")
            self.saves_left -= 1
        super().save(key, data)


class FakeSummarizer(Summarizer):
    def __init__(self, result="A summary.", error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def summarize(self, messages, settings, prior_summary):
        self.calls.append({"messages": list(messages), "prior_summary": prior_summary})
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def character():
    return Character(
        id="char-c",
        name="Corvin",
        tagline="A tired wizard",
        description="Has seen too many adventurers.",
        first_message="Hello there.",
    )


@pytest.fixture
def other_character():
    return Character(id="char-d", name="Dara", first_message="Well met.")


@pytest.fixture
def settings():
    return Settings(user_name="Tester", model="test-model")


@pytest.fixture
def store(storage):
    return SessionStore(storage)


@pytest.fixture
def flaky_storage():
    return FlakyStorage()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifications(clock):
    return NotificationSink(lifetime=3.0, clock=clock)


def echo_generator_factory():
    """Import-path factory used to exercise EREBOS_GENERATOR loading."""
    return ScriptedGenerator(["echo"])
