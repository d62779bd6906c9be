"""Generation controller: drives one streamed reply at a time.

States are Idle and Streaming. Exactly one stream may be in flight across
the whole client; a send attempted while another is streaming is rejected,
not queued. Fragments are folded into the session in arrival order until
the stream ends, fails, or its cancel token fires. Content folded before a
cancellation or failure is kept and the reply is flagged as partial.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator

from .cancel import CancelToken
from .core import MODEL, USER, Character, FoldState, GenerationOutcome, Message, Settings
from .exceptions import GenerationAborted, StorageError
from .notifications import NotificationSink
from .provider import ChatGenerator
from .sessions import SessionStore
from .summarization import SummarizationTrigger

logger = logging.getLogger(__name__)


@dataclass
class Generation:
    """Bookkeeping for the stream currently in flight."""

    session_id: str
    token: CancelToken = field(default_factory=CancelToken)
    fold_state: FoldState = FoldState.AWAITING_FIRST_FRAGMENT
    message_id: str | None = None
    buffer: str = ""
    fragments: int = 0


class GenerationController:
    """Sends user messages and folds streamed replies into the session store."""

    def __init__(
        self,
        store: SessionStore,
        generator: ChatGenerator,
        notifications: NotificationSink,
        summarization: SummarizationTrigger | None = None,
    ):
        self.store = store
        self.generator = generator
        self.notifications = notifications
        self.summarization = summarization
        self._active: Generation | None = None

    @property
    def is_generating(self) -> bool:
        return self._active is not None

    @property
    def active_session_id(self) -> str | None:
        return self._active.session_id if self._active else None

    def stop(self) -> bool:
        """Cancel the in-flight generation. Returns False when idle."""
        if self._active is None:
            return False
        logger.info("Cancelling generation for session %s", self._active.session_id)
        return self._active.token.cancel()

    async def send_message(
        self,
        session_id: str,
        character: Character,
        settings: Settings,
        text: str,
    ) -> GenerationOutcome:
        text = text.strip()
        if not text:
            return GenerationOutcome.REJECTED
        if self._active is not None:
            logger.debug("Send ignored: a generation is already in flight")
            return GenerationOutcome.REJECTED
        session = self.store.get(session_id)
        if session is None:
            logger.debug("Send ignored: unknown session %s", session_id)
            return GenerationOutcome.REJECTED

        tail = session.tail
        user_message = Message.create(USER, text, after=tail.timestamp if tail else None)
        try:
            self.store.append_message(session_id, user_message)
        except StorageError as e:
            logger.error("Could not save message for session %s: %s", session_id, e)
            self.notifications.error(f"Generation failed: {e}")
            return GenerationOutcome.FAILED

        generation = Generation(session_id=session_id)
        self._active = generation
        try:
            outcome = await self._stream(generation, session.messages, character, settings, session.summary)
        finally:
            self._active = None

        if outcome is GenerationOutcome.COMPLETED:
            self.notifications.success("Response generated")
            if self.summarization is not None:
                await self.summarization.maybe_summarize(session_id, settings)
        return outcome

    async def _stream(
        self,
        generation: Generation,
        history: list[Message],
        character: Character,
        settings: Settings,
        summary: str,
    ) -> GenerationOutcome:
        token = generation.token
        try:
            stream = self.generator.generate(list(history), character, settings, summary or "", token)
            task = asyncio.ensure_future(self._fold(generation, stream))
            token.add_callback(task.cancel)
            try:
                await task
            except asyncio.CancelledError:
                if not token.cancelled:
                    raise
        except GenerationAborted:
            outcome = GenerationOutcome.CANCELLED
        except Exception as e:
            if token.cancelled:
                # Transports often surface an abort as their own error type
                logger.debug("Stream raised %r after cancellation", e)
                outcome = GenerationOutcome.CANCELLED
            else:
                logger.error("Generation failed for session %s: %s", generation.session_id, e)
                self.notifications.error(f"Generation failed: {e}")
                outcome = GenerationOutcome.FAILED
        else:
            outcome = GenerationOutcome.CANCELLED if token.cancelled else GenerationOutcome.COMPLETED

        if outcome is GenerationOutcome.CANCELLED:
            logger.info(
                "Generation cancelled for session %s after %d fragments",
                generation.session_id,
                generation.fragments,
            )
        if outcome is not GenerationOutcome.COMPLETED and generation.message_id is not None:
            try:
                self.store.mark_partial(generation.session_id, generation.message_id)
            except StorageError as e:
                logger.error("Could not save partial reply %s: %s", generation.message_id, e)
        return outcome

    async def _fold(self, generation: Generation, stream: AsyncIterator[str]) -> None:
        try:
            async for fragment in stream:
                if generation.token.cancelled:
                    break
                self._fold_fragment(generation, fragment)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

    def _fold_fragment(self, generation: Generation, fragment: str) -> None:
        if generation.fold_state is FoldState.AWAITING_FIRST_FRAGMENT:
            session = self.store.get(generation.session_id)
            tail = session.tail if session else None
            reply = Message.create(MODEL, "", after=tail.timestamp if tail else None)
            generation.message_id = reply.id
            generation.fold_state = FoldState.ACCUMULATING
            self.store.append_message(generation.session_id, reply)

        generation.buffer += fragment
        generation.fragments += 1
        if not self.store.update_last_message_content(generation.session_id, generation.message_id, generation.buffer):
            logger.warning(
                "Reply %s is no longer the tail of session %s; fragment not folded",
                generation.message_id,
                generation.session_id,
            )
