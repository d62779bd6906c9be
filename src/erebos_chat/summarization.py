"""Best-effort summarization of older conversation history."""

import logging

from .config import get_summary_keep_recent, get_summary_trigger
from .core import Settings
from .exceptions import StorageError
from .provider import Summarizer
from .sessions import SessionStore

logger = logging.getLogger(__name__)


class SummarizationTrigger:
    """Summarizes all but the most recent messages once a session grows long.

    Failures are logged and swallowed: a summary is never required for a
    send to succeed, and nothing is retried automatically.
    """

    def __init__(
        self,
        summarizer: Summarizer,
        store: SessionStore,
        threshold: int | None = None,
        keep_recent: int | None = None,
    ):
        self.summarizer = summarizer
        self.store = store
        self.threshold = get_summary_trigger() if threshold is None else threshold
        self.keep_recent = get_summary_keep_recent() if keep_recent is None else keep_recent

    def should_summarize(self, message_count: int) -> bool:
        return message_count > self.threshold

    async def maybe_summarize(self, session_id: str, settings: Settings) -> bool:
        """Run one summarization pass if the session is over the threshold.

        Returns True when a new summary was stored.
        """
        session = self.store.get(session_id)
        if session is None or not self.should_summarize(len(session.messages)):
            return False

        older = session.messages[:-self.keep_recent] if self.keep_recent else list(session.messages)
        try:
            summary = await self.summarizer.summarize(list(older), settings, session.summary)
        except Exception as e:
            logger.error("Summarization failed for session %s: %s", session_id, e)
            return False

        if not summary:
            logger.debug("Summarizer returned nothing for session %s", session_id)
            return False
        try:
            stored = self.store.set_summary(session_id, summary)
        except StorageError as e:
            logger.error("Summarization failed for session %s: %s", session_id, e)
            return False
        logger.info("Summarized %d messages of session %s", len(older), session_id)
        return stored
