"""Cooperative cancellation token shared by the controller and generators."""

import asyncio
import logging
from typing import Callable

from .exceptions import GenerationAborted

logger = logging.getLogger(__name__)


class CancelToken:
    """One-shot cancellation signal for a single generation.

    Generators poll ``cancelled`` (or ``raise_if_cancelled``) between
    fragments, or ``await wait()`` alongside their own I/O. Callbacks
    registered with ``add_callback`` run once, at the moment of cancellation.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self._callbacks: list[Callable[[], object]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> bool:
        """Signal cancellation. Returns False if already cancelled."""
        if self._event.is_set():
            return False
        self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error("Cancel callback %r failed: %s", callback, e)
        return True

    def add_callback(self, callback: Callable[[], object]) -> None:
        if self._event.is_set():
            callback()
        else:
            self._callbacks.append(callback)

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise GenerationAborted()
