"""Fire-and-forget user notifications with a fixed visible lifetime."""

import logging
import time
from typing import Callable

from .config import get_toast_lifetime
from .core import Toast, generate_id

logger = logging.getLogger(__name__)

KINDS = ("success", "error", "info")


class NotificationSink:
    """Holds live toasts in arrival order and retires them once expired.

    Expiry is checked against ``clock`` whenever the list is read or a new
    toast is pushed, so retirement needs no timers.
    """

    def __init__(self, lifetime: float | None = None, clock: Callable[[], float] = time.monotonic):
        self.lifetime = get_toast_lifetime() if lifetime is None else lifetime
        self._clock = clock
        self._toasts: list[Toast] = []

    def push(self, message: str, kind: str = "info") -> Toast:
        if kind not in KINDS:
            raise ValueError(f"Unknown notification kind: {kind}")
        now = self._clock()
        self._prune(now)
        toast = Toast(id=generate_id(), message=message, kind=kind, created=now, expires=now + self.lifetime)
        self._toasts.append(toast)
        logger.debug("Notification [%s]: %s", kind, message)
        return toast

    def success(self, message: str) -> Toast:
        return self.push(message, "success")

    def error(self, message: str) -> Toast:
        return self.push(message, "error")

    def info(self, message: str) -> Toast:
        return self.push(message, "info")

    def retire(self, toast_id: str) -> bool:
        before = len(self._toasts)
        self._toasts = [t for t in self._toasts if t.id != toast_id]
        return len(self._toasts) != before

    @property
    def active(self) -> list[Toast]:
        self._prune(self._clock())
        return list(self._toasts)

    def _prune(self, now: float) -> None:
        self._toasts = [t for t in self._toasts if t.expires > now]
