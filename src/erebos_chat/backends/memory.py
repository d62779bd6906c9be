"""In-process storage backend, used by tests and throwaway clients."""

import copy
from typing import Any

from ..provider import StorageBackend


class MemoryStorage(StorageBackend):
    """Keeps documents in a dict. Stored values are deep copies."""

    name = "memory"

    def __init__(self, initial: dict[str, Any] | None = None):
        self._documents: dict[str, Any] = copy.deepcopy(initial or {})

    def load(self, key: str) -> Any | None:
        if key not in self._documents:
            return None
        return copy.deepcopy(self._documents[key])

    def save(self, key: str, data: Any) -> None:
        self._documents[key] = copy.deepcopy(data)

    def keys(self) -> list[str]:
        return list(self._documents)
