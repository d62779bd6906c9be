"""Storage backends and a small registry to pick one by name."""

from pathlib import Path

from ..provider import StorageBackend
from .json_file import JsonFileStorage
from .memory import MemoryStorage

_BACKENDS: dict[str, type[StorageBackend]] = {
    JsonFileStorage.name: JsonFileStorage,
    MemoryStorage.name: MemoryStorage,
}


def get_storage(path: Path | None = None, kind: str = "file") -> StorageBackend:
    """Return a storage backend, rooted at ``path`` for file storage."""
    try:
        backend_class = _BACKENDS[kind]
    except KeyError:
        raise ValueError(f"Unknown storage backend: {kind}") from None
    if backend_class is JsonFileStorage:
        return JsonFileStorage(path)
    return backend_class()


__all__ = ["JsonFileStorage", "MemoryStorage", "get_storage"]
