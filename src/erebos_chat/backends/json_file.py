"""JSON file storage backend.

Each document lives in its own ``<key>.json`` file under the data
directory. Writes go to a temporary file first and are moved into place,
so a crash mid-write never leaves a truncated document behind.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from ..config import get_data_path
from ..exceptions import StorageError
from ..provider import StorageBackend

logger = logging.getLogger(__name__)


class JsonFileStorage(StorageBackend):
    """Storage backend writing one JSON file per key."""

    name = "file"

    def __init__(self, base_path: Path | None = None):
        self._base_path = Path(base_path) if base_path else None

    def get_base_path(self) -> Path:
        return self._base_path or get_data_path()

    def path_for(self, key: str) -> Path:
        return self.get_base_path() / f"{key}.json"

    def load(self, key: str) -> Any | None:
        path = self.path_for(key)
        if not path.is_file():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to read %s: %s", path, e)
            return None

    def save(self, key: str, data: Any) -> None:
        base = self.get_base_path()
        path = self.path_for(key)
        tmp_name = None
        try:
            base.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=base, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            logger.error("Failed to write %s: %s", path, e)
            raise StorageError(f"Could not save {key}: {e}") from e
