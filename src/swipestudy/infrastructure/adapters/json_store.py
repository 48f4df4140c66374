"""
JSON file persistence.

Implements KeyValueStore with one JSON document holding every key.
Writes go to a temp file first and are then renamed over the target.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from swipestudy.domain.interfaces import KeyValueStore

logger = logging.getLogger(__name__)


class JsonFileStore(KeyValueStore):
    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: dict[str, Any] | None = None

    def read(self, key: str) -> Any | None:
        return self._load().get(key)

    def write(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._flush(data)

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data

        if not self.path.exists():
            self._data = {}
            return self._data

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read store {self.path}: {e}")
            raise

        if not isinstance(raw, dict):
            logger.warning(f"Store {self.path} is not a JSON object; starting empty")
            raw = {}
        self._data = raw
        return self._data

    def _flush(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".store-", suffix=".json", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"[write] {self.path}: {', '.join(sorted(data))}")


class MemoryStore(KeyValueStore):
    """Process-local KeyValueStore, used for tests and dry runs."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self.data: dict[str, Any] = dict(initial or {})
        self.writes = 0

    def read(self, key: str) -> Any | None:
        return self.data.get(key)

    def write(self, key: str, value: Any) -> None:
        self.data[key] = value
        self.writes += 1
