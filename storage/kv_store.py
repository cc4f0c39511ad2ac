"""
Key-Value Stores

The aggregation layer persists exactly one value (the current snapshot) in a
key-value slot. Two stores implement the same async get/set contract:

- InMemoryKeyValueStore: process-local, used in tests and when no storage
  path is configured
- JsonFileKeyValueStore: durable across restarts; the whole mapping is
  rewritten to a temp file and swapped in with os.replace, so readers see
  either the old or the new content, never a partial write
"""

import asyncio
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from core.logging import get_logger


class KeyValueStore(ABC):
    """Async get/set over JSON-compatible values."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any prior value."""


class InMemoryKeyValueStore(KeyValueStore):

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    async def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class JsonFileKeyValueStore(KeyValueStore):
    """
    JSON file backed store.

    File IO runs in a worker thread so the event loop is never blocked.
    A missing file reads as an empty store; a corrupt file raises ValueError
    on get so the caller can decide how to degrade.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self.logger = get_logger(__name__)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Corrupt store file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Corrupt store file {self.path}: top level is not an object")
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    async def get(self, key: str) -> Optional[Any]:
        data = await asyncio.to_thread(self._load)
        return data.get(key)

    async def set(self, key: str, value: Any) -> None:
        def _update():
            try:
                data = self._load()
            except ValueError as e:
                self.logger.warning(f"Overwriting unreadable store: {e}")
                data = {}
            data[key] = value
            self._save(data)

        await asyncio.to_thread(_update)
