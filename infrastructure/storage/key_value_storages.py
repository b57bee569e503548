"""Key-Value Storage Implementations"""
import json
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from domain.storage import KeyValueStorage

logger = logging.getLogger(__name__)


class InMemoryStorage(KeyValueStorage):
    """In-memory implementation of KeyValueStorage"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._storage: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        """Get value from memory"""
        return self._storage.get(key)

    def set(self, key: str, value: str) -> None:
        """Save value to memory"""
        self._storage[key] = value

    def remove(self, key: str) -> None:
        """Remove value from memory"""
        self._storage.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """KeyValueStorage kept in a JSON object on disk.

    The whole file is rewritten on every change. An unreadable file is
    treated as empty so a corrupt store behaves like a fresh one.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable storage file %s", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: not a JSON object", self.path)
            return {}
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, key: str) -> Optional[str]:
        """Get value from file"""
        value = self._read().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        """Save value to file"""
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        """Remove value from file"""
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
