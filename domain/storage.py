"""Domain Storage Interface"""
from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorage(ABC):
    """Persistent client-side string storage, keyed by name"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None"""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one"""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key; missing keys are ignored"""
        pass
