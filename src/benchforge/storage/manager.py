"""Key-value storage abstraction for the persisted registry snapshot."""

from abc import ABC, abstractmethod
from typing import Optional


class StorageError(Exception):
    """Backing store could not be read or written."""

    pass


class KeyValueStore(ABC):
    """Abstract base class for string key-value slots."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the slot is empty."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Clear a slot. Clearing an empty slot is a no-op."""
        ...
