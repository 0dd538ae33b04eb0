"""In-memory key-value store for development and testing."""

from typing import Optional

from benchforge.storage.manager import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """In-memory implementation of the key-value store."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        """List occupied slots."""
        return list(self._items)

    def clear(self) -> None:
        """Clear all stored values (for testing)."""
        self._items.clear()
