"""Encoding of the durable subset of registry state.

The persisted envelope mirrors the browser store the registry grew out of::

    {"state": {"models": [...], "isAuthenticated": false}, "version": 0}

Attachments are never written. Absent optional values (``benchmarkResults``,
``gpuUtilization``, ``user``) are omitted rather than stored as null.
"""

import json
from typing import Any, Optional

import structlog

from benchforge.models.registry import RegistryState
from benchforge.storage.manager import KeyValueStore, StorageError

logger = structlog.get_logger(__name__)

DEFAULT_STORAGE_KEY = "model-storage"
STORAGE_VERSION = 0


class PersistenceDecodeError(Exception):
    """Persisted record could not be parsed into registry state."""

    pass


class RegistryCodec:
    """Encodes and decodes registry snapshots for a key-value slot."""

    def __init__(self, key: str = DEFAULT_STORAGE_KEY, version: int = STORAGE_VERSION) -> None:
        self.key = key
        self.version = version

    def encode(self, state: RegistryState) -> str:
        """Serialize the durable fields of a snapshot."""
        payload = state.model_dump(mode="json", by_alias=True, exclude_none=True)
        return json.dumps({"state": payload, "version": self.version})

    def decode(self, raw: str) -> Optional[RegistryState]:
        """Rebuild a snapshot, or return None when the record is corrupt."""
        try:
            return self._parse(raw)
        except PersistenceDecodeError as e:
            logger.error("Failed to parse persisted state", key=self.key, error=str(e))
            return None

    def load(self, store: KeyValueStore) -> RegistryState:
        """Read the slot; empty or corrupt slots yield the default state."""
        try:
            raw = store.get_item(self.key)
        except StorageError as e:
            logger.error("Failed to read persisted state", key=self.key, error=str(e))
            self._discard(store)
            return RegistryState()

        if raw is None:
            return RegistryState()

        state = self.decode(raw)
        if state is None:
            self._discard(store)
            return RegistryState()

        logger.debug("Loaded persisted state", key=self.key, models=len(state.models))
        return state

    def save(self, store: KeyValueStore, state: RegistryState) -> None:
        """Write a snapshot. Storage failures are logged, not raised."""
        try:
            store.set_item(self.key, self.encode(state))
        except StorageError as e:
            logger.error("Failed to save state", key=self.key, error=str(e))

    def _discard(self, store: KeyValueStore) -> None:
        try:
            store.remove_item(self.key)
        except StorageError as e:
            logger.error("Failed to clear corrupt state", key=self.key, error=str(e))

    def _parse(self, raw: str) -> RegistryState:
        try:
            envelope = json.loads(raw)
            state = envelope["state"]
            if not isinstance(state, dict):
                raise TypeError("state is not an object")
            snapshot = RegistryState.model_validate(self._normalize(state))
        except (ValueError, TypeError, KeyError, RecursionError) as e:
            # ValidationError and JSONDecodeError are both ValueErrors
            raise PersistenceDecodeError(str(e)) from e

        ids = [model.id for model in snapshot.models]
        if len(ids) != len(set(ids)):
            raise PersistenceDecodeError("duplicate model ids")
        return snapshot

    @staticmethod
    def _normalize(state: dict[str, Any]) -> dict[str, Any]:
        models = state.get("models") or []
        if not isinstance(models, list):
            raise TypeError("models is not a list")
        is_authenticated = state.get("isAuthenticated")
        return {
            "models": [_normalize_model(m) for m in models],
            "isAuthenticated": False if is_authenticated is None else is_authenticated,
            "user": state.get("user") or None,
        }


def _normalize_model(record: Any) -> Any:
    if not isinstance(record, dict):
        return record
    record = {k: v for k, v in record.items() if k not in ("attachment", "file")}
    record["benchmarkResults"] = record.get("benchmarkResults") or None
    return record
