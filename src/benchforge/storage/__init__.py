"""Persistence of the registry snapshot."""

from benchforge.storage.codec import PersistenceDecodeError, RegistryCodec
from benchforge.storage.file import FileKeyValueStore
from benchforge.storage.manager import KeyValueStore, StorageError
from benchforge.storage.memory import InMemoryKeyValueStore

__all__ = [
    "KeyValueStore",
    "StorageError",
    "InMemoryKeyValueStore",
    "FileKeyValueStore",
    "RegistryCodec",
    "PersistenceDecodeError",
]
