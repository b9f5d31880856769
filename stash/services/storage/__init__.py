"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The JSON file is the real backend; the in-memory one is for tests.
"""

from stash.services.storage.interface import (
    DuplicateError,
    LoadError,
    NotFoundError,
    PersistenceError,
    PreferencesStorageInterface,
    SnapshotStorageInterface,
    StorageError,
)
from stash.services.storage.json_file import (
    JsonFilePreferencesStorage,
    JsonFileSnapshotStorage,
    snapshots_from_json,
    snapshots_to_json,
)
from stash.services.storage.memory import (
    InMemoryPreferencesStorage,
    InMemorySnapshotStorage,
)

__all__ = [
    # Interfaces
    "PreferencesStorageInterface",
    "SnapshotStorageInterface",
    # Exceptions
    "DuplicateError",
    "LoadError",
    "NotFoundError",
    "PersistenceError",
    "StorageError",
    # JSON file implementation
    "JsonFilePreferencesStorage",
    "JsonFileSnapshotStorage",
    "snapshots_from_json",
    "snapshots_to_json",
    # In-memory implementation
    "InMemoryPreferencesStorage",
    "InMemorySnapshotStorage",
]
